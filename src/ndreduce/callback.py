import inspect
from collections.abc import Callable, MutableSequence, Sequence
from typing import Any, TypeAlias

from .config import ReduceCallConfig
from .indexing import ind2sub, vind2bind
from .ndarray import NdarrayView

TransformCallback: TypeAlias = Callable[..., Any]
CallbackInvoker: TypeAlias = Callable[[Any, tuple[int, ...], int, Any], Any]

_MAX_CALLBACK_ARGS = 4


def resolve_callback_arity(clbk: TransformCallback, *, bound: bool = False) -> int:
    """Return how many of `(value, indices, index, array)` a callback accepts."""
    try:
        signature = inspect.signature(clbk)
    except (TypeError, ValueError):
        return 1
    count = 0
    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            count = _MAX_CALLBACK_ARGS + int(bound)
            break
        if parameter.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    if bound:
        count -= 1
    return min(max(count, 1), _MAX_CALLBACK_ARGS)


def compile_callback_invoker(
    clbk: TransformCallback,
    config: ReduceCallConfig,
) -> CallbackInvoker:
    """Compile a fixed-arity invoker for one user callback."""
    arity = resolve_callback_arity(clbk, bound=config.has_this_arg)
    if config.has_this_arg:
        context = config.this_arg
        if arity == 1:
            return lambda value, indices, index, array: clbk(context, value)
        if arity == 2:
            return lambda value, indices, index, array: clbk(context, value, indices)
        if arity == 3:
            return lambda value, indices, index, array: clbk(
                context, value, indices, index
            )
        return lambda value, indices, index, array: clbk(
            context, value, indices, index, array
        )
    if arity == 1:
        return lambda value, indices, index, array: clbk(value)
    if arity == 2:
        return lambda value, indices, index, array: clbk(value, indices)
    if arity == 3:
        return lambda value, indices, index, array: clbk(value, indices, index)
    return clbk


class CallbackWrapper:
    """Element accessor passing every visited value through a user callback.

    Reduction routines call the wrapper with the value they read and its
    linear index within the reshaped one-dimensional view. That index is also
    the logical index of the core sub-array view in its own storage order,
    which lets the wrapper rebuild the full input subscript.
    """

    __slots__ = ("_array", "_view", "_ibuf", "_ldims", "_lidx", "_cdims", "_invoke")

    def __init__(
        self,
        array: Any,
        view: NdarrayView,
        ibuf: MutableSequence[int],
        ldims: Sequence[int],
        lidx: Sequence[int],
        cdims: Sequence[int],
        invoke: CallbackInvoker,
    ) -> None:
        self._array = array
        self._view = view
        self._ibuf = ibuf
        self._ldims = ldims
        self._lidx = lidx
        self._cdims = cdims
        self._invoke = invoke

    def __call__(self, value: Any, index: int, *args: Any) -> Any:
        return self._invoke(value, self.indices(index), index, self._array)

    def get(self, index: int) -> Any:
        """Read the raw element at one core linear index and transform it."""
        view = self._view
        position = vind2bind(
            view.shape, view.strides, view.offset, view.order, index, "throw"
        )
        return self(view.data[position], index)

    def indices(self, index: int) -> tuple[int, ...]:
        """Return the full input subscript for one core linear index."""
        view = self._view
        core = ind2sub(view.shape, view.order, index, "throw")
        ibuf = self._ibuf
        for dim, subscript in zip(self._ldims, self._lidx):
            ibuf[dim] = subscript
        for dim, subscript in zip(self._cdims, core):
            ibuf[dim] = subscript
        return tuple(ibuf)


def wrap(
    array: Any,
    view: NdarrayView,
    ibuf: MutableSequence[int],
    ldims: Sequence[int],
    lidx: Sequence[int],
    cdims: Sequence[int],
    invoke: CallbackInvoker,
) -> CallbackWrapper:
    """Bind one callback accessor to the current loop position."""
    return CallbackWrapper(array, view, ibuf, ldims, lidx, cdims, invoke)


__all__ = [
    "CallbackInvoker",
    "CallbackWrapper",
    "TransformCallback",
    "compile_callback_invoker",
    "resolve_callback_arity",
    "wrap",
]
