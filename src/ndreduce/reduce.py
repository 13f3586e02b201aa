import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeAlias

try:
    from typing import Never
except ImportError:  # pragma: no cover
    from typing_extensions import Never

from .callback import TransformCallback, compile_callback_invoker
from .config import MISSING, ReduceCallConfig
from .diagnostics import ErrorCode, InvalidArgumentError
from .indexing import (
    COLUMN_MAJOR_LAYOUT,
    ROW_MAJOR_LAYOUT,
    indices_complement,
    normalize_dims,
    numel,
    offsets,
    strides2order,
    take_indexed2,
)
from .kernels import LoopSpace, ReductionRoutine, ReductionStep, select_kernel
from .ndarray import NdarrayLike, NdarrayView, as_view
from .strategy import resolve_reshape_strategy

logger = logging.getLogger(__name__)

ArrayArgument: TypeAlias = NdarrayLike | Mapping[str, Any]
Reducer: TypeAlias = Callable[..., None]


def unary_reduce_strided1d_by(
    fcn: ReductionRoutine,
    arrays: Sequence[ArrayArgument],
    dims: Sequence[int],
    clbk: TransformCallback,
    *,
    options: object = MISSING,
    this_arg: object = MISSING,
) -> None:
    """Reduce an input ndarray over `dims` and assign results to an output ndarray.

    `arrays` holds the input ndarray, the output ndarray, then any auxiliary
    ndarrays sharing the output's shape. For every output position the
    reduction routine receives the input sub-array spanning `dims` (reshaped to
    one dimension) followed by one zero-dimensional view per auxiliary array,
    and an accessor which passes each visited element through `clbk`.

    `options` is forwarded to `fcn` only when supplied. `this_arg`, when
    supplied, is passed to `clbk` as its first argument.
    """
    _require_callable(fcn, name="reduction routine")
    _require_callable(clbk, name="callback")
    config = ReduceCallConfig(options=options, this_arg=this_arg)

    if len(arrays) < 2:
        raise InvalidArgumentError(
            code=ErrorCode.INVALID_ARRAYS,
            message=(
                "invalid arrays: expected an input and an output ndarray, "
                f"got {len(arrays)} arrays"
            ),
            help="pass [input, output, *auxiliary] ndarrays",
            related=("reduction arrays",),
            data={"expected": 2, "got": len(arrays)},
        )
    normalized = [as_view(array, position=index) for index, array in enumerate(arrays)]
    x = normalized[0]
    y = normalized[1]
    auxiliary = normalized[2:]

    ndims = x.ndim
    cdims = normalize_dims(dims, ndims)
    if ndims - len(cdims) != y.ndim:
        raise InvalidArgumentError(
            code=ErrorCode.LOOP_DIMS_MISMATCH,
            message=(
                f"loop dims mismatch: reducing {len(cdims)} of {ndims} input "
                f"dimensions leaves {ndims - len(cdims)} loop dimensions, "
                f"but the output has {y.ndim}"
            ),
            help="the output must have one dimension per non-reduced input dimension",
            related=("dimension partition",),
            data={
                "ndims": ndims,
                "core": len(cdims),
                "output": y.ndim,
            },
        )
    ldims = indices_complement(ndims, cdims)
    loop_shape, loop_strides = take_indexed2(x.shape, x.strides, ldims)
    core_shape, core_strides = take_indexed2(x.shape, x.strides, cdims)
    if loop_shape != y.shape:
        _raise_shape_mismatch(position=1, expected=loop_shape, got=y.shape)
    for position, array in enumerate(auxiliary, start=2):
        if array.shape != loop_shape:
            _raise_shape_mismatch(position=position, expected=loop_shape, got=array.shape)

    views = [
        NdarrayView(
            dtype=x.dtype,
            data=x.data,
            shape=core_shape,
            strides=core_strides,
            offset=x.offset,
            order=x.order,
        )
    ]
    for array in auxiliary:
        views.append(
            NdarrayView(
                dtype=array.dtype,
                data=array.data,
                shape=(),
                strides=(),
                offset=array.offset,
                order=array.order,
            )
        )

    step = ReductionStep(
        fcn=fcn,
        array=arrays[0],
        output=y.data,
        views=views,
        arguments=list(views),
        strategy=resolve_reshape_strategy(views[0]),
        ibuf=[0] * ndims,
        ldims=ldims,
        cdims=cdims,
        invoke=compile_callback_invoker(clbk, config),
        config=config,
    )

    if not ldims:
        logger.debug("reducing all %d dimensions to a single element", ndims)
        step(offsets(normalized), ())
        return
    if numel(loop_shape) == 0:
        logger.debug("skipping reduction over empty loop shape %s", loop_shape)
        return

    layout = strides2order(loop_strides)
    if layout in (ROW_MAJOR_LAYOUT, COLUMN_MAJOR_LAYOUT):
        is_row_major = layout == ROW_MAJOR_LAYOUT
    else:
        is_row_major = x.order == "row-major"
    space = LoopSpace(
        shape=loop_shape,
        strides=(loop_strides, *(array.strides for array in normalized[1:])),
        offsets=tuple(offsets(normalized)),
        is_row_major=is_row_major,
    )
    kernel = select_kernel(len(ldims))
    logger.debug(
        "reducing core shape %s over loop shape %s with %s",
        core_shape,
        loop_shape,
        kernel.__name__,
    )
    kernel(step, space)


def factory(fcn: ReductionRoutine) -> Reducer:
    """Return a reducer over ndarray dimensions built on a 1-D reduction routine.

    The routine is called as `fcn(views, accessor)` or, when the reducer
    receives `options`, as `fcn(views, options, accessor)`, and must return
    the reduced scalar.
    """
    _require_callable(fcn, name="reduction routine")

    def reducer(
        arrays: Sequence[ArrayArgument],
        dims: Sequence[int],
        clbk: TransformCallback,
        *,
        options: object = MISSING,
        this_arg: object = MISSING,
    ) -> None:
        """Reduce `arrays[0]` over `dims` into `arrays[1]` through `clbk`."""
        unary_reduce_strided1d_by(
            fcn,
            arrays,
            dims,
            clbk,
            options=options,
            this_arg=this_arg,
        )

    return reducer


def _require_callable(value: object, *, name: str) -> None:
    if not callable(value):
        raise InvalidArgumentError(
            code=ErrorCode.NOT_CALLABLE,
            message=f"not callable: {name} must be callable, got {value!r}",
            help=f"pass a function as the {name}",
            related=("reduction arguments",),
            data={"argument": name},
        )


def _raise_shape_mismatch(
    *,
    position: int,
    expected: tuple[int, ...],
    got: tuple[int, ...],
) -> Never:
    raise InvalidArgumentError(
        code=ErrorCode.SHAPE_MISMATCH,
        message=(
            f"shape mismatch: array {position} has shape {list(got)}, "
            f"expected loop shape {list(expected)}"
        ),
        help="output and auxiliary arrays must match the input's loop dimensions",
        related=("dimension partition",),
        data={"position": position},
    )


__all__ = [
    "Reducer",
    "factory",
    "unary_reduce_strided1d_by",
]
