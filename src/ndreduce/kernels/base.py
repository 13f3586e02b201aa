from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias

from ..callback import CallbackInvoker, wrap
from ..config import Order, ReduceCallConfig
from ..indexing import set_view_offsets
from ..ndarray import Buffer, NdarrayView
from ..strategy import ReshapeStrategy

ReductionRoutine: TypeAlias = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class LoopSpace:
    """Loop-dimension iteration space shared by every array of one call.

    `strides` and `offsets` hold one entry per array in call order: the input
    (restricted to its loop dimensions), the output, then auxiliary arrays.
    """

    shape: tuple[int, ...]
    strides: tuple[tuple[int, ...], ...]
    offsets: tuple[int, ...]
    is_row_major: bool

    @property
    def order(self) -> Order:
        """Logical iteration order of the loop index space."""
        return "row-major" if self.is_row_major else "column-major"


@dataclass(frozen=True, slots=True)
class ReductionStep:
    """Per-position body shared by every loop kernel.

    `views` are mutated in place on every step; `arguments` is the list handed
    to the reduction routine, whose first entry is replaced by the reshaped
    core view.
    """

    fcn: ReductionRoutine
    array: Any
    output: Buffer
    views: list[NdarrayView]
    arguments: list[NdarrayView]
    strategy: ReshapeStrategy
    ibuf: list[int]
    ldims: tuple[int, ...]
    cdims: tuple[int, ...]
    invoke: CallbackInvoker
    config: ReduceCallConfig

    def __call__(self, positions: Sequence[int], subscripts: Sequence[int]) -> None:
        """Reduce the core sub-array at one loop position into the output."""
        views = self.views
        set_view_offsets(views, positions)
        arguments = self.arguments
        arguments[0] = self.strategy(views[0])
        accessor = wrap(
            self.array,
            views[0],
            self.ibuf,
            self.ldims,
            subscripts,
            self.cdims,
            self.invoke,
        )
        if self.config.has_options:
            result = self.fcn(arguments, self.config.options, accessor)
        else:
            result = self.fcn(arguments, accessor)
        self.output[positions[1]] = result


Kernel: TypeAlias = Callable[[ReductionStep, LoopSpace], None]


__all__ = [
    "Kernel",
    "LoopSpace",
    "ReductionRoutine",
    "ReductionStep",
]
