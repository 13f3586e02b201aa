from ..config import IndexMode
from ..indexing import ind2sub, numel, vind2bind
from .base import LoopSpace, ReductionStep

# Index conversions here must never wrap or clamp.
MODE: IndexMode = "throw"


def unary_nd(step: ReductionStep, space: LoopSpace) -> None:
    """Reduce over an arbitrary number of loop dimensions.

    Every step converts the flat loop index to each array's buffer offset and
    to the loop subscript directly, rather than advancing offsets
    incrementally.
    """
    shape = space.shape
    order = space.order
    arrays = tuple(zip(space.strides, space.offsets))
    positions = [0] * len(arrays)
    for index in range(numel(shape)):
        for position, (strides, offset) in enumerate(arrays):
            positions[position] = vind2bind(shape, strides, offset, order, index, MODE)
        step(positions, ind2sub(shape, order, index, MODE))


__all__ = ["MODE", "unary_nd"]
