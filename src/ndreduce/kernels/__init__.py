from ..config import MAX_BLOCKED_NDIMS
from .base import Kernel, LoopSpace, ReductionRoutine, ReductionStep
from .blocked import (
    BLOCKED_KERNELS,
    loop_deltas,
    unary1d,
    unary2d,
    unary3d,
    unary4d,
    unary_blocked,
)
from .nd import unary_nd


def select_kernel(ndims: int) -> Kernel:
    """Select the loop kernel for one number of loop dimensions."""
    if 0 < ndims <= MAX_BLOCKED_NDIMS:
        return BLOCKED_KERNELS[ndims]
    return unary_nd


__all__ = [
    "BLOCKED_KERNELS",
    "Kernel",
    "LoopSpace",
    "ReductionRoutine",
    "ReductionStep",
    "loop_deltas",
    "select_kernel",
    "unary1d",
    "unary2d",
    "unary3d",
    "unary4d",
    "unary_blocked",
    "unary_nd",
]
