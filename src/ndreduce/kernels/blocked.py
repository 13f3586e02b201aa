from collections.abc import Sequence

from ..indexing import increment_offsets
from .base import Kernel, LoopSpace, ReductionStep


def loop_deltas(
    space: LoopSpace,
) -> tuple[tuple[int, ...], tuple[int, ...], tuple[tuple[int, ...], ...]]:
    """Return loop dims, loop sizes and per-array offset deltas, innermost first.

    Row-major spaces iterate the last dimension innermost and column-major
    spaces the first. Delta `l` is what each running offset gains when loop
    level `l` advances after all faster levels have wrapped around.
    """
    ndims = len(space.shape)
    if space.is_row_major:
        dims = tuple(range(ndims - 1, -1, -1))
    else:
        dims = tuple(range(ndims))
    sizes = tuple(space.shape[dim] for dim in dims)
    deltas: list[tuple[int, ...]] = []
    for level, dim in enumerate(dims):
        if level == 0:
            deltas.append(tuple(strides[dim] for strides in space.strides))
            continue
        inner = dims[level - 1]
        inner_size = sizes[level - 1]
        deltas.append(
            tuple(strides[dim] - inner_size * strides[inner] for strides in space.strides)
        )
    return dims, sizes, tuple(deltas)


def unary1d(step: ReductionStep, space: LoopSpace) -> None:
    """Reduce over one loop dimension."""
    _, (s0,), (dv0,) = loop_deltas(space)
    positions = list(space.offsets)
    for i0 in range(s0):
        step(positions, (i0,))
        increment_offsets(positions, dv0)


def unary2d(step: ReductionStep, space: LoopSpace) -> None:
    """Reduce over two loop dimensions with loop interchange."""
    _, (s0, s1), (dv0, dv1) = loop_deltas(space)
    positions = list(space.offsets)
    if space.is_row_major:
        for i1 in range(s1):
            for i0 in range(s0):
                step(positions, (i1, i0))
                increment_offsets(positions, dv0)
            increment_offsets(positions, dv1)
        return
    for i1 in range(s1):
        for i0 in range(s0):
            step(positions, (i0, i1))
            increment_offsets(positions, dv0)
        increment_offsets(positions, dv1)


def unary3d(step: ReductionStep, space: LoopSpace) -> None:
    """Reduce over three loop dimensions with loop interchange."""
    _, (s0, s1, s2), (dv0, dv1, dv2) = loop_deltas(space)
    positions = list(space.offsets)
    if space.is_row_major:
        for i2 in range(s2):
            for i1 in range(s1):
                for i0 in range(s0):
                    step(positions, (i2, i1, i0))
                    increment_offsets(positions, dv0)
                increment_offsets(positions, dv1)
            increment_offsets(positions, dv2)
        return
    for i2 in range(s2):
        for i1 in range(s1):
            for i0 in range(s0):
                step(positions, (i0, i1, i2))
                increment_offsets(positions, dv0)
            increment_offsets(positions, dv1)
        increment_offsets(positions, dv2)


def unary4d(step: ReductionStep, space: LoopSpace) -> None:
    """Reduce over four loop dimensions with loop interchange."""
    _, (s0, s1, s2, s3), (dv0, dv1, dv2, dv3) = loop_deltas(space)
    positions = list(space.offsets)
    if space.is_row_major:
        for i3 in range(s3):
            for i2 in range(s2):
                for i1 in range(s1):
                    for i0 in range(s0):
                        step(positions, (i3, i2, i1, i0))
                        increment_offsets(positions, dv0)
                    increment_offsets(positions, dv1)
                increment_offsets(positions, dv2)
            increment_offsets(positions, dv3)
        return
    for i3 in range(s3):
        for i2 in range(s2):
            for i1 in range(s1):
                for i0 in range(s0):
                    step(positions, (i0, i1, i2, i3))
                    increment_offsets(positions, dv0)
                increment_offsets(positions, dv1)
            increment_offsets(positions, dv2)
        increment_offsets(positions, dv3)


def unary_blocked(step: ReductionStep, space: LoopSpace) -> None:
    """Reduce over any number of loop dimensions using incremental offsets."""
    dims, sizes, deltas = loop_deltas(space)
    if not dims:
        return
    positions = list(space.offsets)
    subscripts = [0] * len(dims)
    _traverse(step, positions, subscripts, dims, sizes, deltas, len(dims) - 1)


def _traverse(
    step: ReductionStep,
    positions: list[int],
    subscripts: list[int],
    dims: Sequence[int],
    sizes: Sequence[int],
    deltas: Sequence[Sequence[int]],
    level: int,
) -> None:
    dim = dims[level]
    delta = deltas[level]
    if level == 0:
        for index in range(sizes[0]):
            subscripts[dim] = index
            step(positions, tuple(subscripts))
            increment_offsets(positions, delta)
        return
    for index in range(sizes[level]):
        subscripts[dim] = index
        _traverse(step, positions, subscripts, dims, sizes, deltas, level - 1)
        increment_offsets(positions, delta)


# Unrolled loop nests up to four dimensions; the shared traversal covers the rest.
BLOCKED_KERNELS: dict[int, Kernel] = {
    1: unary1d,
    2: unary2d,
    3: unary3d,
    4: unary4d,
    5: unary_blocked,
    6: unary_blocked,
    7: unary_blocked,
    8: unary_blocked,
}


__all__ = [
    "BLOCKED_KERNELS",
    "loop_deltas",
    "unary1d",
    "unary2d",
    "unary3d",
    "unary4d",
    "unary_blocked",
]
