import operator
from collections.abc import Iterable, MutableSequence, Sequence
from math import prod
from typing import Protocol

try:
    from typing import Never
except ImportError:  # pragma: no cover
    from typing_extensions import Never

from .config import IndexMode, Order
from .diagnostics import ErrorCode, IndexOutOfBoundsError, InvalidArgumentError

ROW_MAJOR_LAYOUT = 1
COLUMN_MAJOR_LAYOUT = 2
MIXED_LAYOUT = 0
AMBIGUOUS_LAYOUT = 3


class HasOffset(Protocol):
    """Anything exposing a mutable buffer offset."""

    offset: int


class HasOffsetField(Protocol):
    """Anything exposing a read-only buffer offset."""

    @property
    def offset(self) -> int: ...


def numel(shape: Sequence[int]) -> int:
    """Return element count for one shape."""
    return prod(shape, start=1)


def shape2strides(shape: Sequence[int], order: Order) -> tuple[int, ...]:
    """Return contiguous element strides for one shape and storage order."""
    strides = [0] * len(shape)
    step = 1
    if order == "column-major":
        for index, size in enumerate(shape):
            strides[index] = step
            step *= size
    else:
        for index in range(len(shape) - 1, -1, -1):
            strides[index] = step
            step *= shape[index]
    return tuple(strides)


def strides2order(strides: Sequence[int]) -> int:
    """Classify stride magnitudes as row-major (1), column-major (2), both (3) or neither (0)."""
    if len(strides) == 0:
        return AMBIGUOUS_LAYOUT
    row_major = True
    column_major = True
    previous = abs(strides[0])
    for stride in strides[1:]:
        current = abs(stride)
        if current > previous:
            row_major = False
        elif current < previous:
            column_major = False
        previous = current
    if row_major and column_major:
        return AMBIGUOUS_LAYOUT
    if row_major:
        return ROW_MAJOR_LAYOUT
    if column_major:
        return COLUMN_MAJOR_LAYOUT
    return MIXED_LAYOUT


def resolve_index(index: int, max_index: int, mode: IndexMode) -> int:
    """Resolve one index against `[0, max_index]` according to an index mode."""
    if mode == "clamp":
        if max_index < 0:
            _raise_index_out_of_bounds(index=index, max_index=max_index)
        return min(max(index, 0), max_index)
    if mode == "wrap":
        if max_index < 0:
            _raise_index_out_of_bounds(index=index, max_index=max_index)
        return index % (max_index + 1)
    resolved = index
    if mode == "normalize" and resolved < 0:
        resolved += max_index + 1
    if resolved < 0 or resolved > max_index:
        _raise_index_out_of_bounds(index=index, max_index=max_index)
    return resolved


def vind2bind(
    shape: Sequence[int],
    strides: Sequence[int],
    offset: int,
    order: Order,
    index: int,
    mode: IndexMode = "throw",
) -> int:
    """Convert a linear view index to a buffer index.

    The linear index enumerates the view's elements in `order`, so the same
    index maps to the same logical element regardless of how the elements
    are laid out in memory.
    """
    remaining = resolve_index(index, numel(shape) - 1, mode)
    position = offset
    if order == "column-major":
        for size, stride in zip(shape, strides):
            subscript = remaining % size
            remaining //= size
            position += subscript * stride
        return position
    for axis in range(len(shape) - 1, -1, -1):
        size = shape[axis]
        subscript = remaining % size
        remaining //= size
        position += subscript * strides[axis]
    return position


def ind2sub(
    shape: Sequence[int],
    order: Order,
    index: int,
    mode: IndexMode = "throw",
) -> tuple[int, ...]:
    """Convert a linear view index to a subscript tuple."""
    remaining = resolve_index(index, numel(shape) - 1, mode)
    subscripts = [0] * len(shape)
    if order == "column-major":
        for axis, size in enumerate(shape):
            subscripts[axis] = remaining % size
            remaining //= size
    else:
        for axis in range(len(shape) - 1, -1, -1):
            size = shape[axis]
            subscripts[axis] = remaining % size
            remaining //= size
    return tuple(subscripts)


def sub2ind(
    shape: Sequence[int],
    strides: Sequence[int],
    offset: int,
    subscripts: Sequence[int],
    mode: IndexMode = "throw",
) -> int:
    """Convert a subscript tuple to a buffer index."""
    if len(subscripts) != len(shape):
        raise IndexOutOfBoundsError(
            code=ErrorCode.INDEX_OUT_OF_BOUNDS,
            message=(
                "index out of bounds: expected "
                f"{len(shape)} subscripts, got {len(subscripts)}"
            ),
            related=("sub2ind",),
            data={"expected": len(shape), "got": len(subscripts)},
        )
    position = offset
    for size, stride, subscript in zip(shape, strides, subscripts):
        position += resolve_index(subscript, size - 1, mode) * stride
    return position


def normalize_dims(dims: Iterable[int], ndims: int) -> tuple[int, ...]:
    """Normalize, validate and sort a list of dimension indices."""
    normalized: list[int] = []
    for dim in dims:
        if isinstance(dim, bool):
            _raise_non_integer_dim(dim=dim, ndims=ndims)
        try:
            dim = operator.index(dim)
        except TypeError:
            _raise_non_integer_dim(dim=dim, ndims=ndims)
        resolved = dim + ndims if dim < 0 else dim
        if resolved < 0 or resolved >= ndims:
            raise InvalidArgumentError(
                code=ErrorCode.DIM_OUT_OF_BOUNDS,
                message=(
                    f"dim out of bounds: dimension {dim} is out of range "
                    f"for an input with {ndims} dimensions"
                ),
                help=f"use dimension indices in [{-ndims}, {ndims - 1}]",
                related=("dimension partition",),
                data={"dim": dim, "ndims": ndims},
            )
        normalized.append(resolved)
    unique = sorted(set(normalized))
    if len(unique) != len(normalized):
        raise InvalidArgumentError(
            code=ErrorCode.DUPLICATE_DIMS,
            message="duplicate dims: dimension indices must be unique",
            help="list each reduced dimension exactly once",
            related=("dimension partition",),
            data={"dims": ",".join(str(dim) for dim in normalized)},
        )
    return tuple(unique)


def indices_complement(count: int, indices: Sequence[int]) -> tuple[int, ...]:
    """Return the indices in `range(count)` which are not listed."""
    excluded = set(indices)
    return tuple(index for index in range(count) if index not in excluded)


def take_indexed2(
    first: Sequence[int],
    second: Sequence[int],
    indices: Sequence[int],
) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Take the same indexed elements from two parallel sequences."""
    return (
        tuple(first[index] for index in indices),
        tuple(second[index] for index in indices),
    )


def offsets(arrays: Sequence[HasOffsetField]) -> list[int]:
    """Return the index of the first logically indexed element for each array."""
    return [array.offset for array in arrays]


def set_view_offsets(views: Sequence[HasOffset], positions: Sequence[int]) -> None:
    """Rebind sub-array views to freshly computed offsets in place.

    `positions` holds one offset per array. Position 1 is the output array,
    which has no sub-array view, so it is skipped.
    """
    view_index = 0
    for array_index, position in enumerate(positions):
        if array_index == 1:
            continue
        views[view_index].offset = position
        view_index += 1


def increment_offsets(positions: MutableSequence[int], deltas: Sequence[int]) -> None:
    """Advance every running offset by its delta in place."""
    for index, delta in enumerate(deltas):
        positions[index] += delta


def _raise_index_out_of_bounds(*, index: int, max_index: int) -> Never:
    raise IndexOutOfBoundsError(
        code=ErrorCode.INDEX_OUT_OF_BOUNDS,
        message=(
            f"index out of bounds: index {index} is outside [0, {max_index}]"
        ),
        help="linear and subscript indices must address an existing element",
        related=("index conversion",),
        data={"index": index, "max_index": max_index},
    )


def _raise_non_integer_dim(*, dim: object, ndims: int) -> Never:
    raise InvalidArgumentError(
        code=ErrorCode.DIM_OUT_OF_BOUNDS,
        message=f"dim out of bounds: dimension index must be an integer, got {dim!r}",
        help="pass integer axis indices",
        related=("dimension partition",),
        data={"ndims": ndims},
    )


__all__ = [
    "AMBIGUOUS_LAYOUT",
    "COLUMN_MAJOR_LAYOUT",
    "MIXED_LAYOUT",
    "ROW_MAJOR_LAYOUT",
    "increment_offsets",
    "ind2sub",
    "indices_complement",
    "normalize_dims",
    "numel",
    "offsets",
    "resolve_index",
    "set_view_offsets",
    "shape2strides",
    "strides2order",
    "sub2ind",
    "take_indexed2",
    "vind2bind",
]
