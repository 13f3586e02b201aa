from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, TypeAlias, runtime_checkable

try:
    from typing import Never
except ImportError:  # pragma: no cover
    from typing_extensions import Never

import numpy as np
from array_api_compat import array_namespace

from .config import ORDERS, Order
from .diagnostics import ErrorCode, InvalidArgumentError
from .indexing import numel, shape2strides, sub2ind

Buffer: TypeAlias = Any


@runtime_checkable
class NdarrayLike(Protocol):
    """Array-like protocol describing a strided view over a flat buffer."""

    @property
    def dtype(self) -> str: ...

    @property
    def data(self) -> Buffer: ...

    @property
    def shape(self) -> Sequence[int]: ...

    @property
    def strides(self) -> Sequence[int]: ...

    @property
    def offset(self) -> int: ...

    @property
    def order(self) -> str: ...


_NDARRAY_FIELDS = ("dtype", "data", "shape", "strides", "offset", "order")


@dataclass(slots=True, eq=False)
class NdarrayView:
    """Strided view over a flat data buffer.

    `offset` is the buffer index of the first logically indexed element and is
    the only field rewritten while a reduction walks its loop dimensions.
    """

    dtype: str
    data: Buffer
    shape: tuple[int, ...]
    strides: tuple[int, ...]
    offset: int
    order: Order

    @property
    def ndim(self) -> int:
        """Number of dimensions."""
        return len(self.shape)

    @property
    def size(self) -> int:
        """Number of logical elements."""
        return numel(self.shape)

    def get(self, *subscripts: int) -> Any:
        """Return the element at one subscript tuple."""
        return self.data[sub2ind(self.shape, self.strides, self.offset, subscripts)]

    def set(self, value: Any, *subscripts: int) -> None:
        """Assign the element at one subscript tuple."""
        self.data[sub2ind(self.shape, self.strides, self.offset, subscripts)] = value


def as_view(array: NdarrayLike | Mapping[str, Any], *, position: int = 0) -> NdarrayView:
    """Normalize one array-like object or mapping into an `NdarrayView`.

    The returned view shares the data buffer of `array`.
    """
    fields: dict[str, Any] = {}
    for name in _NDARRAY_FIELDS:
        if isinstance(array, Mapping):
            present = name in array
            value = array.get(name)
        else:
            present = hasattr(array, name)
            value = getattr(array, name, None)
        if not present:
            _raise_invalid_ndarray(
                position=position,
                reason=f"missing `{name}` field",
            )
        fields[name] = value

    try:
        shape = tuple(int(size) for size in fields["shape"])
        strides = tuple(int(stride) for stride in fields["strides"])
        offset = int(fields["offset"])
    except (TypeError, ValueError):
        _raise_invalid_ndarray(
            position=position,
            reason="shape, strides and offset must be integers",
        )
    if len(shape) != len(strides):
        _raise_invalid_ndarray(
            position=position,
            reason=f"shape has {len(shape)} entries but strides has {len(strides)}",
        )
    if any(size < 0 for size in shape):
        _raise_invalid_ndarray(
            position=position,
            reason="shape entries must be non-negative",
        )
    order = fields["order"]
    if order not in ORDERS:
        _raise_invalid_ndarray(
            position=position,
            reason=f"order must be 'row-major' or 'column-major', got {order!r}",
        )
    return NdarrayView(
        dtype=str(fields["dtype"]),
        data=fields["data"],
        shape=shape,
        strides=strides,
        offset=offset,
        order=order,
    )


def zeros(
    shape: Sequence[int],
    *,
    dtype: str = "float64",
    order: Order = "row-major",
) -> NdarrayView:
    """Return a contiguous zero-filled view backed by a numpy buffer."""
    normalized_shape = tuple(int(size) for size in shape)
    return NdarrayView(
        dtype=dtype,
        data=np.zeros(numel(normalized_shape), dtype=_numpy_dtype(dtype)),
        shape=normalized_shape,
        strides=shape2strides(normalized_shape, order),
        offset=0,
        order=order,
    )


def from_array(array: Any, *, order: Order = "row-major") -> NdarrayView:
    """Copy any Array API array into a contiguous view with the requested order."""
    xp = array_namespace(array)
    shape = tuple(int(size) for size in array.shape)
    if order == "column-major" and len(shape) > 1:
        array = xp.permute_dims(array, tuple(reversed(range(len(shape)))))
    flat = np.asarray(xp.reshape(array, (-1,))).copy()
    return NdarrayView(
        dtype=flat.dtype.name,
        data=flat,
        shape=shape,
        strides=shape2strides(shape, order),
        offset=0,
        order=order,
    )


def to_numpy(view: NdarrayLike | Mapping[str, Any]) -> np.ndarray:
    """Gather the logical elements of one view into a new numpy array."""
    normalized = as_view(view)
    out = np.empty(normalized.shape, dtype=_numpy_dtype(normalized.dtype))
    for subscripts in np.ndindex(*normalized.shape):
        out[subscripts] = normalized.get(*subscripts)
    return out


def _numpy_dtype(dtype: str) -> np.dtype:
    """Map a view dtype name to a numpy dtype, using `object` for generic data."""
    if dtype == "generic":
        return np.dtype(object)
    return np.dtype(dtype)


def _raise_invalid_ndarray(*, position: int, reason: str) -> Never:
    raise InvalidArgumentError(
        code=ErrorCode.INVALID_NDARRAY,
        message=f"invalid ndarray: array {position} is malformed ({reason})",
        help="provide dtype, data, shape, strides, offset and order fields",
        related=("array-like contract",),
        data={"position": position},
    )


__all__ = [
    "Buffer",
    "NdarrayLike",
    "NdarrayView",
    "as_view",
    "from_array",
    "to_numpy",
    "zeros",
]
