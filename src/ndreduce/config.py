from dataclasses import dataclass
from typing import Final, Literal, TypeAlias

IndexMode: TypeAlias = Literal["throw", "normalize", "wrap", "clamp"]
Order: TypeAlias = Literal["row-major", "column-major"]

ORDERS: Final = frozenset(("row-major", "column-major"))

# Loop dimensionalities above this use the generic kernel.
MAX_BLOCKED_NDIMS: Final = 8


class _MissingType:
    """Sentinel type for call parameters that were not supplied."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _MissingType()


@dataclass(frozen=True, slots=True)
class ReduceCallConfig:
    """Optional per-call parameters resolved once at call entry."""

    options: object = MISSING
    this_arg: object = MISSING

    @property
    def has_options(self) -> bool:
        """Return whether an options object should be forwarded."""
        return self.options is not MISSING

    @property
    def has_this_arg(self) -> bool:
        """Return whether callbacks run with an explicit context argument."""
        return self.this_arg is not MISSING


__all__ = [
    "IndexMode",
    "MAX_BLOCKED_NDIMS",
    "MISSING",
    "ORDERS",
    "Order",
    "ReduceCallConfig",
]
