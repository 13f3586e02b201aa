from .callback import CallbackWrapper, wrap
from .config import MAX_BLOCKED_NDIMS, MISSING, ReduceCallConfig
from .diagnostics import (
    ErrorCode,
    ExecutionError,
    IndexOutOfBoundsError,
    InvalidArgumentError,
    ReductionError,
    ValidationError,
)
from .ndarray import NdarrayLike, NdarrayView, as_view, from_array, to_numpy, zeros
from .reduce import factory, unary_reduce_strided1d_by
from .strategy import resolve_reshape_strategy
from .strided import max_by, mean_by, min_by, sum_by, variance_by

__all__ = [
    "CallbackWrapper",
    "ErrorCode",
    "ExecutionError",
    "IndexOutOfBoundsError",
    "InvalidArgumentError",
    "MAX_BLOCKED_NDIMS",
    "MISSING",
    "NdarrayLike",
    "NdarrayView",
    "ReduceCallConfig",
    "ReductionError",
    "ValidationError",
    "as_view",
    "factory",
    "from_array",
    "max_by",
    "mean_by",
    "min_by",
    "resolve_reshape_strategy",
    "sum_by",
    "to_numpy",
    "unary_reduce_strided1d_by",
    "variance_by",
    "wrap",
    "zeros",
]
