"""Reference one-dimensional strided reductions accepting a callback.

Each routine takes a list of views whose first entry is a one-dimensional
view and an accessor called as `clbk(value, index, view)` for every element,
in index order. Elements whose accessor result is `None` are ignored.
"""

import math
from collections.abc import Callable, Iterator, Sequence
from typing import Any

from .ndarray import NdarrayView

ElementCallback = Callable[..., Any]


def iter_transformed(view: NdarrayView, clbk: ElementCallback) -> Iterator[Any]:
    """Yield the accessor result for every element of one 1-D view."""
    data = view.data
    stride = view.strides[0]
    position = view.offset
    for index in range(view.shape[0]):
        value = clbk(data[position], index, view)
        position += stride
        if value is not None:
            yield value


def max_by(arrays: Sequence[NdarrayView], clbk: ElementCallback) -> float:
    """Return the maximum transformed value, or NaN when there is none."""
    result: Any = None
    for value in iter_transformed(arrays[0], clbk):
        if value != value:
            return value
        if result is None or value > result:
            result = value
    return math.nan if result is None else result


def min_by(arrays: Sequence[NdarrayView], clbk: ElementCallback) -> float:
    """Return the minimum transformed value, or NaN when there is none."""
    result: Any = None
    for value in iter_transformed(arrays[0], clbk):
        if value != value:
            return value
        if result is None or value < result:
            result = value
    return math.nan if result is None else result


def sum_by(arrays: Sequence[NdarrayView], clbk: ElementCallback) -> float:
    """Return the sum of transformed values; empty input sums to zero."""
    total = 0.0
    for value in iter_transformed(arrays[0], clbk):
        total += value
    return total


def mean_by(arrays: Sequence[NdarrayView], clbk: ElementCallback) -> float:
    """Return the arithmetic mean of transformed values."""
    total = 0.0
    count = 0
    for value in iter_transformed(arrays[0], clbk):
        total += value
        count += 1
    if count == 0:
        return math.nan
    return total / count


def variance_by(arrays: Sequence[NdarrayView], clbk: ElementCallback) -> float:
    """Return the variance of transformed values.

    `arrays[1]` is a zero-dimensional view holding the degrees-of-freedom
    correction (for example 1 for the sample variance).
    """
    correction_view = arrays[1]
    correction = correction_view.data[correction_view.offset]
    mean = 0.0
    squares = 0.0
    count = 0
    # Welford's online update
    for value in iter_transformed(arrays[0], clbk):
        count += 1
        delta = value - mean
        mean += delta / count
        squares += delta * (value - mean)
    denominator = count - correction
    if count == 0 or denominator <= 0:
        return math.nan
    return squares / denominator


__all__ = [
    "iter_transformed",
    "max_by",
    "mean_by",
    "min_by",
    "sum_by",
    "variance_by",
]
