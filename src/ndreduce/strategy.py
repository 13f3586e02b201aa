from collections.abc import Callable
from typing import TypeAlias

from .indexing import numel, vind2bind
from .ndarray import NdarrayView

ReshapeStrategy: TypeAlias = Callable[[NdarrayView], NdarrayView]


def contiguous_base_stride(view: NdarrayView) -> int | None:
    """Return the base stride when a view's logical order walks memory evenly.

    Singleton dimensions are ignored. Returns None when consecutive logical
    elements are not separated by a single constant stride.
    """
    axes = list(range(len(view.shape)))
    if view.order == "row-major":
        axes.reverse()
    base: int | None = None
    expected = 0
    for axis in axes:
        size = view.shape[axis]
        if size == 1:
            continue
        stride = view.strides[axis]
        if base is None:
            base = stride
            expected = stride
        elif stride != expected:
            return None
        expected *= size
    return 1 if base is None else base


def resolve_reshape_strategy(view: NdarrayView) -> ReshapeStrategy:
    """Resolve how one core sub-array view is presented to a 1-D reduction.

    The view's shape and strides are fixed for a whole reduction call while
    its offset moves, so the decision is made once. Every returned strategy
    yields a one-dimensional view whose logical index `i` addresses the same
    element as logical index `i` of the input view in its storage order.
    """
    ndims = len(view.shape)
    if ndims == 0:
        return _broadcast_scalar_strategy(view)
    if ndims == 1:
        return _identity
    base = contiguous_base_stride(view)
    if base is not None:
        return _flatten_strategy(view, base)
    return _copy_strategy(view)


def _identity(view: NdarrayView) -> NdarrayView:
    return view


def _broadcast_scalar_strategy(template: NdarrayView) -> ReshapeStrategy:
    reshaped = NdarrayView(
        dtype=template.dtype,
        data=template.data,
        shape=(1,),
        strides=(0,),
        offset=template.offset,
        order=template.order,
    )

    def strategy(view: NdarrayView) -> NdarrayView:
        reshaped.offset = view.offset
        return reshaped

    return strategy


def _flatten_strategy(template: NdarrayView, base: int) -> ReshapeStrategy:
    reshaped = NdarrayView(
        dtype=template.dtype,
        data=template.data,
        shape=(numel(template.shape),),
        strides=(base,),
        offset=template.offset,
        order=template.order,
    )

    def strategy(view: NdarrayView) -> NdarrayView:
        reshaped.offset = view.offset
        return reshaped

    return strategy


def _copy_strategy(template: NdarrayView) -> ReshapeStrategy:
    length = numel(template.shape)
    workspace: list[object] = [None] * length
    reshaped = NdarrayView(
        dtype=template.dtype,
        data=workspace,
        shape=(length,),
        strides=(1,),
        offset=0,
        order=template.order,
    )

    def strategy(view: NdarrayView) -> NdarrayView:
        data = view.data
        for index in range(length):
            workspace[index] = data[
                vind2bind(view.shape, view.strides, view.offset, view.order, index)
            ]
        return reshaped

    return strategy


__all__ = [
    "ReshapeStrategy",
    "contiguous_base_stride",
    "resolve_reshape_strategy",
]
