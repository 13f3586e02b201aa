from collections.abc import Sequence

import numpy as np
import pytest

import ndreduce.reduce as reduce_module
from ndreduce import NdarrayView, from_array, sum_by, to_numpy, unary_reduce_strided1d_by, zeros
from ndreduce.kernels import (
    BLOCKED_KERNELS,
    LoopSpace,
    loop_deltas,
    select_kernel,
    unary_blocked,
    unary_nd,
)


class RecordingStep:
    """Stand-in step recording the offsets and subscripts it is called with."""

    def __init__(self) -> None:
        self.calls: list[tuple[tuple[int, ...], tuple[int, ...]]] = []

    def __call__(self, positions: Sequence[int], subscripts: Sequence[int]) -> None:
        self.calls.append((tuple(positions), tuple(subscripts)))


def _space(shape: tuple[int, ...], is_row_major: bool) -> LoopSpace:
    rng = np.random.RandomState(len(shape))
    strides = tuple(
        tuple(int(stride) for stride in rng.randint(-20, 21, size=len(shape)))
        for _ in range(3)
    )
    return LoopSpace(
        shape=shape,
        strides=strides,
        offsets=(100, 200, 300),
        is_row_major=is_row_major,
    )


def _flip(view: NdarrayView, axis: int) -> NdarrayView:
    strides = list(view.strides)
    offset = view.offset + (view.shape[axis] - 1) * strides[axis]
    strides[axis] = -strides[axis]
    return NdarrayView(
        dtype=view.dtype,
        data=view.data,
        shape=view.shape,
        strides=tuple(strides),
        offset=offset,
        order=view.order,
    )


def test_loop_deltas_row_major() -> None:
    space = LoopSpace(
        shape=(2, 3),
        strides=((12, 4), (3, 1)),
        offsets=(0, 0),
        is_row_major=True,
    )
    dims, sizes, deltas = loop_deltas(space)

    assert dims == (1, 0)
    assert sizes == (3, 2)
    assert deltas == ((4, 1), (0, 0))


def test_loop_deltas_column_major() -> None:
    space = LoopSpace(
        shape=(2, 3),
        strides=((1, 2), (1, 4)),
        offsets=(0, 0),
        is_row_major=False,
    )
    dims, sizes, deltas = loop_deltas(space)

    assert dims == (0, 1)
    assert sizes == (2, 3)
    assert deltas == ((1, 1), (0, 2))


@pytest.mark.parametrize("ndims", range(1, 9))
@pytest.mark.parametrize("is_row_major", [True, False])
def test_blocked_kernels_visit_same_sequence_as_generic_kernel(
    ndims: int,
    is_row_major: bool,
) -> None:
    shape = tuple(2 + (axis % 2) for axis in range(ndims))
    space = _space(shape, is_row_major)

    blocked = RecordingStep()
    generic = RecordingStep()
    BLOCKED_KERNELS[ndims](blocked, space)  # type: ignore[arg-type]
    unary_nd(generic, space)  # type: ignore[arg-type]

    assert len(blocked.calls) == int(np.prod(shape))
    assert blocked.calls == generic.calls


@pytest.mark.parametrize("ndims", range(1, 5))
def test_unrolled_kernels_match_shared_traversal(ndims: int) -> None:
    space = _space(tuple(3 for _ in range(ndims)), True)

    unrolled = RecordingStep()
    shared = RecordingStep()
    BLOCKED_KERNELS[ndims](unrolled, space)  # type: ignore[arg-type]
    unary_blocked(shared, space)  # type: ignore[arg-type]

    assert unrolled.calls == shared.calls


def test_kernel_subscripts_are_in_dimension_order() -> None:
    space = _space((2, 3), False)
    step = RecordingStep()
    BLOCKED_KERNELS[2](step, space)  # type: ignore[arg-type]

    subscripts = [call[1] for call in step.calls]
    assert subscripts[:3] == [(0, 0), (1, 0), (0, 1)]


def test_zero_sized_loop_dimension_produces_no_steps() -> None:
    space = _space((2, 0, 3), True)
    step = RecordingStep()
    BLOCKED_KERNELS[3](step, space)  # type: ignore[arg-type]
    unary_nd(step, space)  # type: ignore[arg-type]
    assert step.calls == []


def test_select_kernel_boundaries() -> None:
    assert select_kernel(1) is BLOCKED_KERNELS[1]
    assert select_kernel(8) is BLOCKED_KERNELS[8]
    assert select_kernel(9) is unary_nd
    assert select_kernel(12) is unary_nd


def test_blocked_and_generic_reductions_agree_randomized(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    rng = np.random.RandomState(7)

    for trial in range(40):
        ndims = int(rng.randint(2, 8))
        shape = tuple(int(size) for size in rng.randint(1, 4, size=ndims))
        core_count = int(rng.randint(1, min(3, ndims)))
        dims = sorted(rng.choice(ndims, size=core_count, replace=False))
        order = "row-major" if trial % 2 == 0 else "column-major"
        values = rng.randint(-50, 50, size=shape).astype(np.float64)

        x = from_array(values, order=order)
        flip_axis = int(rng.randint(0, ndims))
        x = _flip(x, flip_axis)
        expected = np.flip(values, axis=flip_axis)
        expected = (expected * 3.0 - 1.0).sum(axis=tuple(dims))

        loop_shape = tuple(size for axis, size in enumerate(shape) if axis not in dims)
        y_blocked = zeros(loop_shape, order=order)
        y_generic = zeros(loop_shape, order=order)

        def clbk(value: float) -> float:
            return value * 3.0 - 1.0

        unary_reduce_strided1d_by(sum_by, [x, y_blocked], dims, clbk)
        with monkeypatch.context() as patch:
            patch.setattr(reduce_module, "select_kernel", lambda count: unary_nd)
            unary_reduce_strided1d_by(sum_by, [x, y_generic], dims, clbk)

        np.testing.assert_array_equal(to_numpy(y_blocked), to_numpy(y_generic))
        np.testing.assert_allclose(to_numpy(y_blocked), expected)


def test_generic_kernel_handles_more_than_eight_loop_dimensions() -> None:
    shape = (2, 1, 2, 1, 2, 1, 2, 1, 2, 3)
    values = np.arange(int(np.prod(shape)), dtype=np.float64).reshape(shape)
    x = from_array(values)
    y = zeros(shape[:-1])

    unary_reduce_strided1d_by(sum_by, [x, y], [-1], lambda value: value)

    np.testing.assert_array_equal(to_numpy(y), values.sum(axis=-1))
