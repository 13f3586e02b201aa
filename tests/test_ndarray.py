import numpy as np
import pytest

from ndreduce import (
    ErrorCode,
    InvalidArgumentError,
    NdarrayLike,
    NdarrayView,
    as_view,
    from_array,
    to_numpy,
    zeros,
)


def test_as_view_accepts_mapping_and_shares_buffer() -> None:
    buffer = [1.0, 2.0, 3.0, 4.0]
    view = as_view(
        {
            "dtype": "generic",
            "data": buffer,
            "shape": [2, 2],
            "strides": [2, 1],
            "offset": 0,
            "order": "row-major",
        }
    )

    assert view.shape == (2, 2)
    assert view.strides == (2, 1)
    assert view.data is buffer
    assert view.get(1, 0) == 3.0


def test_as_view_accepts_attribute_objects() -> None:
    source = NdarrayView(
        dtype="float64",
        data=[0.0] * 6,
        shape=(2, 3),
        strides=(1, 2),
        offset=0,
        order="column-major",
    )
    assert isinstance(source, NdarrayLike)

    view = as_view(source)
    assert view is not source
    assert view.data is source.data
    assert view.order == "column-major"


def test_as_view_rejects_missing_fields() -> None:
    with pytest.raises(InvalidArgumentError) as error:
        as_view({"dtype": "float64", "data": []}, position=1)

    assert error.value.code == ErrorCode.INVALID_NDARRAY.value
    assert error.value.data == {"position": 1}


def test_as_view_rejects_inconsistent_strides() -> None:
    with pytest.raises(InvalidArgumentError):
        as_view(
            {
                "dtype": "float64",
                "data": [0.0],
                "shape": [1, 1],
                "strides": [1],
                "offset": 0,
                "order": "row-major",
            }
        )


def test_as_view_rejects_unknown_order() -> None:
    with pytest.raises(InvalidArgumentError):
        as_view(
            {
                "dtype": "float64",
                "data": [0.0],
                "shape": [1],
                "strides": [1],
                "offset": 0,
                "order": "C",
            }
        )


def test_view_get_and_set_follow_strides_and_offset() -> None:
    view = NdarrayView(
        dtype="generic",
        data=list(range(6)),
        shape=(2, 3),
        strides=(-3, -1),
        offset=5,
        order="row-major",
    )

    assert view.get(0, 0) == 5
    assert view.get(1, 2) == 0
    view.set(42, 1, 1)
    assert view.data[1] == 42
    assert view.ndim == 2
    assert view.size == 6


def test_from_array_round_trips_through_both_orders() -> None:
    values = np.arange(24, dtype=np.float64).reshape(2, 3, 4)

    row_major = from_array(values)
    column_major = from_array(values, order="column-major")

    assert row_major.strides == (12, 4, 1)
    assert column_major.strides == (1, 2, 6)
    assert row_major.dtype == "float64"
    np.testing.assert_array_equal(to_numpy(row_major), values)
    np.testing.assert_array_equal(to_numpy(column_major), values)
    assert column_major.get(1, 2, 3) == values[1, 2, 3]


def test_from_array_copies_input() -> None:
    values = np.ones((2, 2))
    view = from_array(values)
    view.data[0] = 5.0
    assert values[0, 0] == 1.0


def test_zeros_allocates_contiguous_buffer() -> None:
    view = zeros((3, 2), order="column-major")

    assert view.strides == (1, 3)
    assert len(view.data) == 6
    np.testing.assert_array_equal(to_numpy(view), np.zeros((3, 2)))


def test_to_numpy_handles_zero_dimensional_views() -> None:
    view = NdarrayView(
        dtype="float64",
        data=[0.0, 7.0],
        shape=(),
        strides=(),
        offset=1,
        order="row-major",
    )
    out = to_numpy(view)
    assert out.shape == ()
    assert out[()] == 7.0
