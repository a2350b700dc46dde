from datetime import datetime, timedelta

import pytest

from apps.bookings.domain.conflicts import windows_overlap
from apps.bookings.domain.exceptions import InvalidWindow
from shared.domain.value_objects import TimeWindow

from .utils import at


def test_window_requires_start_before_end():
    with pytest.raises(InvalidWindow):
        TimeWindow(at(10), at(10))
    with pytest.raises(InvalidWindow):
        TimeWindow(at(11), at(10))


def test_window_requires_both_bounds():
    with pytest.raises(InvalidWindow):
        TimeWindow(None, at(10))
    with pytest.raises(InvalidWindow):
        TimeWindow(at(10), None)


def test_invalid_window_is_a_value_error():
    with pytest.raises(ValueError):
        TimeWindow(at(12), at(9))


@pytest.mark.parametrize(
    "first, second, expected",
    [
        ((9, 12), (11, 13), True),
        ((9, 12), (12, 13), False),
        ((9, 12), (10, 11), True),
        ((9, 12), (8, 9), False),
        ((9, 12), (9, 12), True),
        ((9, 12), (13, 14), False),
    ],
)
def test_overlap_is_half_open_and_symmetric(first, second, expected):
    a = TimeWindow(at(first[0]), at(first[1]))
    b = TimeWindow(at(second[0]), at(second[1]))

    assert windows_overlap(a, b) is expected
    assert windows_overlap(b, a) is expected


def test_overlap_with_non_window_raises():
    with pytest.raises(TypeError):
        TimeWindow(at(9), at(10)).overlaps_with((at(9), at(10)))


def test_contains_excludes_end():
    window = TimeWindow(at(9), at(12))

    assert window.contains(at(9))
    assert window.contains(at(11, 59))
    assert not window.contains(at(12))


def test_coerce_accepts_pairs():
    window = TimeWindow.coerce((at(9), at(10)))

    assert window == TimeWindow(at(9), at(10))
    assert TimeWindow.coerce(window) is window
    with pytest.raises(InvalidWindow):
        TimeWindow.coerce(at(9))


def test_duration_and_serialization():
    window = TimeWindow(at(9), at(12, 30))

    assert window.duration == timedelta(hours=3, minutes=30)
    assert window.to_dict() == {"start": at(9).isoformat(), "end": at(12, 30).isoformat()}
    assert str(window).startswith("[") and str(window).endswith(")")


def test_naive_and_aware_bounds_cannot_be_compared():
    with pytest.raises(TypeError):
        TimeWindow(datetime(2025, 3, 10, 9), at(10))
