"""Tests for TimestampedValue."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta

import pytest

from lwwdict.timestamped_value import TimestampedValue


class TestTimestampedValueCreation:
    """Tests for construction and immutability."""

    def test_holds_value_and_timestamp(self):
        tv = TimestampedValue("v", 10)
        assert tv.value == "v"
        assert tv.timestamp == 10

    def test_is_immutable(self):
        tv = TimestampedValue("v", 10)
        with pytest.raises(FrozenInstanceError):
            tv.value = "other"

    def test_equal_when_value_and_timestamp_match(self):
        assert TimestampedValue("v", 1) == TimestampedValue("v", 1)
        assert TimestampedValue("v", 1) != TimestampedValue("v", 2)


class TestIsBefore:
    """Tests for is_before against values and raw timestamps."""

    def test_earlier_value_is_before(self):
        assert TimestampedValue("a", 1).is_before(TimestampedValue("b", 2))

    def test_later_value_is_not_before(self):
        assert not TimestampedValue("a", 2).is_before(TimestampedValue("b", 1))

    def test_equal_timestamps_are_not_before(self):
        """Strictly earlier only; ties are never 'before'."""
        assert not TimestampedValue("a", 1).is_before(TimestampedValue("b", 1))

    def test_against_raw_timestamp(self):
        tv = TimestampedValue("a", 5)
        assert tv.is_before(6)
        assert not tv.is_before(5)
        assert not tv.is_before(4)

    def test_works_with_datetimes(self):
        now = datetime(2007, 7, 7, 7, 7, 7)
        tv = TimestampedValue("a", now)
        assert tv.is_before(now + timedelta(seconds=1))
        assert not tv.is_before(now)

    def test_works_with_tuple_timestamps(self):
        """(counter, node_id) tuples order by counter then node."""
        tv = TimestampedValue("a", (3, "node-a"))
        assert tv.is_before((3, "node-b"))
        assert not tv.is_before((2, "node-z"))


class TestTimestampedValueSerialization:
    """Tests for to_dict / from_dict."""

    def test_round_trip(self):
        tv = TimestampedValue({"nested": [1, 2]}, 42)
        assert TimestampedValue.from_dict(tv.to_dict()) == tv

    def test_to_dict_structure(self):
        assert TimestampedValue("v", 7).to_dict() == {"value": "v", "timestamp": 7}
