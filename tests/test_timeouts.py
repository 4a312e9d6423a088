import time
from datetime import datetime, timedelta, timezone

import pytest

from kafkaoffsets.timeouts import (
    Deadline,
    Timeout,
    current_time_millis,
    millis_to_epoch,
)


def test_never_as_millis_is_minus_one():
    assert Timeout.never().as_millis() == -1


def test_after_as_millis_from_timedelta():
    assert Timeout.after(timedelta(milliseconds=1500)).as_millis() == 1500


def test_after_accepts_seconds_and_timedelta_equally():
    assert Timeout.after(2) == Timeout.after(timedelta(seconds=2))


def test_after_rejects_negative():
    with pytest.raises(ValueError):
        Timeout.after(-1)


def test_after_rejects_non_numbers():
    with pytest.raises(TypeError):
        Timeout.after("5")


def test_from_duration_none_is_never():
    assert Timeout.from_duration(None) == Timeout.never()
    assert Timeout.from_duration(None).is_never


def test_from_duration_value_is_after():
    value = timedelta(seconds=3)
    assert Timeout.from_duration(value) == Timeout.after(value)
    assert Timeout.from_duration(value).duration == value


def test_is_zero():
    assert Timeout.after(0).is_zero()
    assert not Timeout.after(timedelta(milliseconds=1)).is_zero()
    assert not Timeout.never().is_zero()


def test_saturating_sub_stops_at_zero():
    result = Timeout.after(timedelta(seconds=1)).saturating_sub(timedelta(seconds=5))
    assert result.is_zero()


def test_saturating_sub_normal():
    result = Timeout.after(timedelta(seconds=5)).saturating_sub(timedelta(seconds=2))
    assert result == Timeout.after(timedelta(seconds=3))


def test_saturating_sub_never_stays_never():
    assert Timeout.never().saturating_sub(timedelta(seconds=5)) == Timeout.never()


def test_sub_after_after():
    result = Timeout.after(timedelta(seconds=5)) - Timeout.after(timedelta(seconds=2))
    assert result == Timeout.after(timedelta(seconds=3))


def test_sub_never_minus_after_is_never():
    assert Timeout.never() - Timeout.after(timedelta(seconds=2)) == Timeout.never()


@pytest.mark.parametrize(
    "left",
    [Timeout.never(), Timeout.after(timedelta(seconds=1))],
)
def test_sub_of_never_is_ill_defined(left):
    with pytest.raises(ValueError):
        left - Timeout.never()


def test_sub_underflow_raises():
    with pytest.raises(ValueError):
        Timeout.after(timedelta(seconds=1)) - Timeout.after(timedelta(seconds=2))


def test_ordering_finite_before_never():
    short = Timeout.after(timedelta(seconds=1))
    long = Timeout.after(timedelta(seconds=10))
    assert short < long < Timeout.never()
    assert sorted([Timeout.never(), long, short]) == [short, long, Timeout.never()]
    assert Timeout.never() >= Timeout.never()


def test_deadline_never_remaining_is_max():
    deadline = Deadline(None)
    assert deadline.remaining() == timedelta.max
    assert not deadline.elapsed()


def test_deadline_never_millis_capped_to_i32_max():
    assert Deadline(None).remaining_millis_i32() == 2**31 - 1


def test_deadline_zero_has_elapsed():
    deadline = Deadline(timedelta(0))
    assert deadline.elapsed()
    assert deadline.remaining() == timedelta(0)
    assert deadline.remaining_millis_i32() == 0


def test_deadline_future_not_elapsed():
    duration = timedelta(seconds=60)
    deadline = Deadline(duration)
    assert not deadline.elapsed()
    assert timedelta(0) < deadline.remaining() <= duration
    assert 0 < deadline.remaining_millis_i32() <= 60_000


def test_deadline_expires():
    deadline = Deadline(timedelta(milliseconds=10))
    time.sleep(0.05)
    assert deadline.elapsed()


def test_deadline_from_timeout_round_trip():
    never = Deadline.from_timeout(Timeout.never())
    assert Timeout.from_deadline(never) == Timeout.never()

    duration = timedelta(seconds=30)
    finite = Timeout.from_deadline(Deadline.from_timeout(Timeout.after(duration)))
    assert not finite.is_never
    assert finite <= Timeout.after(duration)
    assert finite > Timeout.after(duration - timedelta(seconds=5))


def test_millis_to_epoch_at_epoch():
    assert millis_to_epoch(datetime(1970, 1, 1, tzinfo=timezone.utc)) == 0


def test_millis_to_epoch_before_epoch_clamps_to_zero():
    assert millis_to_epoch(datetime(1960, 1, 1, tzinfo=timezone.utc)) == 0


def test_millis_to_epoch_offset_from_epoch():
    epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
    moment = epoch + timedelta(milliseconds=123456)
    assert millis_to_epoch(moment) == 123456


def test_millis_to_epoch_from_seconds_matches_datetime():
    moment = datetime(2020, 5, 17, 12, 30, tzinfo=timezone.utc)
    assert millis_to_epoch(moment.timestamp()) == millis_to_epoch(moment)


def test_current_time_millis_tracks_wall_clock():
    before = time.time_ns() // 1_000_000
    now = current_time_millis()
    after = time.time_ns() // 1_000_000
    assert before <= now <= after


def test_current_time_millis_matches_millis_to_epoch():
    now = current_time_millis()
    derived = millis_to_epoch(datetime.now(timezone.utc))
    assert abs(derived - now) < 1000