"""Timeouts, deadlines and wall-clock helpers for Kafka operations."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

__all__ = [
    "Timeout",
    "Deadline",
    "millis_to_epoch",
    "current_time_millis",
]

DurationLike = Union[timedelta, int, float]

_ZERO = timedelta(0)
_ONE_MILLI = timedelta(milliseconds=1)
_I32_MAX = 2**31 - 1
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _to_timedelta(value: DurationLike) -> timedelta:
    """Normalise a duration given as a timedelta or a number of seconds."""
    if isinstance(value, timedelta):
        result = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        result = timedelta(seconds=value)
    else:
        raise TypeError(f"expected a timedelta or a number of seconds, got {value!r}")
    if result < _ZERO:
        raise ValueError(f"duration must not be negative: {result!r}")
    return result


def _millis(duration: timedelta) -> int:
    return duration // _ONE_MILLI


def _wrap_i32(value: int) -> int:
    return ((value + 2**31) % 2**32) - 2**31


@dataclass(frozen=True)
class Timeout:
    """A timeout for a Kafka operation: a finite duration, or never.

    ``duration`` is ``None`` for a timeout that never expires.  Finite
    timeouts order before the never-expiring one.
    """

    duration: Optional[timedelta] = None

    def __post_init__(self) -> None:
        if self.duration is not None:
            object.__setattr__(self, "duration", _to_timedelta(self.duration))

    @classmethod
    def after(cls, seconds: DurationLike) -> "Timeout":
        """A timeout that expires after the given duration."""
        return cls(_to_timedelta(seconds))

    @classmethod
    def never(cls) -> "Timeout":
        """A timeout that blocks forever."""
        return cls(None)

    @classmethod
    def from_duration(cls, value: Optional[DurationLike]) -> "Timeout":
        """Build a timeout from a duration, where ``None`` means never."""
        if isinstance(value, Timeout):
            return value
        if value is None:
            return cls.never()
        return cls.after(value)

    @classmethod
    def from_deadline(cls, deadline: "Deadline") -> "Timeout":
        """The time left until ``deadline``, or never if it has none."""
        if deadline.is_never:
            return cls.never()
        return cls.after(deadline.remaining())

    @property
    def is_never(self) -> bool:
        return self.duration is None

    def as_millis(self) -> int:
        """Milliseconds as a signed 32-bit value; -1 for never."""
        if self.duration is None:
            return -1
        return _wrap_i32(_millis(self.duration))

    def saturating_sub(self, rhs: DurationLike) -> "Timeout":
        """Subtract a duration, stopping at zero; never stays never."""
        rhs_delta = _to_timedelta(rhs)
        if self.duration is None:
            return self
        return Timeout(max(_ZERO, self.duration - rhs_delta))

    def is_zero(self) -> bool:
        """True if this is a finite timeout of zero length."""
        return self.duration is not None and self.duration == _ZERO

    def __sub__(self, other: "Timeout") -> "Timeout":
        if not isinstance(other, Timeout):
            return NotImplemented
        if other.duration is None:
            raise ValueError("subtraction of a never-expiring timeout is ill-defined")
        if self.duration is None:
            return self
        result = self.duration - other.duration
        if result < _ZERO:
            raise ValueError("overflow when subtracting timeouts")
        return Timeout(result)

    def _key(self) -> tuple:
        if self.duration is None:
            return (1, _ZERO)
        return (0, self.duration)

    def __lt__(self, other: "Timeout") -> bool:
        if not isinstance(other, Timeout):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other: "Timeout") -> bool:
        if not isinstance(other, Timeout):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other: "Timeout") -> bool:
        if not isinstance(other, Timeout):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other: "Timeout") -> bool:
        if not isinstance(other, Timeout):
            return NotImplemented
        return self._key() >= other._key()


class Deadline:
    """A point in monotonic time by which an operation should finish."""

    # The flush API takes a signed 32-bit millisecond timeout.
    MAX_FLUSH_DURATION = timedelta(milliseconds=_I32_MAX)

    def __init__(self, duration: Optional[DurationLike]) -> None:
        if duration is None:
            self._at: Optional[float] = None
        else:
            self._at = time.monotonic() + _to_timedelta(duration).total_seconds()

    @classmethod
    def from_timeout(cls, timeout: Timeout) -> "Deadline":
        """A deadline that lies ``timeout`` from now, or none for never."""
        return cls(timeout.duration)

    @property
    def is_never(self) -> bool:
        return self._at is None

    def remaining(self) -> timedelta:
        """Time left, never negative; ``timedelta.max`` if there is no deadline."""
        if self._at is None:
            return timedelta.max
        left = self._at - time.monotonic()
        return timedelta(seconds=left) if left > 0 else _ZERO

    def remaining_millis_i32(self) -> int:
        """Remaining milliseconds, capped to fit a signed 32-bit integer."""
        return _millis(min(self.MAX_FLUSH_DURATION, self.remaining()))

    def elapsed(self) -> bool:
        """True once the deadline has passed."""
        return self.remaining() <= _ZERO

    def __repr__(self) -> str:
        if self._at is None:
            return "Deadline(never)"
        return f"Deadline(remaining={self.remaining()!r})"


def millis_to_epoch(time: Union[datetime, float, int]) -> int:
    """Milliseconds from the Unix epoch to ``time``; 0 if it is earlier.

    A naive datetime is taken as local time; a number is seconds since the epoch.
    """
    if isinstance(time, datetime):
        moment = time if time.tzinfo is not None else time.astimezone()
        delta = moment - _EPOCH
    else:
        delta = timedelta(seconds=time)
    if delta < _ZERO:
        return 0
    return _millis(delta)


def current_time_millis() -> int:
    """The current time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000