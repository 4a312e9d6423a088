"""Lists of topics and partitions with optional offsets."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar, Dict, Iterator, List, Mapping, Optional, Tuple

__all__ = [
    "OffsetKind",
    "Offset",
    "KafkaError",
    "SetPartitionOffsetError",
    "OffsetFetchError",
    "TopicPartitionListElem",
    "TopicPartitionList",
]

PARTITION_UNASSIGNED = -1

OFFSET_BEGINNING = -2
OFFSET_END = -1
OFFSET_STORED = -1000
OFFSET_INVALID = -1001
OFFSET_TAIL_BASE = -2000

_DEFAULT_CAPACITY = 5


class OffsetKind(enum.Enum):
    """The kinds of offset a partition can be positioned at."""

    BEGINNING = "beginning"
    END = "end"
    STORED = "stored"
    INVALID = "invalid"
    OFFSET = "offset"
    OFFSET_TAIL = "offset_tail"


_VALUED_KINDS = (OffsetKind.OFFSET, OffsetKind.OFFSET_TAIL)

_LOGICAL_RAW = {
    OffsetKind.BEGINNING: OFFSET_BEGINNING,
    OffsetKind.END: OFFSET_END,
    OffsetKind.STORED: OFFSET_STORED,
    OffsetKind.INVALID: OFFSET_INVALID,
}


@dataclass(frozen=True)
class Offset:
    """A Kafka offset.

    Specific and tail offsets carry a ``value``; negative values are allowed
    here but cannot be converted to the raw representation.
    """

    kind: OffsetKind
    value: Optional[int] = None

    BEGINNING: ClassVar["Offset"]
    END: ClassVar["Offset"]
    STORED: ClassVar["Offset"]
    INVALID: ClassVar["Offset"]

    def __post_init__(self) -> None:
        if self.kind in _VALUED_KINDS:
            if not isinstance(self.value, int) or isinstance(self.value, bool):
                raise TypeError(f"{self.kind.name} offset needs an integer value")
        elif self.value is not None:
            raise TypeError(f"{self.kind.name} offset takes no value")

    @classmethod
    def at(cls, n: int) -> "Offset":
        """A specific offset to consume from."""
        return cls(OffsetKind.OFFSET, n)

    @classmethod
    def tail(cls, n: int) -> "Offset":
        """An offset ``n`` messages before the end of the partition."""
        return cls(OffsetKind.OFFSET_TAIL, n)

    @classmethod
    def from_raw(cls, raw_offset: int) -> "Offset":
        """Decode the integer representation used on the wire."""
        if raw_offset == OFFSET_BEGINNING:
            return cls.BEGINNING
        if raw_offset == OFFSET_END:
            return cls.END
        if raw_offset == OFFSET_STORED:
            return cls.STORED
        if raw_offset == OFFSET_INVALID:
            return cls.INVALID
        if raw_offset <= OFFSET_TAIL_BASE:
            return cls.tail(-(raw_offset - OFFSET_TAIL_BASE))
        return cls.at(raw_offset)

    def to_raw(self) -> Optional[int]:
        """Encode as an integer, or ``None`` if the offset is unrepresentable."""
        if self.kind in _LOGICAL_RAW:
            return _LOGICAL_RAW[self.kind]
        assert self.value is not None
        if self.kind is OffsetKind.OFFSET:
            return self.value if self.value >= 0 else None
        return OFFSET_TAIL_BASE - self.value if self.value > 0 else None

    def __repr__(self) -> str:
        if self.kind is OffsetKind.OFFSET:
            return f"Offset.at({self.value})"
        if self.kind is OffsetKind.OFFSET_TAIL:
            return f"Offset.tail({self.value})"
        return f"Offset.{self.kind.name}"


Offset.BEGINNING = Offset(OffsetKind.BEGINNING)
Offset.END = Offset(OffsetKind.END)
Offset.STORED = Offset(OffsetKind.STORED)
Offset.INVALID = Offset(OffsetKind.INVALID)


class KafkaError(Exception):
    """Base class for errors carrying a Kafka error code name."""

    description = "Kafka error"

    def __init__(self, code: str) -> None:
        super().__init__(f"{self.description}: {code}")
        self.code = code

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KafkaError):
            return NotImplemented
        return type(self) is type(other) and self.code == other.code

    def __hash__(self) -> int:
        return hash((type(self), self.code))


class SetPartitionOffsetError(KafkaError):
    """An offset could not be set on a partition."""

    description = "Error setting partition offset"


class OffsetFetchError(KafkaError):
    """A per-partition error reported for an offset operation."""

    description = "Offset fetch error"


def _check_topic(topic: str) -> str:
    if "\0" in topic:
        raise ValueError("topic name must not contain NUL characters")
    return topic


def _raw_or_raise(offset: Offset) -> int:
    raw = offset.to_raw()
    if raw is None:
        raise SetPartitionOffsetError("InvalidArgument")
    return raw


class TopicPartitionListElem:
    """One topic/partition entry with its offset, metadata and error."""

    __slots__ = ("_topic", "_partition", "_raw_offset", "_metadata", "_error")

    def __init__(
        self,
        topic: str,
        partition: int,
        offset: Offset = Offset.INVALID,
        metadata: str = "",
        error: Optional[str] = None,
    ) -> None:
        self._topic = _check_topic(topic)
        self._partition = partition
        self._raw_offset = _raw_or_raise(offset)
        self._metadata = metadata
        self._error = error

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def partition(self) -> int:
        return self._partition

    @property
    def offset(self) -> Offset:
        return Offset.from_raw(self._raw_offset)

    @property
    def metadata(self) -> str:
        return self._metadata

    @property
    def error(self) -> Optional[str]:
        """The name of the error code attached to this entry, if any."""
        return self._error

    def check_error(self) -> None:
        """Raise :class:`OffsetFetchError` if this entry carries an error."""
        if self._error is not None:
            raise OffsetFetchError(self._error)

    def set_offset(self, offset: Offset) -> None:
        """Set the offset; unrepresentable offsets are rejected."""
        self._raw_offset = _raw_or_raise(offset)

    def set_metadata(self, metadata: str) -> None:
        """Set the metadata string attached to this entry."""
        self._metadata = str(metadata)

    def _copy(self) -> "TopicPartitionListElem":
        clone = TopicPartitionListElem(self._topic, self._partition)
        clone._raw_offset = self._raw_offset
        clone._metadata = self._metadata
        clone._error = self._error
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TopicPartitionListElem):
            return NotImplemented
        return (
            self._topic == other._topic
            and self._partition == other._partition
            and self._raw_offset == other._raw_offset
            and self._metadata == other._metadata
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"TopicPartitionListElem(topic={self._topic!r}, "
            f"partition={self._partition}, offset={self.offset!r}, "
            f"metadata={self._metadata!r}, error={self._error!r})"
        )


class TopicPartitionList:
    """An ordered list of topics and partitions with optional offsets."""

    def __init__(self, capacity: int = _DEFAULT_CAPACITY) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._capacity = capacity
        self._elems: List[TopicPartitionListElem] = []

    @classmethod
    def from_topic_map(
        cls, topic_map: Mapping[Tuple[str, int], Offset]
    ) -> "TopicPartitionList":
        """Build a list from a mapping of ``(topic, partition)`` to offset."""
        tpl = cls(len(topic_map))
        for (topic, partition), offset in topic_map.items():
            tpl.add_partition_offset(topic, partition, offset)
        return tpl

    def __len__(self) -> int:
        return len(self._elems)

    def __iter__(self) -> Iterator[TopicPartitionListElem]:
        return iter(self._elems)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TopicPartitionList):
            return NotImplemented
        if len(self) != len(other):
            return False
        return all(
            (found := other.find_partition(elem.topic, elem.partition)) is not None
            and elem == found
            for elem in self._elems
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return "[" + ", ".join(repr(elem) for elem in self._elems) + "]"

    def count(self) -> int:
        """The number of entries in the list."""
        return len(self._elems)

    def capacity(self) -> int:
        """The number of entries the list holds before it has to grow."""
        return self._capacity

    def copy(self) -> "TopicPartitionList":
        """An independent copy of the list and its entries."""
        clone = TopicPartitionList(self._capacity)
        clone._elems = [elem._copy() for elem in self._elems]
        return clone

    __copy__ = copy

    def _append(self, elem: TopicPartitionListElem) -> TopicPartitionListElem:
        if len(self._elems) >= self._capacity:
            self._capacity = max(self._capacity * 2, self._capacity + 1)
        self._elems.append(elem)
        return elem

    def add_topic_unassigned(self, topic: str) -> TopicPartitionListElem:
        """Add a topic whose partition is not assigned."""
        return self.add_partition(topic, PARTITION_UNASSIGNED)

    def add_partition(self, topic: str, partition: int) -> TopicPartitionListElem:
        """Add a topic and partition; returns the new entry."""
        return self._append(TopicPartitionListElem(topic, partition))

    def add_partition_range(
        self, topic: str, start_partition: int, stop_partition: int
    ) -> None:
        """Add every partition from ``start_partition`` to ``stop_partition`` inclusive."""
        _check_topic(topic)
        for partition in range(start_partition, stop_partition + 1):
            self.add_partition(topic, partition)

    def set_partition_offset(self, topic: str, partition: int, offset: Offset) -> None:
        """Set the offset of an existing entry; raises if it is absent."""
        _check_topic(topic)
        raw = _raw_or_raise(offset)
        elem = self.find_partition(topic, partition)
        if elem is None:
            raise SetPartitionOffsetError("UnknownPartition")
        elem._raw_offset = raw

    def add_partition_offset(self, topic: str, partition: int, offset: Offset) -> None:
        """Add a topic and partition, then set its offset."""
        self.add_partition(topic, partition)
        self.set_partition_offset(topic, partition, offset)

    def find_partition(
        self, topic: str, partition: int
    ) -> Optional[TopicPartitionListElem]:
        """The first entry for ``topic`` and ``partition``, or ``None``."""
        _check_topic(topic)
        return next(
            (
                elem
                for elem in self._elems
                if elem.topic == topic and elem.partition == partition
            ),
            None,
        )

    def set_all_offsets(self, offset: Offset) -> None:
        """Set every entry to ``offset``."""
        for elem in self._elems:
            elem.set_offset(offset)

    def elements(self) -> List[TopicPartitionListElem]:
        """All entries, in insertion order."""
        return list(self._elems)

    def elements_for_topic(self, topic: str) -> List[TopicPartitionListElem]:
        """The entries that belong to ``topic``."""
        return [elem for elem in self._elems if elem.topic == topic]

    def to_topic_map(self) -> Dict[Tuple[str, int], Offset]:
        """A mapping of ``(topic, partition)`` to offset."""
        return {(elem.topic, elem.partition): elem.offset for elem in self._elems}