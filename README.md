# kafkaoffsets

Pure-Python data structures for Kafka topics, partitions and offsets, plus
small helpers for timeouts and deadlines. It has no runtime dependencies.

## What it does not do

The package does not talk to Kafka. It has no client, producer, consumer or
admin interface, and it opens no network connections. It only models the
topic/partition/offset lists and timeout values such a client works with.

## Installation

```
pip install kafkaoffsets
```

## Offsets

`Offset` (in `kafkaoffsets.topic_partition_list`) is a frozen value with an
`OffsetKind` and, for specific and tail offsets, an integer `value`. The
constants `Offset.BEGINNING`, `Offset.END`, `Offset.STORED` and
`Offset.INVALID` stand for the special offsets; `Offset.at(n)` and
`Offset.tail(n)` build the others. `to_raw()` and `from_raw()` convert to and
from the usual integer encoding (beginning -2, end -1, stored -1000,
invalid -1001, tail offsets counted down from -2000).

```python
from kafkaoffsets.topic_partition_list import Offset

Offset.at(123).to_raw()        # 123
Offset.tail(10).to_raw()       # -2010
Offset.from_raw(-2010)         # Offset.tail(10)
Offset.at(-1).to_raw()         # None: cannot be represented
Offset.tail(0).to_raw()        # None
```

## Topic partition lists

```python
from kafkaoffsets.topic_partition_list import (
    Offset,
    SetPartitionOffsetError,
    TopicPartitionList,
)

tpl = TopicPartitionList()
tpl.add_partition("orders", 0)
tpl.add_partition_range("orders", 1, 3)        # partitions 1, 2 and 3
tpl.add_partition_offset("payments", 0, Offset.at(42))
tpl.set_partition_offset("orders", 2, Offset.at(7))

try:
    tpl.set_partition_offset("missing", 0, Offset.at(0))
except SetPartitionOffsetError as err:
    err.code                                   # "UnknownPartition"

topic_map = tpl.to_topic_map()                 # {("orders", 0): Offset.INVALID, ...}
same = TopicPartitionList.from_topic_map(topic_map)
assert same == tpl

elem = tpl.find_partition("orders", 2)
elem.offset                                    # Offset.at(7)
elem.set_metadata("checkpoint")
```

New entries start with `Offset.INVALID`, empty metadata and no error.
`add_topic_unassigned(topic)` adds an entry with partition -1.

A list supports `len()`, iteration, `count()`, `capacity()`, `copy()`,
`elements()`, `elements_for_topic(topic)` and `set_all_offsets(offset)`.
Two lists are equal when they have the same number of entries and every entry
has a match with the same topic, partition, offset and metadata.

Setting an offset that cannot be represented (such as `Offset.at(-1)` or
`Offset.tail(-1)`) raises `SetPartitionOffsetError` with code
`"InvalidArgument"`. An entry's `error` holds an error code name or `None`;
`check_error()` raises `OffsetFetchError` when it is set. Both exception
classes derive from `KafkaError`, which carries the code in `code`.

## Timeouts and deadlines

`kafkaoffsets.timeouts` provides `Timeout`, `Deadline`, `millis_to_epoch`
and `current_time_millis`. Durations may be given as a `timedelta` or a number
of seconds; negative durations raise `ValueError`.

```python
from datetime import timedelta
from kafkaoffsets.timeouts import Deadline, Timeout, current_time_millis

timeout = Timeout.after(1.5)
timeout.as_millis()                            # 1500
Timeout.never().as_millis()                    # -1
Timeout.from_duration(None)                    # Timeout.never()
timeout.saturating_sub(timedelta(seconds=5))   # zero-length timeout
timeout - Timeout.after(0.5)                   # Timeout.after(1.0)
Timeout.after(1) < Timeout.never()             # True

deadline = Deadline.from_timeout(timeout)
deadline.elapsed()                             # False until 1.5 s have passed
deadline.remaining_millis_i32()                # capped at 2**31 - 1
Timeout.from_deadline(deadline)                # the time still left

current_time_millis()                          # milliseconds since the Unix epoch
```

Subtracting `Timeout.never()` from anything raises `ValueError`, as does a
subtraction that would go below zero. `millis_to_epoch` accepts a `datetime`
(naive values are taken as local time) or seconds since the epoch, and returns
0 for times before the epoch.

## Running the tests

```
pip install -e ".[test]"
pytest
```