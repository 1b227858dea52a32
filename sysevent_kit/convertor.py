"""Flatten a system event record into a fixed summary with bounded field sizes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from sysevent_kit.record import SysEventRecord

MAX_LENGTH_OF_EVENT_DOMAIN = 17
MAX_LENGTH_OF_EVENT_NAME = 33
MAX_LENGTH_OF_EVENT_TAG = 85
MAX_LENGTH_OF_TIME_ZONE = 6
MAX_LENGTH_OF_EVENT = 384 * 1024


class ConversionError(ValueError):
    """A record field does not fit into its summary field."""

    def __init__(self, message: str, index: Optional[int] = None) -> None:
        super().__init__(message)
        self.index = index


@dataclass(frozen=True)
class RecordSummary:
    """The common header fields of an event together with its JSON text."""

    domain: str
    event_name: str
    event_type: int
    time: int
    time_zone: str
    pid: int
    tid: int
    uid: int
    trace_id: int
    span_id: int
    pspan_id: int
    trace_flag: int
    level: str
    tag: str
    json_text: str


def _bounded(field_name: str, text: str, max_len: Optional[int]) -> str:
    if max_len is not None and len(text.encode("utf-8")) > max_len:
        raise ConversionError(f"{field_name} is longer than {max_len} bytes: {text[:64]!r}")
    return text


def convert_record(record: SysEventRecord) -> RecordSummary:
    """Summarize ``record``; raise ConversionError when a field is too long."""
    domain = _bounded("domain", record.domain(), MAX_LENGTH_OF_EVENT_DOMAIN - 1)
    event_name = _bounded("event name", record.event_name(), MAX_LENGTH_OF_EVENT_NAME - 1)
    time_zone = _bounded("time zone", record.time_zone(), MAX_LENGTH_OF_TIME_ZONE - 1)
    json_text = _bounded("event", record.as_json(), MAX_LENGTH_OF_EVENT)
    return RecordSummary(
        domain=domain,
        event_name=event_name,
        event_type=record.event_type(),
        time=record.time(),
        time_zone=time_zone,
        pid=record.pid(),
        tid=record.tid(),
        uid=record.uid(),
        trace_id=record.trace_id(),
        span_id=record.span_id(),
        pspan_id=record.pspan_id(),
        trace_flag=record.trace_flag(),
        level=record.level(),
        tag=record.tag(),
        json_text=json_text,
    )


def convert_records(records: Iterable[SysEventRecord]) -> List[RecordSummary]:
    """Summarize every record, stopping at the first one that cannot be converted."""
    summaries = []
    for index, record in enumerate(records):
        try:
            summaries.append(convert_record(record))
        except ConversionError as error:
            raise ConversionError(f"record {index}: {error}", index) from error
    return summaries