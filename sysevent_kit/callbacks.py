"""Listener and query callback interfaces, and adapters around them."""

from __future__ import annotations

import abc
import logging
from typing import Any, Callable, Iterable, List, Optional, Sequence

from sysevent_kit.convertor import ConversionError, RecordSummary, convert_record, convert_records
from sysevent_kit.record import SysEventRecord

_log = logging.getLogger(__name__)

OnEventFunc = Callable[[RecordSummary], Any]
OnServiceDiedFunc = Callable[[], Any]
OnQueryFunc = Callable[[List[RecordSummary]], Any]
OnCompleteFunc = Callable[[int, int], Any]


class SysEventListener(abc.ABC):
    """Receives events as they are written, and news of the service going away."""

    @abc.abstractmethod
    def on_event(self, record: SysEventRecord) -> None:
        """Handle one event."""

    @abc.abstractmethod
    def on_service_died(self) -> None:
        """Handle the loss of the event service."""


class SysEventQueryCallback(abc.ABC):
    """Receives the results of a query in batches, then its completion."""

    @abc.abstractmethod
    def on_query(self, records: List[SysEventRecord]) -> None:
        """Handle one batch of queried events."""

    @abc.abstractmethod
    def on_complete(self, reason: int, total: int) -> None:
        """Handle the end of the query."""


class BaseListener:
    """Turns raw event text into records and hands them to a listener."""

    def __init__(self, listener: Optional[SysEventListener] = None) -> None:
        self.listener = listener
        # Set by the manager while the listener is registered with a service.
        self.listener_proxy: Any = None

    def on_event(self, domain: str, event_name: str, event_type: int, event_detail: str) -> None:
        if self.listener is not None:
            self.listener.on_event(SysEventRecord(event_detail))

    def on_service_died(self) -> None:
        if self.listener is not None:
            self.listener.on_service_died()


class BaseQueryCallback:
    """Turns raw query results into records and hands them to a callback."""

    def __init__(self, callback: Optional[SysEventQueryCallback] = None) -> None:
        self.callback = callback

    def on_query(self, sys_events: Iterable[str], seqs: Sequence[int] = ()) -> None:
        if self.callback is not None:
            self.callback.on_query([SysEventRecord(content) for content in sys_events])

    def on_complete(self, reason: int, total: int, seq: Optional[int] = None) -> None:
        if self.callback is not None:
            self.callback.on_complete(reason, total)


class FunctionListener(SysEventListener):
    """A listener that passes record summaries to plain functions."""

    def __init__(
        self,
        on_event: Optional[OnEventFunc],
        on_service_died: Optional[OnServiceDiedFunc],
    ) -> None:
        self._on_event = on_event
        self._on_service_died = on_service_died

    @property
    def functions(self) -> tuple:
        return (self._on_event, self._on_service_died)

    def on_event(self, record: Optional[SysEventRecord]) -> None:
        if self._on_event is None or record is None:
            _log.error("OnEvent callback or sys event is null.")
            return
        try:
            summary = convert_record(record)
        except ConversionError as error:
            _log.error("Failed to convert event: %s", error)
            return
        self._on_event(summary)

    def on_service_died(self) -> None:
        if self._on_service_died is None:
            _log.error("OnServiceDied callback is null.")
            return
        self._on_service_died()


class FunctionQueryCallback(SysEventQueryCallback):
    """A query callback that passes record summaries to plain functions."""

    def __init__(self, on_query: Optional[OnQueryFunc], on_complete: Optional[OnCompleteFunc]) -> None:
        self._on_query = on_query
        self._on_complete = on_complete

    def on_query(self, records: Optional[List[SysEventRecord]]) -> None:
        if self._on_query is None:
            _log.error("OnQuery callback is null")
            return
        if not records:
            self._on_query([])
            return
        try:
            summaries = convert_records(records)
        except ConversionError as error:
            _log.error("Failed to convert record, index=%s, size=%d", error.index, len(records))
            return
        self._on_query(summaries)

    def on_complete(self, reason: int, total: int) -> None:
        if self._on_complete is None:
            _log.error("OnComplete callback is null")
            return
        self._on_complete(reason, total)