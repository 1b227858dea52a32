"""Registration of event listeners and dispatch of queries to an event service."""

from __future__ import annotations

import abc
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from sysevent_kit.callbacks import (
    BaseListener,
    BaseQueryCallback,
    FunctionListener,
    FunctionQueryCallback,
    OnCompleteFunc,
    OnEventFunc,
    OnQueryFunc,
    OnServiceDiedFunc,
    SysEventListener,
    SysEventQueryCallback,
)
from sysevent_kit.rules import ListenerRule, QueryArg, QueryRule, RuleType

_log = logging.getLogger(__name__)

MAX_NUMBER_OF_EVENT_LIST = 10
MAX_NUMBER_OF_WATCH_EVENT_LIST = 20


class ManagerError(Exception):
    """Base class for failures reported while managing listeners or queries."""


class ListenerNotFoundError(ManagerError, LookupError):
    """The listener is missing, incomplete or was never added."""


class InvalidQueryRuleError(ManagerError, ValueError):
    """A query rule lacks a domain or event names."""


class EventService(abc.ABC):
    """The service that stores events, answers queries and feeds listeners.

    Implementations raise ManagerError (or a subclass) when a request fails.
    """

    @abc.abstractmethod
    def add_listener(self, listener: BaseListener, rules: Sequence[ListenerRule]) -> None:
        """Start delivering events that match ``rules`` to ``listener``."""

    @abc.abstractmethod
    def remove_listener(self, listener: BaseListener) -> None:
        """Stop delivering events to ``listener``."""

    @abc.abstractmethod
    def set_debug_mode(self, listener: BaseListener, mode: bool) -> None:
        """Switch debug mode of a registered listener."""

    @abc.abstractmethod
    def query(self, arg: QueryArg, rules: Sequence[QueryRule], callback: BaseQueryCallback) -> None:
        """Run a query, reporting results through ``callback``."""

    @abc.abstractmethod
    def export(self, arg: QueryArg, rules: Sequence[QueryRule]) -> int:
        """Export matching events; returns the export timestamp."""

    @abc.abstractmethod
    def subscribe(self, rules: Sequence[QueryRule]) -> int:
        """Subscribe to matching events; returns the subscription timestamp."""

    @abc.abstractmethod
    def unsubscribe(self) -> None:
        """Cancel the current subscription."""


ServiceFactory = Callable[[], EventService]


class BaseManager:
    """Binds base listeners to service connections created on demand."""

    def __init__(self, service_factory: ServiceFactory) -> None:
        self._service_factory = service_factory

    def add_listener(self, listener: Optional[BaseListener], rules: Sequence[ListenerRule]) -> None:
        if listener is None:
            _log.warning("no need to add a listener which is null.")
            raise ListenerNotFoundError("listener is null")
        if listener.listener_proxy is None:
            listener.listener_proxy = self._service_factory()
        listener.listener_proxy.add_listener(listener, list(rules))

    def remove_listener(self, listener: Optional[BaseListener]) -> None:
        if listener is None or listener.listener_proxy is None:
            _log.warning("no need to remove a base listener which has not been added.")
            raise ListenerNotFoundError("listener has not been added")
        proxy = listener.listener_proxy
        try:
            proxy.remove_listener(listener)
        finally:
            listener.listener_proxy = None

    def query(
        self,
        arg: QueryArg,
        rules: Sequence[QueryRule],
        callback: Optional[BaseQueryCallback],
    ) -> None:
        self._service_factory().query(arg, list(rules), callback)

    def set_debug_mode(self, listener: Optional[BaseListener], mode: bool) -> None:
        if listener is None or listener.listener_proxy is None:
            _log.warning("no need to set debug mode on a base listener which has not been added.")
            raise ListenerNotFoundError("listener has not been added")
        listener.listener_proxy.set_debug_mode(listener, mode)

    def export(self, arg: QueryArg, rules: Sequence[QueryRule]) -> int:
        return self._service_factory().export(arg, list(rules))

    def subscribe(self, rules: Sequence[QueryRule]) -> int:
        return self._service_factory().subscribe(list(rules))

    def unsubscribe(self) -> None:
        self._service_factory().unsubscribe()


class SysEventManager:
    """Manages user listeners, wrapping each in one base listener."""

    def __init__(self, base_manager: BaseManager) -> None:
        self._base = base_manager
        self._listeners: Dict[SysEventListener, BaseListener] = {}
        self._lock = threading.Lock()

    def add_listener(self, listener: Optional[SysEventListener], rules: Sequence[ListenerRule]) -> None:
        if listener is None:
            _log.warning("add a null listener is not allowed.")
            raise ListenerNotFoundError("listener is null")
        with self._lock:
            base_listener = self._listeners.get(listener)
            if base_listener is None:
                base_listener = BaseListener(listener)
                self._listeners[listener] = base_listener
            self._base.add_listener(base_listener, rules)

    def remove_listener(self, listener: Optional[SysEventListener]) -> None:
        if listener is None:
            _log.warning("remove a null listener is not allowed.")
            raise ListenerNotFoundError("listener is null")
        with self._lock:
            base_listener = self._listeners.get(listener)
            if base_listener is None:
                _log.warning("no need to remove a listener which has not been added.")
                raise ListenerNotFoundError("listener has not been added")
            self._base.remove_listener(base_listener)
            del self._listeners[listener]

    def query(
        self,
        arg: QueryArg,
        rules: Sequence[QueryRule],
        callback: Optional[SysEventQueryCallback],
    ) -> None:
        self._base.query(arg, rules, BaseQueryCallback(callback))

    def set_debug_mode(self, listener: Optional[SysEventListener], mode: bool) -> None:
        if listener is None:
            _log.warning("set debug mode on a null listener is not allowed.")
            raise ListenerNotFoundError("listener is null")
        with self._lock:
            base_listener = self._listeners.get(listener)
            if base_listener is None:
                _log.warning("no need to set debug mode on a listener which has not been added.")
                raise ListenerNotFoundError("listener has not been added")
            self._base.set_debug_mode(base_listener, mode)


@dataclass(frozen=True)
class SimpleQueryRule:
    """A query rule given by domain, event names and an optional condition."""

    domain: str
    event_list: Sequence[str] = field(default_factory=tuple)
    condition: Optional[str] = None


@dataclass(frozen=True)
class WatchRule:
    """A watch rule given by domain, name, tag and numeric rule and event types."""

    domain: str
    name: str
    tag: str = ""
    rule_type: int = int(RuleType.WHOLE_WORD)
    event_type: int = 0


_WatcherKey = Tuple[OnEventFunc, OnServiceDiedFunc]


class WatcherRegistry:
    """Queries and watchers expressed with plain functions instead of objects."""

    def __init__(self, base_manager: BaseManager) -> None:
        self._base = base_manager
        self._watchers: Dict[_WatcherKey, BaseListener] = {}
        self._lock = threading.Lock()

    def query(
        self,
        begin_time: int,
        end_time: int,
        max_events: int,
        rules: Iterable[SimpleQueryRule],
        on_query: Optional[OnQueryFunc],
        on_complete: Optional[OnCompleteFunc],
    ) -> None:
        if begin_time is None or end_time is None or max_events is None:
            raise TypeError("query argument is null")
        if on_query is None or on_complete is None:
            raise TypeError("query callback is null")
        query_rules: List[QueryRule] = []
        for rule in rules:
            if not rule.domain or not rule.event_list:
                raise InvalidQueryRuleError("query rule needs a domain and at least one event name")
            query_rules.append(
                QueryRule(
                    rule.domain,
                    rule.event_list,
                    RuleType.WHOLE_WORD,
                    0,
                    rule.condition if rule.condition is not None else "",
                )
            )
        arg = QueryArg.normalized(begin_time, end_time, max_events)
        callback = FunctionQueryCallback(on_query, on_complete)
        self._base.query(arg, query_rules, BaseQueryCallback(callback))

    def add_watcher(
        self,
        on_event: Optional[OnEventFunc],
        on_service_died: Optional[OnServiceDiedFunc],
        rules: Iterable[WatchRule],
    ) -> None:
        if on_event is None or on_service_died is None:
            raise ListenerNotFoundError("watcher callbacks are required")
        listener_rules = [
            ListenerRule(
                rule.domain,
                rule.name,
                rule.tag,
                RuleType(rule.rule_type),
                rule.event_type & 0xFFFFFFFF,
            )
            for rule in rules
        ]
        base_listener = BaseListener(FunctionListener(on_event, on_service_died))
        self._base.add_listener(base_listener, listener_rules)
        with self._lock:
            self._watchers[(on_event, on_service_died)] = base_listener

    def remove_watcher(
        self,
        on_event: Optional[OnEventFunc],
        on_service_died: Optional[OnServiceDiedFunc],
    ) -> None:
        if on_event is None or on_service_died is None:
            raise ListenerNotFoundError("watcher callbacks are required")
        key = (on_event, on_service_died)
        with self._lock:
            base_listener = self._watchers.get(key)
        if base_listener is None:
            raise ListenerNotFoundError("watcher has not been added")
        self._base.remove_listener(base_listener)
        with self._lock:
            self._watchers.pop(key, None)