import pytest

from sysevent_kit.callbacks import BaseListener, BaseQueryCallback, SysEventListener, SysEventQueryCallback
from sysevent_kit.manager import (
    BaseManager,
    EventService,
    InvalidQueryRuleError,
    ListenerNotFoundError,
    ManagerError,
    SimpleQueryRule,
    SysEventManager,
    WatcherRegistry,
    WatchRule,
)
from sysevent_kit.rules import ListenerRule, QueryArg, QueryRule, RuleType

TEST_DOMAIN = "HIVIEWDFX"
TEST_NAME = "PLUGIN_LOAD"
EVENT_TEXT = '{"domain_":"HIVIEWDFX","name_":"PLUGIN_LOAD","type_":4,"tz_":"+0800","pid_":12}'


class FakeService(EventService):
    def __init__(self, fail=()):
        self.fail = set(fail)
        self.listeners = {}
        self.debug = {}
        self.queries = []
        self.exports = []
        self.unsubscribed = 0
        self.events = [EVENT_TEXT]

    def add_listener(self, listener, rules):
        if "add" in self.fail:
            raise ManagerError("add refused")
        self.listeners[listener] = list(rules)

    def remove_listener(self, listener):
        if "remove" in self.fail:
            raise ManagerError("remove refused")
        if listener not in self.listeners:
            raise ListenerNotFoundError("unknown")
        del self.listeners[listener]

    def set_debug_mode(self, listener, mode):
        if listener not in self.listeners:
            raise ListenerNotFoundError("unknown")
        self.debug[listener] = mode

    def query(self, arg, rules, callback):
        self.queries.append((arg, list(rules), callback))
        callback.on_query(self.events, [])
        callback.on_complete(0, len(self.events), 0)

    def export(self, arg, rules):
        self.exports.append((arg, list(rules)))
        return 1700000000000

    def subscribe(self, rules):
        return 1700000000001

    def unsubscribe(self):
        self.unsubscribed += 1


class Counter:
    def __init__(self, service):
        self.service = service
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.service


class RecordingListener(SysEventListener):
    def __init__(self):
        self.events = []
        self.died = 0

    def on_event(self, record):
        self.events.append(record)

    def on_service_died(self):
        self.died += 1


class RecordingQuery(SysEventQueryCallback):
    def __init__(self):
        self.batches = []
        self.completed = []

    def on_query(self, records):
        self.batches.append(records)

    def on_complete(self, reason, total):
        self.completed.append((reason, total))


@pytest.fixture
def service():
    return FakeService()


@pytest.fixture
def factory(service):
    return Counter(service)


# BaseManager


def test_base_add_null_listener_raises(factory):
    with pytest.raises(ListenerNotFoundError):
        BaseManager(factory).add_listener(None, [])


def test_base_add_creates_proxy_once(factory, service):
    manager = BaseManager(factory)
    listener = BaseListener()
    rules = [ListenerRule("DOMAIN", "EVENT_NAME", "TAG", RuleType.WHOLE_WORD)]
    manager.add_listener(listener, rules)
    manager.add_listener(listener, rules)
    assert factory.calls == 1
    assert listener.listener_proxy is service
    assert service.listeners[listener] == rules


def test_base_remove_unadded_raises(factory):
    manager = BaseManager(factory)
    with pytest.raises(ListenerNotFoundError):
        manager.remove_listener(BaseListener())
    with pytest.raises(ListenerNotFoundError):
        manager.remove_listener(None)


def test_base_remove_clears_proxy(factory, service):
    manager = BaseManager(factory)
    listener = BaseListener()
    manager.add_listener(listener, [])
    manager.remove_listener(listener)
    assert listener.listener_proxy is None
    assert listener not in service.listeners


def test_base_remove_failure_still_drops_proxy():
    service = FakeService(fail={"remove"})
    manager = BaseManager(lambda: service)
    listener = BaseListener()
    manager.add_listener(listener, [])
    with pytest.raises(ManagerError):
        manager.remove_listener(listener)
    assert listener.listener_proxy is None


def test_base_set_debug_mode(factory, service):
    manager = BaseManager(factory)
    listener = BaseListener()
    with pytest.raises(ListenerNotFoundError):
        manager.set_debug_mode(listener, True)
    manager.add_listener(listener, [])
    manager.set_debug_mode(listener, True)
    assert service.debug[listener] is True
    manager.set_debug_mode(listener, False)
    assert service.debug[listener] is False


def test_base_query_export_subscribe(factory, service):
    manager = BaseManager(factory)
    arg = QueryArg.normalized(-1, -1, 10)
    rules = [QueryRule("AAFWK", ["START_ABILITY"])]
    manager.query(arg, rules, BaseQueryCallback())
    assert service.queries[0][1] == rules
    assert manager.export(arg, rules) == 1700000000000
    assert manager.subscribe(rules) == 1700000000001
    manager.unsubscribe()
    assert service.unsubscribed == 1
    assert factory.calls == 4


# SysEventManager


def test_manager_null_listener_raises(factory):
    manager = SysEventManager(BaseManager(factory))
    with pytest.raises(ListenerNotFoundError):
        manager.add_listener(None, [])
    with pytest.raises(ListenerNotFoundError):
        manager.remove_listener(None)
    with pytest.raises(ListenerNotFoundError):
        manager.set_debug_mode(None, True)


def test_manager_remove_unadded_raises(factory):
    manager = SysEventManager(BaseManager(factory))
    with pytest.raises(ListenerNotFoundError):
        manager.remove_listener(RecordingListener())
    with pytest.raises(ListenerNotFoundError):
        manager.set_debug_mode(RecordingListener(), True)


def test_manager_add_delivers_events_and_remove(factory, service):
    manager = SysEventManager(BaseManager(factory))
    listener = RecordingListener()
    manager.add_listener(listener, [ListenerRule(TEST_DOMAIN, TEST_NAME)])
    (base_listener,) = service.listeners
    base_listener.on_event(TEST_DOMAIN, TEST_NAME, 4, EVENT_TEXT)
    base_listener.on_service_died()
    assert listener.events[0].domain() == TEST_DOMAIN
    assert listener.died == 1
    manager.set_debug_mode(listener, True)
    assert service.debug[base_listener] is True
    manager.remove_listener(listener)
    assert service.listeners == {}
    with pytest.raises(ListenerNotFoundError):
        manager.remove_listener(listener)


def test_manager_failed_remove_keeps_listener():
    service = FakeService(fail={"remove"})
    manager = SysEventManager(BaseManager(lambda: service))
    listener = RecordingListener()
    manager.add_listener(listener, [])
    with pytest.raises(ManagerError):
        manager.remove_listener(listener)
    service.fail.clear()
    # the base listener lost its proxy, so it now counts as not added
    with pytest.raises(ListenerNotFoundError):
        manager.set_debug_mode(listener, True)
    manager.add_listener(listener, [])
    manager.remove_listener(listener)
    assert service.listeners == {}


def test_manager_query_wraps_callback(factory):
    manager = SysEventManager(BaseManager(factory))
    callback = RecordingQuery()
    manager.query(QueryArg.normalized(), [QueryRule(TEST_DOMAIN, [TEST_NAME])], callback)
    assert callback.batches[0][0].event_name() == TEST_NAME
    assert callback.completed == [(0, 1)]


# WatcherRegistry


def _on_query(records):
    pass


def _on_complete(reason, total):
    pass


def _on_event(record):
    pass


def _on_service_died():
    pass


def test_query_forwards_normalized_rules(factory, service):
    registry = WatcherRegistry(BaseManager(factory))
    seen = []
    done = []
    rules = [
        SimpleQueryRule(TEST_DOMAIN, [TEST_NAME, "PLUGIN_UNLOAD"]),
        SimpleQueryRule(TEST_DOMAIN, ["APP_USAGE", "SYS_USAGE"], condition='{"version":"V1"}'),
    ]
    registry.query(0, -1, 10, rules, seen.append, lambda reason, total: done.append((reason, total)))
    arg, query_rules, _ = service.queries[0]
    assert arg.begin_time == 0
    assert arg.end_time == (1 << 63) - 1
    assert arg.max_events == 10
    assert query_rules[0] == QueryRule(TEST_DOMAIN, [TEST_NAME, "PLUGIN_UNLOAD"], RuleType.WHOLE_WORD, 0, "")
    assert query_rules[1].condition == '{"version":"V1"}'
    assert seen[0][0].domain == TEST_DOMAIN
    assert seen[0][0].pid == 12
    assert done == [(0, 1)]


@pytest.mark.parametrize(
    "rule",
    [
        SimpleQueryRule(TEST_DOMAIN, []),
        SimpleQueryRule("", [TEST_NAME]),
        SimpleQueryRule(TEST_DOMAIN, [], condition='{"version":"V1"}'),
        SimpleQueryRule("", [TEST_NAME], condition='{"version":"V1"}'),
        SimpleQueryRule("", [], condition='{"version":"V1"}'),
    ],
)
def test_query_invalid_rule(factory, service, rule):
    registry = WatcherRegistry(BaseManager(factory))
    with pytest.raises(InvalidQueryRuleError):
        registry.query(0, 100, 10, [rule], _on_query, _on_complete)
    assert service.queries == []


def test_query_null_arguments(factory):
    registry = WatcherRegistry(BaseManager(factory))
    with pytest.raises(TypeError):
        registry.query(None, 100, 10, [], _on_query, _on_complete)
    with pytest.raises(TypeError):
        registry.query(0, 100, 10, [], None, _on_complete)
    with pytest.raises(TypeError):
        registry.query(0, 100, 10, [], _on_query, None)


def test_add_watcher_null_callbacks(factory, service):
    registry = WatcherRegistry(BaseManager(factory))
    rules = [WatchRule(TEST_DOMAIN, TEST_NAME, "", 1, 0)]
    with pytest.raises(ListenerNotFoundError):
        registry.add_watcher(None, _on_service_died, rules)
    with pytest.raises(ListenerNotFoundError):
        registry.add_watcher(_on_event, None, rules)
    with pytest.raises(ListenerNotFoundError):
        registry.remove_watcher(None, None)
    assert service.listeners == {}


def test_watcher_add_dispatch_remove(factory, service):
    registry = WatcherRegistry(BaseManager(factory))
    events = []
    died = []

    def on_event(summary):
        events.append(summary)

    def on_service_died():
        died.append(True)

    with pytest.raises(ListenerNotFoundError):
        registry.remove_watcher(on_event, on_service_died)
    registry.add_watcher(on_event, on_service_died, [WatchRule(TEST_DOMAIN, TEST_NAME, "", 1, -1)])
    ((base_listener, rules),) = service.listeners.items()
    assert rules == [ListenerRule(TEST_DOMAIN, TEST_NAME, "", RuleType.WHOLE_WORD, 0xFFFFFFFF)]
    base_listener.on_event(TEST_DOMAIN, TEST_NAME, 4, EVENT_TEXT)
    base_listener.on_service_died()
    assert events[0].event_name == TEST_NAME
    assert events[0].json_text == EVENT_TEXT
    assert died == [True]
    registry.remove_watcher(on_event, on_service_died)
    assert service.listeners == {}
    with pytest.raises(ListenerNotFoundError):
        registry.remove_watcher(on_event, on_service_died)


def test_failed_add_is_not_registered():
    service = FakeService(fail={"add"})
    registry = WatcherRegistry(BaseManager(lambda: service))
    with pytest.raises(ManagerError):
        registry.add_watcher(_on_event, _on_service_died, [WatchRule(TEST_DOMAIN, TEST_NAME)])
    with pytest.raises(ListenerNotFoundError):
        registry.remove_watcher(_on_event, _on_service_died)


def test_invalid_rule_type_rejected(factory):
    registry = WatcherRegistry(BaseManager(factory))
    with pytest.raises(ValueError):
        registry.add_watcher(_on_event, _on_service_died, [WatchRule(TEST_DOMAIN, TEST_NAME, "", 9, 0)])