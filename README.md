# sysevent-kit

A library for working with system event records. It can:

- read the header fields and typed parameters of events stored as JSON text;
- describe the rules that choose which events to watch or query;
- route listeners, queries and watchers to an event service that you provide.

The library has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Reading an event record

`sysevent_kit.record.SysEventRecord` wraps the JSON text of a single event.
Each header field has its own method. If a field is missing or has the wrong
type, the method returns the default: `""` for text fields and `0` for
numeric ones.

```python
from sysevent_kit.record import SysEventRecord

record = SysEventRecord('{"domain_":"HIVIEWDFX","name_":"PLUGIN_LOAD","type_":4,"pid_":12}')
record.domain()       # "HIVIEWDFX"
record.event_name()   # "PLUGIN_LOAD"
record.event_type()   # 4
record.pid()          # 12
record.tag()          # ""  (not present)
record.param_names()  # ["domain_", "name_", "pid_", "type_"]
record.as_json()      # the original text
```

The header methods are:

| Method | Returns |
| --- | --- |
| `domain()` | text |
| `event_name()` | text |
| `event_type()` | number |
| `time()` | number |
| `time_zone()` | text |
| `pid()` | number |
| `tid()` | number |
| `uid()` | number |
| `trace_id()` | number, read from the hexadecimal string in `traceid_` |
| `span_id()` | number |
| `pspan_id()` | number |
| `trace_flag()` | number |
| `level()` | text |
| `tag()` | text |

For typed access to parameters, use these methods:

- `get_int64`, `get_uint64`, `get_double`, `get_string`;
- the list forms `get_int64_list`, `get_uint64_list`, `get_double_list` and `get_string_list`.

They do not fall back to a default. On failure they raise one of these errors:

- `RecordNotInitializedError` when the text is not a JSON object or array. Its `code` is -1.
- `KeyNotFoundError` when the parameter is not present. Its `code` is -2.
- `TypeMismatchError` when the value cannot be read as the requested type. Its `code` is -3.

All three derive from `RecordError`.

Numbers, booleans and `null` can all be read as strings:

```python
record = SysEventRecord('{"PARAM_INT":-123,"PARAM_INTS":[-1,-2,3],"PARAM_STR":"test"}')
record.get_int64("PARAM_INT")          # -123
record.get_string("PARAM_INT")         # "-123"
record.get_int64_list("PARAM_INTS")    # [-1, -2, 3]
record.get_string_list("PARAM_INTS")   # ["-1", "-2", "3"]
record.get_int64("PARAM_STR")          # raises TypeMismatchError
```

`sysevent_kit.record.JsonValue` is the parsed-value type the record is built on.
Use `JsonValue.parse(text)` to parse text into it. It provides:

- type checks: `is_int64`, `is_uint64`, `is_double`, `is_string`, `is_bool`, `is_null`, `is_array`, `is_numeric`;
- member and element access: `get`, `index`, `is_member`, `size`, `param_names`;
- conversions: `as_int64`, `as_uint64`, `as_double`, `as_string`.

## Reading parameters straight from JSON text

`sysevent_kit.params` offers the same lookups as plain functions that take the
JSON text directly:

- `get_param_names(json_text)`;
- `get_int64_value`, `get_uint64_value`, `get_double_value`, `get_string_value`;
- `get_int64_values`, `get_uint64_values`, `get_double_values`, `get_string_values`.

Each of the value functions takes `(json_text, name)`. If `json_text` or
`name` is `None`, they raise `MissingInputError`, which is a `RecordError`
with `code` -1. In every other case they behave like the `SysEventRecord`
methods.

## Record summaries

`sysevent_kit.convertor.convert_record(record)` returns a frozen
`RecordSummary`. It holds every header field plus the JSON text.

Some fields have size limits, counted as UTF-8 bytes:

- domain: at most 16 bytes;
- event name: at most 32 bytes;
- time zone: at most 5 bytes;
- JSON text: at most 384 KiB.

A field over its limit raises `ConversionError`.

`convert_records(records)` converts a whole sequence. It stops at the first
record that fails. The `ConversionError` it raises has `index` set to that
record's position.

## Rules

`sysevent_kit.rules` defines:

- `RuleType`: `WHOLE_WORD`, `PREFIX` and `REGULAR`.
- `ListenerRule(domain, event_name, tag, rule_type, event_type)`: a watch rule.
- `QueryRule(domain, event_list, rule_type, event_type, condition)`: a query rule. `event_list` is stored as a tuple.
- `QueryArg`: the time window, event limit and sequence range of a query.

`QueryArg.normalized(...)` treats negative values as "no limit". The begin
time becomes 0, the end time becomes 2**63-1 and the event count becomes
2**31-1.

## Listeners and query callbacks

`sysevent_kit.callbacks` defines two interfaces:

- `SysEventListener`, with `on_event` and `on_service_died`;
- `SysEventQueryCallback`, with `on_query` and `on_complete`.

It also provides adapters:

- `BaseListener` turns raw event text into `SysEventRecord` objects and hands them to a listener.
- `BaseQueryCallback` does the same for query results.
- `FunctionListener` and `FunctionQueryCallback` adapt plain functions. The functions receive `RecordSummary` objects.

If an event fails to convert, `FunctionListener` logs the error and drops the
event. If a batch fails to convert, `FunctionQueryCallback` does the same with
the whole batch.

## Managers and the event service

`sysevent_kit.manager.EventService` is an abstract class. It defines the
requests a service answers:

- `add_listener`
- `remove_listener`
- `set_debug_mode`
- `query`
- `export`
- `subscribe`
- `unsubscribe`

You supply the implementation. Three classes sit on top of it:

- `BaseManager(service_factory)` calls the factory to get a service for each request. A listener keeps the service it was added with until it is removed.
- `SysEventManager(base_manager)` keeps one base listener for each of your `SysEventListener` objects.
- `WatcherRegistry(base_manager)` offers a function-based API:
  - `query(begin_time, end_time, max_events, rules, on_query, on_complete)`, with rules given as `SimpleQueryRule`;
  - `add_watcher(on_event, on_service_died, rules)`, with rules given as `WatchRule`;
  - `remove_watcher(on_event, on_service_died)`.

```python
from sysevent_kit.manager import BaseManager, EventService, WatchRule, WatcherRegistry

class MyService(EventService):
    def add_listener(self, listener, rules): ...
    def remove_listener(self, listener): ...
    def set_debug_mode(self, listener, mode): ...
    def query(self, arg, rules, callback): ...
    def export(self, arg, rules): return 0
    def subscribe(self, rules): return 0
    def unsubscribe(self): ...

service = MyService()
registry = WatcherRegistry(BaseManager(lambda: service))
registry.add_watcher(print, lambda: None, [WatchRule("HIVIEWDFX", "PLUGIN_LOAD")])
```

Failures raise subclasses of `ManagerError`:

- `ListenerNotFoundError` for a listener or watcher that is missing, incomplete or was never added.
- `InvalidQueryRuleError` for a `SimpleQueryRule` that has no domain or no event names.

`WatcherRegistry.query` raises `TypeError` if the query argument or either
callback is `None`.

## What this package does not do

The package contains no event service. It does not store events, run queries,
enforce query or watcher limits, or deliver live events. Those jobs belong to
the `EventService` you plug in. It also has no way to write events and no
command-line tool.