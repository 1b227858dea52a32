"""System event records parsed from their JSON text, with typed parameter access."""

from __future__ import annotations

import enum
import json
import re
from typing import Any, Callable, List

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MAX = (1 << 64) - 1

_INT64_MIN_F = float(INT64_MIN)
_INT64_MAX_F = float(INT64_MAX)
_UINT64_MAX_F = float(UINT64_MAX)


class RecordError(Exception):
    """Base class for failures while reading a record parameter."""

    code = -1


class RecordNotInitializedError(RecordError, ValueError):
    """The record text could not be parsed as a JSON document."""

    code = -1


class KeyNotFoundError(RecordError, LookupError):
    """The requested parameter is not present in the record."""

    code = -2


class TypeMismatchError(RecordError, TypeError):
    """The parameter exists but holds a value of an incompatible type."""

    code = -3


class _Kind(enum.IntEnum):
    NULL = 0
    INT = 1
    UINT = 2
    REAL = 3
    STRING = 4
    BOOLEAN = 5
    ARRAY = 6
    OBJECT = 7


def _kind(raw: Any) -> _Kind:
    if raw is None:
        return _Kind.NULL
    if isinstance(raw, bool):
        return _Kind.BOOLEAN
    if isinstance(raw, int):
        if INT64_MIN <= raw <= INT64_MAX:
            return _Kind.INT
        if INT64_MAX < raw <= UINT64_MAX:
            return _Kind.UINT
        return _Kind.REAL
    if isinstance(raw, float):
        return _Kind.REAL
    if isinstance(raw, str):
        return _Kind.STRING
    if isinstance(raw, (list, tuple)):
        return _Kind.ARRAY
    if isinstance(raw, dict):
        return _Kind.OBJECT
    raise TypeError(f"unsupported JSON value: {raw!r}")


def _is_int64(raw: Any) -> bool:
    kind = _kind(raw)
    if kind is _Kind.INT:
        return True
    if kind is _Kind.REAL:
        number = float(raw)
        return _INT64_MIN_F <= number < _INT64_MAX_F and number.is_integer()
    return False


def _is_uint64(raw: Any) -> bool:
    kind = _kind(raw)
    if kind is _Kind.INT:
        return raw >= 0
    if kind is _Kind.UINT:
        return True
    if kind is _Kind.REAL:
        number = float(raw)
        return 0.0 <= number < _UINT64_MAX_F and number.is_integer()
    return False


def _as_int64(raw: Any) -> int:
    kind = _kind(raw)
    if kind is _Kind.NULL:
        return 0
    if kind is _Kind.BOOLEAN:
        return int(raw)
    if kind is _Kind.INT:
        return raw
    if kind is _Kind.REAL:
        number = float(raw)
        if _INT64_MIN_F <= number <= _INT64_MAX_F:
            result = int(number)
            if INT64_MIN <= result <= INT64_MAX:
                return result
        raise TypeMismatchError(f"double {number!r} out of int64 range")
    if kind is _Kind.UINT:
        raise TypeMismatchError(f"unsigned integer {raw} out of int64 range")
    raise TypeMismatchError(f"{kind.name.lower()} value is not convertible to int64")


def _as_uint64(raw: Any) -> int:
    kind = _kind(raw)
    if kind is _Kind.NULL:
        return 0
    if kind is _Kind.BOOLEAN:
        return int(raw)
    if kind is _Kind.INT:
        if raw < 0:
            raise TypeMismatchError(f"negative integer {raw} out of uint64 range")
        return raw
    if kind is _Kind.UINT:
        return raw
    if kind is _Kind.REAL:
        number = float(raw)
        if 0.0 <= number <= _UINT64_MAX_F:
            result = int(number)
            if result <= UINT64_MAX:
                return result
        raise TypeMismatchError(f"double {number!r} out of uint64 range")
    raise TypeMismatchError(f"{kind.name.lower()} value is not convertible to uint64")


def _as_double(raw: Any) -> float:
    kind = _kind(raw)
    if kind is _Kind.NULL:
        return 0.0
    if kind in (_Kind.BOOLEAN, _Kind.INT, _Kind.UINT, _Kind.REAL):
        return float(raw)
    raise TypeMismatchError(f"{kind.name.lower()} value is not convertible to double")


def _format_real(number: float) -> str:
    text = format(number, ".17g")
    if "." not in text and "e" not in text:
        text += ".0"
    return text


def _as_string(raw: Any) -> str:
    kind = _kind(raw)
    if kind is _Kind.NULL:
        return ""
    if kind is _Kind.STRING:
        return raw
    if kind is _Kind.BOOLEAN:
        return "true" if raw else "false"
    if kind in (_Kind.INT, _Kind.UINT):
        return str(raw)
    if kind is _Kind.REAL:
        return _format_real(float(raw))
    raise TypeMismatchError(f"{kind.name.lower()} value is not convertible to string")


def _parse_int(text: str) -> Any:
    number = int(text)
    if INT64_MIN <= number <= UINT64_MAX:
        return number
    return _parse_float(text)


def _parse_float(text: str) -> float:
    number = float(text)
    if number in (float("inf"), float("-inf")):
        raise ValueError(f"number out of range: {text}")
    return number


def _reject_constant(name: str) -> Any:
    raise ValueError(f"special float {name} is not allowed")


def _unique_object(pairs: list) -> dict:
    result: dict = {}
    for key, value in pairs:
        if key in result:
            raise ValueError(f"duplicate key {key!r}")
        result[key] = value
    return result


class JsonValue:
    """A parsed JSON value with strict typing rules for 64-bit numbers."""

    __slots__ = ("_raw", "_initialized")

    def __init__(self, raw: Any = None, initialized: bool = True) -> None:
        self._raw = raw
        self._initialized = initialized

    @classmethod
    def parse(cls, text: str) -> "JsonValue":
        """Parse a strict JSON document; on failure return an uninitialized value."""
        try:
            raw = json.loads(
                text,
                parse_int=_parse_int,
                parse_float=_parse_float,
                parse_constant=_reject_constant,
                object_pairs_hook=_unique_object,
            )
        except (ValueError, RecursionError):
            return cls(None, initialized=False)
        if not isinstance(raw, (dict, list)):
            return cls(None, initialized=False)
        return cls(raw)

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def value(self) -> Any:
        return self._raw

    def __repr__(self) -> str:
        if not self._initialized:
            return "JsonValue(<uninitialized>)"
        return f"JsonValue({self._raw!r})"

    def _kind(self) -> _Kind:
        return _kind(self._raw) if self._initialized else _Kind.NULL

    def is_array(self) -> bool:
        return self._initialized and self._kind() is _Kind.ARRAY

    def is_member(self, key: str) -> bool:
        return self._initialized and self._kind() is _Kind.OBJECT and key in self._raw

    def is_int64(self) -> bool:
        return self._initialized and _is_int64(self._raw)

    def is_uint64(self) -> bool:
        return self._initialized and _is_uint64(self._raw)

    def is_double(self) -> bool:
        return self._initialized and self._kind() in (_Kind.INT, _Kind.UINT, _Kind.REAL)

    def is_string(self) -> bool:
        return self._initialized and self._kind() is _Kind.STRING

    def is_bool(self) -> bool:
        return self._initialized and self._kind() is _Kind.BOOLEAN

    def is_null(self) -> bool:
        return self._initialized and self._kind() is _Kind.NULL

    def is_numeric(self) -> bool:
        return self.is_double()

    def as_int64(self) -> int:
        """Convert to int64, giving 0 for values outside the int64 range."""
        if not self._initialized:
            return 0
        kind = self._kind()
        if kind is _Kind.UINT:
            return 0
        if kind is _Kind.REAL:
            number = float(self._raw)
            if not _INT64_MIN_F <= number <= _INT64_MAX_F:
                return 0
            result = int(number)
            return result if INT64_MIN <= result <= INT64_MAX else 0
        return _as_int64(self._raw)

    def as_uint64(self) -> int:
        """Convert to uint64, giving 0 for values outside the uint64 range."""
        if not self._initialized:
            return 0
        kind = self._kind()
        if kind is _Kind.INT and self._raw < 0:
            return 0
        if kind is _Kind.REAL:
            number = float(self._raw)
            if not 0.0 <= number <= _UINT64_MAX_F:
                return 0
            result = int(number)
            return result if result <= UINT64_MAX else 0
        return _as_uint64(self._raw)

    def as_double(self) -> float:
        if not self._initialized:
            return 0.0
        return _as_double(self._raw)

    def as_string(self) -> str:
        if not self._initialized:
            return ""
        return _as_string(self._raw)

    def size(self) -> int:
        if not self._initialized:
            return 0
        if self._kind() in (_Kind.ARRAY, _Kind.OBJECT):
            return len(self._raw)
        return 0

    def index(self, position: int) -> "JsonValue":
        """Element at ``position``; null when absent or not an array."""
        if not self._initialized or position < 0:
            return JsonValue(None)
        kind = self._kind()
        if kind is _Kind.ARRAY and position < len(self._raw):
            return JsonValue(self._raw[position])
        return JsonValue(None)

    def get(self, key: str) -> "JsonValue":
        """Member named ``key``; null when absent or not an object."""
        if not self._initialized or self._kind() is not _Kind.OBJECT:
            return JsonValue(None)
        return JsonValue(self._raw.get(key))

    def param_names(self) -> List[str]:
        """Member names of an object in byte order; empty for anything else."""
        if not self._initialized or self._kind() is not _Kind.OBJECT:
            return []
        return sorted(self._raw, key=lambda name: name.encode("utf-8"))


_Filter = Callable[[JsonValue], bool]


def _accepts_int64(value: JsonValue) -> bool:
    return value.is_int64() or value.is_null() or value.is_bool()


def _accepts_uint64(value: JsonValue) -> bool:
    return value.is_uint64() or value.is_null() or value.is_bool()


def _accepts_double(value: JsonValue) -> bool:
    return value.is_double() or value.is_null() or value.is_bool()


def _accepts_string(value: JsonValue) -> bool:
    return value.is_null() or value.is_bool() or value.is_numeric() or value.is_string()


def _array_of(element_filter: _Filter) -> _Filter:
    def accepts(value: JsonValue) -> bool:
        if not value.is_array():
            return False
        if value.size() > 0:
            return element_filter(value.index(0))
        return True

    return accepts


_HEX_PREFIX = re.compile(r"[ \t\n\v\f\r]*([+-]?)(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]+)")


def _parse_hex(text: str) -> int:
    match = _HEX_PREFIX.match(text)
    if match is None:
        return 0
    number = int(match.group(2), 16)
    if number > UINT64_MAX:
        return UINT64_MAX
    if match.group(1) == "-":
        number = (-number) % (1 << 64)
    return number


def _to_int32(number: int) -> int:
    return ((number + (1 << 31)) % (1 << 32)) - (1 << 31)


class SysEventRecord:
    """A system event given as its JSON text."""

    __slots__ = ("_text", "_root")

    def __init__(self, json_text: str) -> None:
        self._text = json_text
        self._root = JsonValue.parse(json_text)

    def __repr__(self) -> str:
        return f"SysEventRecord({self._text!r})"

    def _member(self, name: str, accepts: _Filter) -> JsonValue:
        if not self._root.initialized:
            raise RecordNotInitializedError("record is not initialized")
        if not self._root.is_member(name):
            raise KeyNotFoundError(f"key {name!r} is not found")
        value = self._root.get(name)
        if not accepts(value):
            raise TypeMismatchError(f"value of key {name!r} does not match the requested type")
        return value

    def _or_default(self, getter: Callable[[str], Any], name: str, default: Any) -> Any:
        try:
            return getter(name)
        except RecordError:
            return default

    def as_json(self) -> str:
        return self._text

    def domain(self) -> str:
        return self._or_default(self.get_string, "domain_", "")

    def event_name(self) -> str:
        return self._or_default(self.get_string, "name_", "")

    def event_type(self) -> int:
        return _to_int32(self._or_default(self.get_int64, "type_", 0))

    def time(self) -> int:
        return self._or_default(self.get_uint64, "time_", 0)

    def time_zone(self) -> str:
        return self._or_default(self.get_string, "tz_", "")

    def pid(self) -> int:
        return self._or_default(self.get_int64, "pid_", 0)

    def tid(self) -> int:
        return self._or_default(self.get_int64, "tid_", 0)

    def uid(self) -> int:
        return self._or_default(self.get_int64, "uid_", 0)

    def trace_id(self) -> int:
        """Trace id, stored in the record as a hexadecimal string."""
        return _parse_hex(self._or_default(self.get_string, "traceid_", ""))

    def span_id(self) -> int:
        return self._or_default(self.get_uint64, "spanid_", 0)

    def pspan_id(self) -> int:
        return self._or_default(self.get_uint64, "pspanid_", 0)

    def trace_flag(self) -> int:
        return _to_int32(self._or_default(self.get_int64, "trace_flag_", 0))

    def level(self) -> str:
        return self._or_default(self.get_string, "level_", "")

    def tag(self) -> str:
        return self._or_default(self.get_string, "tag_", "")

    def param_names(self) -> List[str]:
        return self._root.param_names()

    def get_int64(self, name: str) -> int:
        return self._member(name, _accepts_int64).as_int64()

    def get_uint64(self, name: str) -> int:
        return self._member(name, _accepts_uint64).as_uint64()

    def get_double(self, name: str) -> float:
        return self._member(name, _accepts_double).as_double()

    def get_string(self, name: str) -> str:
        return self._member(name, _accepts_string).as_string()

    def get_int64_list(self, name: str) -> List[int]:
        value = self._member(name, _array_of(_accepts_int64))
        return [_as_int64(item) for item in value.value]

    def get_uint64_list(self, name: str) -> List[int]:
        value = self._member(name, _array_of(_accepts_uint64))
        return [_as_uint64(item) for item in value.value]

    def get_double_list(self, name: str) -> List[float]:
        value = self._member(name, _array_of(_accepts_double))
        return [_as_double(item) for item in value.value]

    def get_string_list(self, name: str) -> List[str]:
        value = self._member(name, _array_of(_accepts_string))
        return [_as_string(item) for item in value.value]