"""Typed parameter lookups on a system event given as JSON text."""

from __future__ import annotations

from typing import List, Optional

from sysevent_kit.record import RecordError, SysEventRecord


class MissingInputError(RecordError, TypeError):
    """The record text or the parameter name was not given."""

    code = -1


def _open(json_text: Optional[str], name: Optional[str]) -> SysEventRecord:
    if json_text is None or name is None:
        raise MissingInputError("record text and parameter name are required")
    return SysEventRecord(json_text)


def get_param_names(json_text: Optional[str]) -> List[str]:
    """Names of the record's parameters; empty when the text is not an object."""
    if json_text is None:
        raise MissingInputError("record text is required")
    return SysEventRecord(json_text).param_names()


def get_int64_value(json_text: Optional[str], name: Optional[str]) -> int:
    return _open(json_text, name).get_int64(name)


def get_uint64_value(json_text: Optional[str], name: Optional[str]) -> int:
    return _open(json_text, name).get_uint64(name)


def get_double_value(json_text: Optional[str], name: Optional[str]) -> float:
    return _open(json_text, name).get_double(name)


def get_string_value(json_text: Optional[str], name: Optional[str]) -> str:
    return _open(json_text, name).get_string(name)


def get_int64_values(json_text: Optional[str], name: Optional[str]) -> List[int]:
    return _open(json_text, name).get_int64_list(name)


def get_uint64_values(json_text: Optional[str], name: Optional[str]) -> List[int]:
    return _open(json_text, name).get_uint64_list(name)


def get_double_values(json_text: Optional[str], name: Optional[str]) -> List[float]:
    return _open(json_text, name).get_double_list(name)


def get_string_values(json_text: Optional[str], name: Optional[str]) -> List[str]:
    return _open(json_text, name).get_string_list(name)