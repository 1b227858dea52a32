"""Rules and arguments that describe which system events to watch or query."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, Tuple

LLONG_MAX = (1 << 63) - 1
INT_MAX = (1 << 31) - 1


class RuleType(enum.IntEnum):
    """How a rule's strings are matched against event fields."""

    WHOLE_WORD = 1
    PREFIX = 2
    REGULAR = 3


@dataclass(frozen=True)
class QueryArg:
    """Time window, event limit and sequence range of a query."""

    begin_time: int = 0
    end_time: int = 0
    max_events: int = 0
    from_seq: int = -1
    to_seq: int = -1

    @classmethod
    def normalized(
        cls,
        beginTime: int = -1,
        endTime: int = -1,
        maxEvents: int = -1,
        fromSeq: int = -1,
        toSeq: int = -1,
    ) -> "QueryArg":
        """Build an argument where negative values mean "no limit"."""
        return cls(
            begin_time=0 if beginTime < 0 else beginTime,
            end_time=LLONG_MAX if endTime < 0 else endTime,
            max_events=INT_MAX if maxEvents < 0 else maxEvents,
            from_seq=fromSeq,
            to_seq=toSeq,
        )


@dataclass(frozen=True)
class ListenerRule:
    """A rule selecting events for a listener by domain, name and tag."""

    domain: str = ""
    event_name: str = ""
    tag: str = ""
    rule_type: RuleType = RuleType.WHOLE_WORD
    event_type: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "rule_type", RuleType(self.rule_type))


@dataclass(frozen=True)
class QueryRule:
    """A rule selecting stored events of one domain by event names."""

    domain: str
    event_list: Tuple[str, ...] = field(default_factory=tuple)
    rule_type: RuleType = RuleType.WHOLE_WORD
    event_type: int = 0
    condition: str = ""

    def __init__(
        self,
        domain: str,
        event_list: Iterable[str] = (),
        rule_type: RuleType = RuleType.WHOLE_WORD,
        event_type: int = 0,
        condition: str = "",
    ) -> None:
        object.__setattr__(self, "domain", domain)
        object.__setattr__(self, "event_list", tuple(event_list))
        object.__setattr__(self, "rule_type", RuleType(rule_type))
        object.__setattr__(self, "event_type", event_type)
        object.__setattr__(self, "condition", condition)