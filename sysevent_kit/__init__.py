"""Read system event records, describe rules, and route listeners and queries to an event service."""

__version__ = "0.1.0"

__all__ = ["record", "rules", "params", "convertor", "callbacks", "manager"]