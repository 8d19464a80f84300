"""
Typed value extraction from loosely-typed field bags.

Upstream listeners hand over one mapping per syslog message whose values
may be strings, integers or datetimes. Extraction never raises: a missing
key or a value of the wrong type yields the zero value of the requested
type, so partial records still get stored.
"""

from datetime import datetime
from typing import Any, Mapping, Type, TypeVar

from hostlog.timeutil import ZERO_TIMESTAMP, ensure_utc


T = TypeVar("T", str, int, datetime)

FieldBag = Mapping[str, Any]

#: Value returned for each supported type when the key is missing or mistyped
ZERO_VALUES = {
    str: "",
    int: 0,
    datetime: ZERO_TIMESTAMP,
}

#: Integers are stored as SQLite INTEGER, a signed 64-bit value
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1


def extract(bag: FieldBag, key: str, kind: Type[T]) -> T:
    """
    Return bag[key] if it is an instance of `kind`, else ZERO_VALUES[kind].
    
    Booleans are not accepted as integers, nor are integers outside the
    signed 64-bit range. Datetimes come back in UTC; one that cannot be
    expressed in UTC within the datetime range yields the zero timestamp.
    
    Args:
        bag: Field name to value mapping
        key: Field to read
        kind: One of str, int, datetime
    """
    value = bag.get(key)
    
    if kind is int and isinstance(value, bool):
        return ZERO_VALUES[int]
    if not isinstance(value, kind):
        return ZERO_VALUES[kind]
    if kind is int and not INT_MIN <= value <= INT_MAX:
        return ZERO_VALUES[int]
    if kind is datetime:
        try:
            return ensure_utc(value)
        except OverflowError:
            return ZERO_VALUES[datetime]
    return value


def get_string(bag: FieldBag, key: str) -> str:
    return extract(bag, key, str)


def get_int(bag: FieldBag, key: str) -> int:
    return extract(bag, key, int)


def get_timestamp(bag: FieldBag, key: str) -> datetime:
    return extract(bag, key, datetime)
