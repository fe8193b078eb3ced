from enum import Enum
from typing import Any, Dict, Mapping, Optional

# Buyer columns that take part in history diffs
TRACKED_FIELDS = (
    "full_name", "email", "phone", "city", "property_type", "bhk",
    "purpose", "budget_min", "budget_max", "timeline", "source",
    "status", "notes", "tags",
)


def plain_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [plain_value(v) for v in value]
    return value


def snapshot(source: Any) -> Dict[str, Any]:
    """
    Build a JSON-safe snapshot of the tracked fields from a Buyer row,
    a pydantic schema or a plain mapping. Enum members become their values.
    """
    if isinstance(source, Mapping):
        getter = source.get
    else:
        getter = lambda field: getattr(source, field, None)
    return {field: plain_value(getter(field)) for field in TRACKED_FIELDS}


def values_equal(old: Any, new: Any) -> bool:
    old, new = plain_value(old), plain_value(new)
    if isinstance(old, list) or isinstance(new, list):
        # sequences compare element by element, in order
        return list(old or []) == list(new or [])
    if type(old) is not type(new) and old is not None and new is not None:
        return False
    return old == new


def compute_diff(old: Optional[Mapping[str, Any]], new: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    """
    Field-level change set between two snapshots.

    With no old snapshot (creation) every non-null field of `new` is reported
    as {"old": None, "new": value}. Otherwise only fields of `new` whose value
    differs from `old` are reported. Pure and deterministic.
    """
    diff: Dict[str, Dict[str, Any]] = {}

    if old is None:
        for field, value in new.items():
            if value is not None:
                diff[field] = {"old": None, "new": plain_value(value)}
        return diff

    for field, value in new.items():
        old_value = old.get(field)
        if not values_equal(old_value, value):
            diff[field] = {"old": plain_value(old_value), "new": plain_value(value)}
    return diff
