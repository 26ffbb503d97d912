from typing import Any, Dict, List, Sequence, Tuple
from mock_backend.utils.helpers import js_str

_MISSING = object()


def get_path(record: Any, path: str) -> Any:
    """Look up a dotted field path (``address.city``); _MISSING when absent"""
    value = record
    for part in path.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            return _MISSING
    return value


def parse_filters(params: Sequence[Tuple[str, str]]) -> Dict[str, List[str]]:
    """Group query parameters into field -> accepted values, skipping _options"""
    filters: Dict[str, List[str]] = {}
    for key, value in params:
        if not key or key.startswith("_"):
            continue
        filters.setdefault(key, []).append(value)
    return filters


def matches(record: Any, filters: Dict[str, List[str]]) -> bool:
    for path, accepted in filters.items():
        value = get_path(record, path)
        if value is _MISSING or js_str(value) not in accepted:
            return False
    return True


def _sort_key(path: str):
    def key(record):
        value = get_path(record, path)
        if value is _MISSING or value is None:
            return (2, 0, "")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return (0, value, "")
        return (1, 0, js_str(value))
    return key


def sort_records(records: List[Any], sort: str, order: str = "") -> List[Any]:
    """
    Sort by one or more comma-separated fields.

    ``order`` is a matching comma-separated list of asc/desc; missing entries
    default to asc. Numbers come before other values in either order, and
    records without the field always go last.
    """
    fields = [f for f in sort.split(",") if f]
    orders = [o.strip().lower() for o in order.split(",")] if order else []

    result = list(records)
    # Stable sorts applied from the least significant key
    for i in reversed(range(len(fields))):
        descending = i < len(orders) and orders[i] == "desc"
        key = _sort_key(fields[i])
        numbers = [r for r in result if key(r)[0] == 0]
        others = [r for r in result if key(r)[0] == 1]
        absent = [r for r in result if key(r)[0] == 2]
        numbers.sort(key=key, reverse=descending)
        others.sort(key=key, reverse=descending)
        result = numbers + others + absent
    return result


def apply_query(records: List[Any], params: Sequence[Tuple[str, str]]) -> List[Any]:
    """Filter then sort a collection from raw query parameters"""
    filters = parse_filters(params)
    result = [r for r in records if matches(r, filters)] if filters else list(records)

    options = {key: value for key, value in params if key.startswith("_")}
    if options.get("_sort"):
        result = sort_records(result, options["_sort"], options.get("_order", ""))
    return result
