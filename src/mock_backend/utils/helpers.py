import json
from typing import Any


def js_str(value: Any) -> str:
    """
    Render a JSON value the way JavaScript's String() would.

    Ids from the URL and query-string filter values are compared against
    stored values in this form, so ``/users/1`` finds ``{"id": 1}``.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, list):
        return ",".join("" if item is None else js_str(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def strict_equals(left: Any, right: Any) -> bool:
    """JavaScript === for values decoded from JSON"""
    if isinstance(left, (dict, list)) or isinstance(right, (dict, list)):
        # Distinct decoded objects are never identical
        return False
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    return type(left) is type(right) and left == right


def singularize(name: str) -> str:
    """Singular form of a collection name: users -> user, categories -> category"""
    lowered = name.lower()
    if lowered.endswith("ies") and len(name) > 3:
        return name[:-3] + "y"
    if lowered.endswith(("sses", "xes", "ches", "shes")):
        return name[:-2]
    if lowered.endswith("s") and not lowered.endswith("ss"):
        return name[:-1]
    return name


def parse_json_bytes(raw: bytes) -> Any:
    """Decode a request body; raises ValueError when it is not JSON"""
    return json.loads(raw.decode("utf-8"))
