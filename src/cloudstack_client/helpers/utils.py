import json
import os
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List


def serialize_to_dict(obj: Any) -> Dict[str, Any]:
    """
    Serialize a dataclass object to a dictionary.

    :param obj: The dataclass object to serialize.
    :return: A dictionary representation of the object.
    """
    result = {}

    for field in fields(obj):
        result[field.name] = _serialize_value(getattr(obj, field.name))

    return result


def _serialize_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value):
        return serialize_to_dict(value)
    if isinstance(value, (list, tuple)):
        return [_serialize_value(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize_value(val) for key, val in value.items()}
    return value


def ensure_directory_exists(path: str) -> None:
    """
    Ensure that a directory exists. If it does not exist, create it.

    Args:
        path (str): The directory path to check or create.
    """
    if path and not os.path.exists(path):
        os.makedirs(path, exist_ok=True)


def load_json_data(json_str: str = None, json_file: str = None) -> Any:
    """
    Load JSON data from a string or file.

    Args:
        json_str (str): JSON string input.
        json_file (str): Path to a JSON file.

    Returns:
        Any: Parsed JSON data as a Python object.

    Raises:
        ValueError: If neither `json_str` nor `json_file` is provided.
    """
    if json_str:
        return json.loads(json_str)

    if json_file:
        with open(json_file, "r", encoding="utf-8") as f:
            return json.load(f)

    raise ValueError("Either `json_str` or `json_file` must be provided.")


def parse_key_value_args(pairs: Iterable[str]) -> Dict[str, Any]:
    """
    Turn ``name=value`` tokens into an argument map.

    A name given more than once collects its values into a list, so
    ``ids=a ids=b`` becomes ``{"ids": ["a", "b"]}``.

    :raises ValueError: If a token has no ``=``.
    """
    args: Dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Expected name=value, got: {pair}")
        name, value = pair.split("=", 1)
        name = name.strip()
        if name in args:
            existing = args[name]
            if not isinstance(existing, list):
                existing = [existing]
            existing.append(value)
            args[name] = existing
        else:
            args[name] = value
    return args


def case_insensitive_get(data: Dict[str, Any], key: str, default: Any = None) -> Any:
    """Look up ``key`` in ``data`` ignoring case; exact matches win."""
    if key in data:
        return data[key]
    lowered = key.lower()
    for candidate, value in data.items():
        if candidate.lower() == lowered:
            return value
    return default


def as_list(value: Any) -> List[Any]:
    """Wrap a single XML-derived element in a list; leave lists alone."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]
