"""
General helper functions
"""
import re
from typing import Any, Dict

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_WHITESPACE_RUN = re.compile(r"\s+")


def sanitize_string(value: str) -> str:
    """
    Normalize a single-line text value.

    Tabs and line breaks become spaces, remaining control bytes are removed,
    whitespace runs collapse to one space and the result is trimmed.
    """
    if not value or not isinstance(value, str):
        return value
    value = value.replace("\t", " ")
    value = value.replace("\r", " ").replace("\n", " ")
    value = _CONTROL_CHARS.sub("", value)
    value = _WHITESPACE_RUN.sub(" ", value)
    return value.strip()


def sanitize_data(data: Any) -> Any:
    """Recursively sanitize every string leaf of dicts and lists"""
    if data is None:
        return data
    if isinstance(data, str):
        return sanitize_string(data)
    if isinstance(data, list):
        return [sanitize_data(item) for item in data]
    if isinstance(data, dict):
        return {key: sanitize_data(value) for key, value in data.items()}
    return data


def safe_get(data: Dict[str, Any], *keys, default: Any = None) -> Any:
    """
    Safely get nested dictionary values.

    Args:
        data: Dictionary to search
        *keys: Keys to traverse
        default: Default value if key not found

    Returns:
        Value or default
    """
    result = data
    for key in keys:
        if isinstance(result, dict):
            result = result.get(key)
            if result is None:
                return default
        elif isinstance(result, list) and isinstance(key, int):
            if key >= len(result):
                return default
            result = result[key]
        else:
            return default
    return result if result is not None else default


def remove_empty_values(data: Dict[str, Any]) -> Dict[str, Any]:
    """Remove None and empty-string values from dictionary"""
    return {k: v for k, v in data.items() if v is not None and v != ""}


def content_type_for(filename: str) -> str:
    """Guess an attachment content type from the file extension"""
    ext = filename.lower().rsplit(".", 1)[-1] if "." in filename else ""
    if ext == "pdf":
        return "application/pdf"
    if ext == "png":
        return "image/png"
    if ext in ("jpg", "jpeg"):
        return "image/jpeg"
    return "application/octet-stream"
