"""
General helper functions.
"""

import hashlib
import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict


def generate_uuid_string() -> str:
    """
    Generate a new UUID as string.

    Returns:
        UUID string
    """
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def hash_string(text: str, algorithm: str = "sha256") -> str:
    """
    Hash a string using specified algorithm.

    Args:
        text: Text to hash
        algorithm: Hash algorithm (sha256, md5, etc.)

    Returns:
        Hexadecimal hash string
    """
    if algorithm == "sha256":
        return hashlib.sha256(text.encode()).hexdigest()
    elif algorithm == "md5":
        return hashlib.md5(text.encode()).hexdigest()
    else:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")


def canonical_json(value: Any) -> str:
    """
    Serialize a value to JSON deterministically.

    Keys are sorted and separators fixed so equal values always produce
    the same string.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def safe_get(dictionary: Dict[str, Any], *keys, default: Any = None) -> Any:
    """
    Safely get nested dictionary values.

    Args:
        dictionary: Dictionary to search
        *keys: Keys to traverse
        default: Default value if key not found

    Returns:
        Value at path or default
    """
    result = dictionary
    for key in keys:
        if isinstance(result, dict):
            result = result.get(key)
        else:
            return default

        if result is None:
            return default

    return result


def remove_none_values(dictionary: Dict[str, Any]) -> Dict[str, Any]:
    """
    Remove None values from dictionary.

    Args:
        dictionary: Dictionary to clean

    Returns:
        Dictionary without None values
    """
    return {k: v for k, v in dictionary.items() if v is not None}
