"""
JSON serialization helpers for viscocorrect-mcp.

This module provides utilities for safe JSON serialization, particularly
handling special float values (inf, nan) that are not valid in JSON per RFC 7159,
and the value types of this package (ExactDecimal, unit enums, result tuples).
"""

import enum
import math
import json
from typing import Any

import numpy as np

from .exact_decimal import ExactDecimal


def sanitize_for_json(obj: Any) -> Any:
    """
    Recursively sanitize an object for JSON serialization.

    Replaces inf and nan float values with None, which serializes to null.
    Named tuples become objects, enums their value and ExactDecimal a float.

    Args:
        obj: Any Python object to sanitize

    Returns:
        Sanitized object safe for json.dumps

    Examples:
        >>> sanitize_for_json({'value': float('inf')})
        {'value': None}
        >>> sanitize_for_json([1.0, float('nan'), 3.0])
        [1.0, None, 3.0]
    """
    if obj is None:
        return None

    if isinstance(obj, bool):
        return obj

    if isinstance(obj, enum.Enum):
        return sanitize_for_json(obj.value)

    if isinstance(obj, (int, str)):
        return obj

    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            return None
        return obj

    if isinstance(obj, ExactDecimal):
        return sanitize_for_json(obj.to_double())

    if isinstance(obj, (np.integer, np.floating)):
        return sanitize_for_json(obj.item())
    if isinstance(obj, np.ndarray):
        return sanitize_for_json(obj.tolist())

    if isinstance(obj, dict):
        return {k: sanitize_for_json(v) for k, v in obj.items()}

    # Named tuples
    if isinstance(obj, tuple) and hasattr(obj, '_asdict'):
        return sanitize_for_json(obj._asdict())

    if isinstance(obj, (list, tuple)):
        return [sanitize_for_json(v) for v in obj]

    # Fallback: convert to string
    return str(obj)


def safe_json_dumps(obj: Any, **kwargs) -> str:
    """
    Safely serialize an object to JSON string.

    Applies sanitization before serialization to handle inf/nan values.

    Args:
        obj: Object to serialize
        **kwargs: Additional arguments passed to json.dumps

    Returns:
        JSON string

    Examples:
        >>> safe_json_dumps({'value': float('inf')})
        '{"value": null}'
    """
    sanitized = sanitize_for_json(obj)
    return json.dumps(sanitized, **kwargs)

