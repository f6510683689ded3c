"""
Helpers for JSON-encoded text columns.

Several tables (plan limits, tenant settings, sale items) store structured
data as JSON text. Reading must never break a request: unparseable or empty
values degrade to the supplied default.
"""
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def safe_parse(value: Any, default: Any = None) -> Any:
    """
    Parse a JSON text column.

    Args:
        value: Raw column value (str, already-decoded object or None)
        default: Returned when value is empty or not valid JSON

    Returns:
        Decoded object or default

    Examples:
        safe_parse('{"a": 1}') -> {'a': 1}
        safe_parse('', {}) -> {}
        safe_parse('not json', []) -> []
    """
    if value is None or value == '':
        return default
    if not isinstance(value, (str, bytes, bytearray)):
        return value
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        logger.warning(f"Discarding unparseable JSON field value: {value!r:.80}")
        return default


def dump_json(value: Any) -> str:
    """Serialize a value for storage in a JSON text column."""
    return json.dumps(value, default=str)
