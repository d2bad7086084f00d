"""JSON parsing utilities for sashi.

Provides safe, consistent JSON parsing with:
- Quick rejection for non-JSON strings
- Size limits to prevent memory exhaustion
- Code-fence stripping for model output
"""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MAX_JSON_SIZE = 10 * 1024 * 1024  # 10MB

_LOG_PREVIEW_LENGTH = 100

_FENCE_PATTERN = re.compile(r"^```[\w-]*\s*\n?(.*?)\n?```$", re.DOTALL)


def try_parse_json(
    value: str,
    *,
    max_size: int = DEFAULT_MAX_JSON_SIZE,
) -> tuple[bool, Any]:
    """Attempt to parse a string as JSON.

    Returns a tuple of (success, result) where:
    - (True, parsed_value) if parsing succeeded
    - (False, original_value) if parsing failed or was skipped

    Examples:
        >>> try_parse_json('{"a": 1}')
        (True, {'a': 1})
        >>> try_parse_json('not json')
        (False, 'not json')
        >>> try_parse_json('null')
        (True, None)
    """
    if not isinstance(value, str):
        return (False, value)

    text = value.strip()
    if not text:
        return (False, value)

    if len(text) > max_size:
        logger.warning(
            f"Skipping JSON parse: string exceeds size limit ({len(text):,} > {max_size:,} bytes)",
        )
        return (False, value)

    # Valid JSON starts with: { [ " t(rue) f(alse) n(ull) - or digit
    if text[0] not in '{["tfn-0123456789':
        return (False, value)

    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return (False, value)

    logger.debug(
        f"Parsed JSON string to {type(parsed).__name__}",
        extra={"preview": text[:_LOG_PREVIEW_LENGTH]},
    )
    return (True, parsed)


def strip_code_fences(text: str) -> str:
    """Remove a single surrounding markdown code fence, if present.

    >>> strip_code_fences('```json\\n{"a": 1}\\n```')
    '{"a": 1}'
    >>> strip_code_fences("SELECT 1")
    'SELECT 1'
    """
    stripped = text.strip()
    match = _FENCE_PATTERN.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped
