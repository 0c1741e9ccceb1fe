# Conference Dossier Generator - Webhook Response Parser
"""
Normalizes the body returned by the dossier webhook into report blocks.

The workflow answers in one of three shapes:
1. A JSON array, one element per attendee (usually ``{"output": "..."}``)
2. A JSON object with an ``output`` field
3. Plain text

Whatever the shape, callers get back an ordered list of strings.
"""

import json
import logging

logger = logging.getLogger(__name__)

BLOCK_SEPARATOR = "\n\n" + "=" * 50 + "\n\n"


def _canonical_json(value):
    """Re-serialize a decoded JSON value compactly."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _block_from_item(item):
    if isinstance(item, dict):
        output = item.get("output")
        if isinstance(output, str) and output:
            return output
    return _canonical_json(item)


def parse_response_payload(raw_text):
    """
    Split a raw webhook response into report blocks.

    Args:
        raw_text: The response body exactly as received

    Returns:
        list: One string per attendee report (empty for an empty JSON array)
    """
    try:
        payload = json.loads(raw_text)
    except (TypeError, ValueError):
        # Not JSON, the whole body is the report
        logger.debug("Response is not JSON, treating it as raw text")
        return [raw_text]

    if isinstance(payload, list):
        return [_block_from_item(item) for item in payload]

    if isinstance(payload, dict):
        output = payload.get("output")
        if isinstance(output, str) and output:
            return [output]

    return [_canonical_json(payload)]


def join_blocks(blocks):
    """Join report blocks with the 50-character '=' separator line."""
    return BLOCK_SEPARATOR.join(blocks)
