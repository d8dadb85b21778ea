"""
Front matter — split, parse, and render the `---` delimited header block.

Headers are read as YAML and flattened to string values. Rendering writes
a flat `key: value` list: ints bare, everything else double-quoted.
"""

import re
from typing import Any, Mapping

import yaml

DELIMITER = "---"

_BLOCK_RE = re.compile(r"\A---\n(.*?)\n---(?:\n|\Z)", re.DOTALL)
_EMPTY_BLOCK_RE = re.compile(r"\A---\n---(?:\n|\Z)")


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_front_matter(text: str) -> tuple[str | None, str]:
    """
    Split a document into its raw header block and body.

    Returns (None, text) when the document has no header. When a header
    is present the body comes back with surrounding whitespace stripped.
    """
    text = _normalize_newlines(text)

    match = _BLOCK_RE.match(text)
    if match:
        return match.group(1), text[match.end():].strip()

    match = _EMPTY_BLOCK_RE.match(text)
    if match:
        return "", text[match.end():].strip()

    return None, text


def _as_text(value: Any) -> str:
    # header values are single-line; folded scalars carry a trailing newline
    return "" if value is None else str(value).strip()


def parse_fields(block: str) -> dict[str, str]:
    """
    Parse a raw header block into an ordered key/value mapping.

    Values are converted to trimmed strings (a YAML null becomes ""). Raises
    ValueError when the block is not valid YAML or not a mapping.
    """
    try:
        data = yaml.safe_load(block) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Malformed front matter: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"Front matter must be a mapping, got {type(data).__name__}")

    return {str(key): _as_text(value) for key, value in data.items()}


def parse_front_matter(text: str) -> tuple[dict[str, str], str]:
    """Return (fields, body). A document without a header yields {}."""
    block, body = split_front_matter(text)
    if block is None:
        return {}, body
    return parse_fields(block), body


def _render_value(value: Any) -> str:
    # bool is an int subclass; only real ints are written bare
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def render_front_matter(fields: Mapping[str, Any]) -> str:
    """Render fields as a header block; ints bare, everything else quoted."""
    lines = [DELIMITER]
    lines.extend(f"{key}: {_render_value(value)}" for key, value in fields.items())
    lines.append(DELIMITER)
    return "\n".join(lines)


def compose_document(fields: Mapping[str, Any], body: str) -> str:
    """Header block, one blank line, body."""
    return f"{render_front_matter(fields)}\n\n{body.strip()}\n"
