"""Placeholder extraction and substitution for message templates.

Message templates carry ``{{identifier}}`` markers that are filled in with
contact data when a message is sent. Both functions here are total: malformed
markers simply do not match.
"""

import re
from collections.abc import Mapping

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^}]+)\}\}")


def extract_variables(content: str) -> list[str]:
    """Return the placeholder names of a template, in first-occurrence order.

    Inner text is whitespace-trimmed and duplicates are dropped, so
    ``"{{a}} {{ a }} {{b}}"`` yields ``["a", "b"]``.

    Args:
        content: Template text.

    Returns:
        Distinct placeholder names.
    """
    variables: list[str] = []
    for match in PLACEHOLDER_PATTERN.finditer(content or ""):
        name = match.group(1).strip()
        if name not in variables:
            variables.append(name)
    return variables


def _key_pattern(key: str) -> re.Pattern[str]:
    return re.compile(r"\{\{\s*" + re.escape(key) + r"\s*\}\}")


def render_template(content: str, data: Mapping[str, str | None]) -> str:
    """Substitute ``data`` values into the placeholders of ``content``.

    Each key is applied in its own pass, in mapping order. Values are inserted
    literally and never re-scanned, so a value that looks like another
    placeholder stays as written. Placeholders without a key are left intact.

    Args:
        content: Template text.
        data: Placeholder name to replacement value; None renders as "".

    Returns:
        The rendered text.
    """
    # (text, inserted) segments; only original text is searched
    segments: list[tuple[str, bool]] = [(content, False)]

    for key, value in data.items():
        pattern = _key_pattern(key)
        replacement = value or ""
        next_segments: list[tuple[str, bool]] = []

        for text, inserted in segments:
            if inserted:
                next_segments.append((text, True))
                continue

            position = 0
            for match in pattern.finditer(text):
                next_segments.append((text[position:match.start()], False))
                next_segments.append((replacement, True))
                position = match.end()
            next_segments.append((text[position:], False))

        segments = next_segments

    return "".join(text for text, _ in segments)
