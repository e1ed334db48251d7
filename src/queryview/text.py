"""Normalization of free-text fields for display"""

import re

#: Default maximum length of a displayed query text
MAX_QUERY_TEXT_LENGTH = 300

_NON_SPACE = re.compile(r"\S")


def truncate_string(text: str, length: int) -> str:
    if text and len(text) > length:
        return text[:length] + "..."
    return text


def strip_query_text_whitespace(
    text: str, max_length: int = MAX_QUERY_TEXT_LENGTH
) -> str:
    """Removes the indentation shared by all non-blank lines

    Trailing whitespace is removed from each line and lines that end up empty
    are dropped. The result is truncated to `max_length` characters.
    """
    lines = text.split("\n")

    indent = None
    for line in lines:
        match = _NON_SPACE.search(line)
        if match is None:
            continue
        if indent is None or match.start() < indent:
            indent = match.start()
        if indent == 0:
            break

    indent = indent or 0
    stripped = [line[indent:].rstrip() for line in lines]
    return truncate_string("\n".join(line for line in stripped if line), max_length)
