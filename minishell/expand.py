"""Variable expansion and quote removal for shell words."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

_STATUS_NAME = "?"


def _is_alpha(char: str) -> bool:
    return char.isascii() and char.isalpha()


def _is_name_char(char: str) -> bool:
    return char == "_" or (char.isascii() and char.isalnum())


def find_next_variable(text: str, start: int = 0) -> Optional[int]:
    """Return the index of the next expandable ``$`` in ``text``, or None.

    Variables inside single quotes are skipped unless the single quotes
    themselves sit inside double quotes. An unclosed single quote ends the
    search.
    """
    in_double = False
    i = start
    length = len(text)
    while i < length:
        char = text[i]
        if char == '"':
            in_double = not in_double
        if char == "'" and not in_double:
            close = text.find("'", i + 1)
            if close == -1:
                return None
            i = close + 1
            continue
        if char == "$" and i + 1 < length:
            following = text[i + 1]
            if _is_alpha(following) or following in "_?":
                return i
        i += 1
    return None


def variable_name(text: str, pos: int) -> str:
    """Return the name of the variable whose ``$`` is at ``pos``."""
    if pos < 0 or pos + 1 >= len(text):
        raise ValueError(f"no variable name after position {pos}")
    if text[pos + 1] == _STATUS_NAME:
        return _STATUS_NAME
    end = pos + 1
    while end < len(text) and _is_name_char(text[end]):
        end += 1
    return text[pos + 1 : end]


def variable_value(
    name: str, variables: Mapping[str, Optional[str]], last_status: int
) -> str:
    """Return the replacement text for variable ``name``."""
    if name.startswith(_STATUS_NAME):
        return str(last_status)
    value = variables.get(name)
    return value if value is not None else ""


def expand(
    text: str, variables: Mapping[str, Optional[str]], last_status: int
) -> str:
    """Replace every expandable variable in ``text`` with its value.

    A leading ``$`` directly before a quote is dropped. After each
    replacement the search starts again from the beginning of the word.
    """
    if len(text) >= 2 and text[0] == "$" and text[1] in "'\"":
        result = text[1:]
    else:
        result = text
    while (pos := find_next_variable(result, 0)) is not None:
        name = variable_name(result, pos)
        value = variable_value(name, variables, last_status)
        result = result[:pos] + value + result[pos + 1 + len(name) :]
    return result


def remove_quotes(text: str) -> str:
    """Strip the quote characters that delimit quoted parts of ``text``."""
    kept = []
    in_single = False
    in_double = False
    for char in text:
        if char == "'" and not in_double:
            in_single = not in_single
        elif char == '"' and not in_single:
            in_double = not in_double
        else:
            kept.append(char)
    return "".join(kept)