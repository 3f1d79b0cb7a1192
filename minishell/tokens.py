"""Token and command structures shared by the lexer, parser and executor."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class TokenType(enum.Enum):
    """Kinds of token produced by the lexer."""

    EOF = 0
    PIPE = 1
    REDIRIN = 2
    REDIROUT = 3
    HEREDOC = 4
    APPEND = 5
    WORD = 6

    def is_redirection(self) -> bool:
        """Return True for the four redirection operators."""
        return self in _REDIRECTIONS


_REDIRECTIONS = frozenset(
    {TokenType.REDIRIN, TokenType.REDIROUT, TokenType.HEREDOC, TokenType.APPEND}
)


@dataclass(frozen=True)
class Token:
    """One lexical token: its kind and the text it was built from."""

    kind: TokenType
    value: str = ""


@dataclass
class Redirection:
    """A redirection attached to a command: its operator and its target."""

    kind: TokenType
    target: str


@dataclass
class Command:
    """A simple command: its arguments and its redirections, in order."""

    args: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)