"""Syntax checking and tokenisation of command lines."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Optional

from .expand import expand
from .tokens import Token, TokenType

_WHITESPACE = " \t\n\v\f\r"
_WORD_BREAKS = _WHITESPACE + "<>|"

_UNCLOSED_QUOTES = "Syntax Error: Unclosed quotes"
_PIPE_ERROR = "Syntax Error: Pipe"
_PIPE_OR_QUOTE = "Syntax Error: Pipe or quote unclosed"
_MISSING_TARGET = "Syntax Error: Redirection without target"


class LexerError(Exception):
    """Raised when a command line cannot be tokenised."""


def check_syntax(line: str) -> None:
    """Reject unclosed quotes and misplaced pipes; raise LexerError."""
    i = skip_spaces(line)
    if line[i : i + 1] == "|":
        raise LexerError(_PIPE_ERROR)
    last_was_pipe = False
    length = len(line)
    while i < length:
        char = line[i]
        if char in "'\"":
            close = line.find(char, i + 1)
            if close == -1:
                raise LexerError(f"{_UNCLOSED_QUOTES}\n{_PIPE_OR_QUOTE}")
            i = close + 1
            last_was_pipe = False
        elif char == "|":
            if last_was_pipe:
                raise LexerError(_PIPE_OR_QUOTE)
            last_was_pipe = True
            i += 1
        else:
            if char not in _WHITESPACE:
                last_was_pipe = False
            i += 1
    if last_was_pipe:
        raise LexerError(_PIPE_ERROR)


def skip_spaces(line: str) -> int:
    """Return the number of leading whitespace characters in ``line``."""
    return len(line) - len(line.lstrip(_WHITESPACE))


def token_type_at(line: str) -> TokenType:
    """Return the kind of token that starts ``line``."""
    if line.startswith("<<"):
        return TokenType.HEREDOC
    if line.startswith("<"):
        return TokenType.REDIRIN
    if line.startswith(">>"):
        return TokenType.APPEND
    if line.startswith(">"):
        return TokenType.REDIROUT
    if line.startswith("|"):
        return TokenType.PIPE
    return TokenType.WORD


def _word_length(line: str) -> int:
    i = 0
    length = len(line)
    while i < length and line[i] not in _WORD_BREAKS:
        char = line[i]
        if char in "'\"":
            close = line.find(char, i + 1)
            i = length if close == -1 else close + 1
        else:
            i += 1
    return i


def token_length(line: str, kind: TokenType) -> int:
    """Return how many characters of ``line`` the token of ``kind`` takes."""
    if kind is TokenType.WORD:
        return _word_length(line)
    if kind in (TokenType.REDIRIN, TokenType.PIPE, TokenType.REDIROUT):
        return 1
    return 2


def first_word(line: str) -> str:
    """Return the word at the start of ``line``, quoted parts included."""
    return line[: _word_length(line)]


def tokenize(line: str) -> list[Token]:
    """Split ``line`` into tokens, ending with an EOF token."""
    tokens = []
    i = 0
    while True:
        i += skip_spaces(line[i:])
        if i >= len(line):
            break
        rest = line[i:]
        kind = token_type_at(rest)
        length = token_length(rest, kind)
        tokens.append(Token(kind, rest[:length]))
        i += length
    tokens.append(Token(TokenType.EOF, ""))
    return tokens


def check_redirections(tokens: Sequence[Token]) -> None:
    """Require a word after every redirection operator; raise LexerError."""
    if not tokens:
        raise LexerError("Syntax Error: empty token stream")
    for index, token in enumerate(tokens):
        if not token.kind.is_redirection():
            continue
        following = tokens[index + 1] if index + 1 < len(tokens) else None
        if following is None or following.kind is not TokenType.WORD:
            raise LexerError(_MISSING_TARGET)


def lex(
    line: str, variables: Mapping[str, Optional[str]], last_status: int
) -> list[Token]:
    """Check, tokenise and expand ``line``; raise LexerError on bad syntax."""
    check_syntax(line)
    tokens = [
        Token(token.kind, expand(token.value, variables, last_status))
        if token.kind is TokenType.WORD
        else token
        for token in tokenize(line)
    ]
    check_redirections(tokens)
    return tokens