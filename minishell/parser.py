"""Grouping of tokens into simple commands separated by pipes."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from .expand import remove_quotes
from .tokens import Command, Redirection, Token, TokenType

_COMMAND_END = (TokenType.PIPE, TokenType.EOF)


def _at_command_end(pending: deque[Token]) -> bool:
    return not pending or pending[0].kind in _COMMAND_END


def _add_word(command: Command, word: str) -> None:
    had_quotes = "'" in word or '"' in word
    unquoted = remove_quotes(word)
    # A word that expanded to nothing and was never quoted disappears.
    if unquoted or had_quotes:
        command.args.append(unquoted)


def _parse_command(pending: deque[Token]) -> Command:
    command = Command()
    while not _at_command_end(pending):
        token = pending.popleft()
        if token.kind is TokenType.WORD:
            _add_word(command, token.value)
        elif token.kind.is_redirection():
            if pending and pending[0].kind is TokenType.WORD:
                target = pending.popleft()
                command.redirections.append(
                    Redirection(token.kind, remove_quotes(target.value))
                )
    return command


def parse_commands(tokens: Iterable[Token]) -> list[Command]:
    """Build the list of commands of a pipeline from lexed tokens.

    Quotes are removed from arguments and redirection targets. Unquoted
    words that are empty are dropped. Parsing stops at the EOF token or at
    the end of ``tokens``.
    """
    pending = deque(tokens)
    commands: list[Command] = []
    while pending and pending[0].kind is not TokenType.EOF:
        if pending[0].kind is TokenType.PIPE:
            pending.popleft()
            continue
        commands.append(_parse_command(pending))
    return commands