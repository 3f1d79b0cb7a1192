"""The shell's ordered table of environment variables."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Optional


class Environment:
    """Ordered variables; a variable may exist without a value."""

    def __init__(self) -> None:
        self._vars: dict[str, Optional[str]] = {}

    @classmethod
    def from_envp(cls, envp: Optional[Iterable[str]]) -> "Environment":
        """Build an environment from ``KEY=value`` strings.

        Entries without ``=`` are ignored; for a repeated key the first
        entry wins.
        """
        if envp is None:
            raise ValueError("no environment given")
        env = cls()
        for entry in envp:
            key, sep, value = entry.partition("=")
            if sep:
                env._vars.setdefault(key, value)
        return env

    def get(self, key: Optional[str]) -> Optional[str]:
        """Return the value of ``key``, or None if unset or valueless."""
        if key is None:
            return None
        return self._vars.get(key)

    def set(self, key: str, value: Optional[str]) -> None:
        """Set ``key`` to ``value``; new keys are added at the end."""
        if key is None:
            raise ValueError("variable name is required")
        self._vars[key] = value

    def unset(self, key: str) -> None:
        """Remove ``key`` if present."""
        if key is None:
            raise ValueError("variable name is required")
        self._vars.pop(key, None)

    def to_envp(self) -> list[str]:
        """Return the variables as ``KEY=value`` strings, ``KEY`` if valueless."""
        return [
            key if value is None else f"{key}={value}"
            for key, value in self._vars.items()
        ]

    def as_mapping(self) -> dict[str, str]:
        """Return a copy of the variables that carry a value."""
        return {key: value for key, value in self._vars.items() if value is not None}

    def __contains__(self, key: object) -> bool:
        return key in self._vars

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def __len__(self) -> int:
        return len(self._vars)