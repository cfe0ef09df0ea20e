"""Shared dataclasses describing an extracted conversation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Sequence

from .errors import RecordFormatError


class Role(str, Enum):
    """Speaker of a turn; the value doubles as the record wire string."""

    USER = "user"
    ASSISTANT = "assistant"

    @property
    def label(self) -> str:
        """Return the header label printed above the turn."""

        return "User:" if self is Role.USER else "Assistant:"


@dataclass(frozen=True, slots=True)
class Turn:
    """One message from the host UI, tagged with its speaker."""

    role: Role
    content: str

    def __post_init__(self) -> None:
        if not self.content:
            raise ValueError("Turn content must be non-empty")

    def to_record(self) -> dict[str, str]:
        """Return the ``{role, content}`` mapping with role first."""

        return {"role": self.role.value, "content": self.content}


def _empty_turns() -> tuple[Turn, ...]:
    return ()


@dataclass(frozen=True, slots=True)
class Conversation:
    """Ordered, read-only collection of turns from one host session."""

    turns: tuple[Turn, ...] = field(default_factory=_empty_turns)

    @classmethod
    def from_turns(cls, turns: Iterable[Turn]) -> "Conversation":
        return cls(turns=tuple(turns))

    @classmethod
    def from_records(cls, records: Sequence[Mapping[str, Any]]) -> "Conversation":
        """Build a conversation from ``[{role, content}]`` records.

        Raises ``RecordFormatError`` when a record has an unknown role or
        missing, non-string, or empty content.
        """

        turns: list[Turn] = []
        for index, record in enumerate(records):
            if not isinstance(record, Mapping):
                raise RecordFormatError(f"Message {index} is not an object")
            try:
                role = Role(record.get("role"))
            except ValueError as exc:
                raise RecordFormatError(
                    f"Message {index} has unknown role: {record.get('role')!r}"
                ) from exc
            content = record.get("content")
            if not isinstance(content, str) or not content:
                raise RecordFormatError(
                    f"Message {index} has missing or empty content"
                )
            turns.append(Turn(role=role, content=content))
        return cls(turns=tuple(turns))

    def to_records(self) -> list[dict[str, str]]:
        return [turn.to_record() for turn in self.turns]

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.turns)

    def __len__(self) -> int:
        return len(self.turns)

    def __bool__(self) -> bool:
        return bool(self.turns)


__all__ = ["Conversation", "Role", "Turn"]
