"""Reply value returned by the control channel."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Reply:
    """One complete server reply: a numeric code plus its message lines."""

    code: int
    messages: tuple[str, ...]

    @property
    def message(self) -> str:
        """All message lines joined with newlines."""
        return "\n".join(self.messages)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "messages": list(self.messages)}

    def __str__(self) -> str:
        last = len(self.messages) - 1
        return "\n".join(
            f"{self.code:03d}{' ' if i == last else '-'}{text}"
            for i, text in enumerate(self.messages)
        )
