"""Response blocks shown to the caller."""

from dataclasses import dataclass, replace
from typing import Any

STEPS = "steps"
SUMMARY = "summary"
REFERRAL = "referral"
WARNING = "warning"
POLICY = "policy"


@dataclass(frozen=True)
class Block:
    """One rendered section of an intake response."""

    type: str
    title: str | None = None
    text: str | None = None
    lines: tuple[str, ...] = ()

    def with_lines(self, *extra: str) -> "Block":
        return replace(self, lines=self.lines + tuple(extra))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "text": self.text,
            "lines": list(self.lines),
        }
