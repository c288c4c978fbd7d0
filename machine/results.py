# machine/results.py

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import List

from machine.errors import MalformedResult

HISTORY_RULE = "═" * 35


@dataclass(frozen=True)
class HistoryEntry:
    step: int
    state: str
    position: int
    symbol: str
    tape: str


@dataclass(frozen=True)
class ExecutionResult:
    accepted: bool
    message: str
    steps: int
    final_tape: str
    history: List[HistoryEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw):
        if not isinstance(raw, Mapping):
            raise MalformedResult("Execution result must be a JSON object")
        try:
            history = [
                HistoryEntry(
                    step=entry["step"],
                    state=entry["state"],
                    position=entry["position"],
                    symbol=entry["symbol"],
                    tape=entry["tape"],
                )
                for entry in raw.get("history") or []
            ]
            result = cls(
                accepted=bool(raw["accepted"]),
                message=raw.get("message", ""),
                steps=raw["steps"],
                final_tape=raw.get("finalTape", ""),
                history=history,
            )
        except (KeyError, TypeError) as e:
            raise MalformedResult(f"Execution result is missing field {e}") from e

        if not isinstance(result.steps, int) or result.steps < 0:
            raise MalformedResult(f"Execution result has invalid step count {result.steps!r}")
        return result

    def summary(self):
        return {"accepted": self.accepted, "steps": self.steps, "final_tape": self.final_tape}


def render(result):
    """Human-readable trace: header block, then every history entry as received."""
    lines = [
        f"Status: {'✓ ACCEPTED' if result.accepted else '✗ REJECTED'}",
        f"Message: {result.message}",
        f"Steps executed: {result.steps}",
        f"Final tape: {result.final_tape}",
        "",
    ]

    if result.history:
        lines.append("Execution history:")
        lines.append(HISTORY_RULE)
        lines.append("")
        for entry in result.history:
            lines.extend([
                f"Step {entry.step}:",
                f"  State: {entry.state}",
                f"  Position: {entry.position}",
                f"  Symbol: {entry.symbol}",
                f"  Tape: {entry.tape}",
                "",
            ])

    return "\n".join(lines)
