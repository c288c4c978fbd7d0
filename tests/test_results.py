"""
Tests for execution result decoding and rendering.
"""

import pytest

from machine.errors import MalformedResult
from machine.results import ExecutionResult, render

RAW_RESULT = {
    "accepted": True,
    "message": "Input accepted",
    "steps": 2,
    "finalTape": "^11_",
    "history": [
        {"step": 0, "state": "q0", "position": 1, "symbol": "0", "tape": "^01_"},
        {"step": 1, "state": "q1", "position": 2, "symbol": "1", "tape": "^11_"},
    ],
}


class TestFromDict:
    """Tests for ExecutionResult.from_dict()."""

    def test_decodes_engine_record(self):
        result = ExecutionResult.from_dict(RAW_RESULT)
        assert result.accepted is True
        assert result.steps == 2
        assert result.final_tape == "^11_"
        assert [entry.state for entry in result.history] == ["q0", "q1"]

    def test_missing_history_is_empty(self):
        raw = {k: v for k, v in RAW_RESULT.items() if k != "history"}
        assert ExecutionResult.from_dict(raw).history == []

    @pytest.mark.parametrize("raw", [
        {"message": "no flag", "steps": 1},
        {"accepted": False, "steps": -1},
        {"accepted": False, "steps": 0, "history": [{"step": 0}]},
        ["not", "an", "object"],
    ])
    def test_malformed_records(self, raw):
        with pytest.raises(MalformedResult):
            ExecutionResult.from_dict(raw)


class TestRender:
    """Tests for render()."""

    def test_header_block(self):
        text = render(ExecutionResult.from_dict(RAW_RESULT))
        lines = text.splitlines()
        assert lines[:4] == [
            "Status: ✓ ACCEPTED",
            "Message: Input accepted",
            "Steps executed: 2",
            "Final tape: ^11_",
        ]

    def test_history_in_given_order(self):
        text = render(ExecutionResult.from_dict(RAW_RESULT))
        assert text.index("Step 0:") < text.index("Step 1:")
        assert "  Tape: ^01_" in text

    def test_rejected_without_history(self):
        result = ExecutionResult(accepted=False, message="Stuck", steps=0, final_tape="^_")
        text = render(result)
        assert text.startswith("Status: ✗ REJECTED")
        assert "Execution history" not in text

    def test_long_history_is_not_truncated(self):
        history = [
            {"step": i, "state": "q0", "position": i, "symbol": "1", "tape": "1" * 5}
            for i in range(500)
        ]
        raw = dict(RAW_RESULT, steps=500, history=history)
        text = render(ExecutionResult.from_dict(raw))
        assert text.count("Step ") == 500
        assert "Step 499:" in text
