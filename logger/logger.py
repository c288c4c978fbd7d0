import json
import os
from datetime import datetime, timezone


class JSONLogger:
    def __init__(self, output_directory="logs/", log_file_prefix="tm_editor_"):
        self.output_directory = output_directory
        self.log_file_prefix = log_file_prefix
        os.makedirs(self.output_directory, exist_ok=True)
        self.today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        self.current_log = self._get_log_filename()

    def _get_log_filename(self):
        filename = f"{self.log_file_prefix}{self.today}.jsonl"  # JSON lines format
        return os.path.join(self.output_directory, filename)

    def _timestamp(self):
        return datetime.now(timezone.utc).isoformat()

    def log(self, entry: dict):
        """Log a single entry to the main editor log."""
        self.rotate()
        entry = {"timestamp": self._timestamp(), **entry}
        with open(self.current_log, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False) + "\n")

    def rotate(self):
        """Start a new log file if the UTC date changed."""
        self.today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        self.current_log = self._get_log_filename()

    def log_event(self, event: str, **details):
        """Log a model event (alphabets set, state added, machine loaded...)."""
        self.log({"kind": "event", "event": event, **details})

    def log_request(self, method: str, path: str, status=None, elapsed_ms=None, error=None):
        """Log one engine request with its outcome."""
        entry = {"kind": "request", "method": method, "path": path, "status": status}
        if elapsed_ms is not None:
            entry["elapsed_ms"] = round(elapsed_ms, 1)
        if error:
            entry["error"] = error
        self.log(entry)

    def log_execution(self, input_tape: str, summary: dict):
        """Log the summary of an execution result (not its full history)."""
        self.log({"kind": "execution", "input": input_tape, **summary})

    def read_entries(self):
        if not os.path.exists(self.current_log):
            return []
        with open(self.current_log, "r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
