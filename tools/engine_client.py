# tools/engine_client.py

import json
import time
from dataclasses import dataclass
from pathlib import Path

import requests

from machine.codec import dumps, load_untrusted, serialize, validate
from machine.errors import DisplayUnavailable, EngineRequestFailed, EngineUnavailable
from machine.results import ExecutionResult

JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass(frozen=True)
class RemoteFile:
    name: str
    size: int

    @property
    def machine_name(self):
        return strip_extension(self.name)


def strip_extension(filename):
    return filename[:-5] if filename.endswith(".json") else filename


def _error_message(response):
    try:
        data = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(data, dict):
        return str(data.get("error") or data.get("message") or "")
    return ""


class EngineClient:
    """HTTP client for the execution engine.

    Every call is a single blocking request. Transport failures raise
    EngineUnavailable, non-2xx answers raise EngineRequestFailed. Nothing is
    retried.
    """

    def __init__(self, base_url, timeout=10, session=None, logger=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger

    def _request(self, method, path, params=None, payload=None, data=None):
        url = f"{self.base_url}{path}"
        headers = JSON_HEADERS if payload is not None or data is not None else None
        if payload is not None:
            data = json.dumps(payload, ensure_ascii=False)

        started = time.perf_counter()
        try:
            response = self.session.request(
                method, url, params=params, data=data, headers=headers, timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            self._log(method, path, started, error="timeout")
            raise EngineUnavailable(f"Engine at {self.base_url} timed out.") from e
        except requests.exceptions.RequestException as e:
            self._log(method, path, started, error=str(e) or type(e).__name__)
            raise EngineUnavailable(f"Cannot reach engine at {self.base_url}: {e}") from e

        self._log(method, path, started, status=response.status_code)
        return response

    def _log(self, method, path, started, status=None, error=None):
        if self.logger is None:
            return
        elapsed_ms = (time.perf_counter() - started) * 1000
        self.logger.log_request(method, path, status=status, elapsed_ms=elapsed_ms, error=error)

    @staticmethod
    def _check(response, display=False):
        if response.ok:
            return response
        if display and response.status_code == 503:
            raise DisplayUnavailable()
        raise EngineRequestFailed(response.status_code, _error_message(response))

    @staticmethod
    def _json(response):
        try:
            return response.json()
        except ValueError as e:
            raise EngineRequestFailed(response.status_code, "response is not valid JSON") from e

    # === Liveness ===
    def status(self):
        try:
            response = self._request("GET", "/status")
        except EngineUnavailable:
            return False
        return response.ok

    # === Persistence ===
    def save(self, name, config):
        body = dumps(config)
        response = self._check(self._request("POST", "/api/save", params={"filename": name}, data=body))
        data = self._json(response)
        return data.get("file", f"{name}.json") if isinstance(data, dict) else f"{name}.json"

    def load(self, name):
        """Fetch a stored machine; it is validated before being returned."""
        response = self._check(self._request("GET", "/api/load", params={"filename": name}))
        return load_untrusted(self._json(response))

    def list_files(self):
        response = self._check(self._request("GET", "/api/files"))
        data = self._json(response)
        files = data.get("files", []) if isinstance(data, dict) else None
        if not isinstance(files, list):
            raise EngineRequestFailed(response.status_code, "malformed file list")

        entries = []
        for f in files:
            if not isinstance(f, dict) or not isinstance(f.get("name"), str):
                raise EngineRequestFailed(response.status_code, "malformed file list")
            try:
                size = int(f.get("size", 0))
            except (TypeError, ValueError) as e:
                raise EngineRequestFailed(response.status_code, "malformed file list") from e
            entries.append(RemoteFile(name=f["name"], size=size))
        return entries

    def delete(self, name):
        self._check(self._request("DELETE", "/api/delete", params={"filename": name}))

    # === Execution ===
    def execute(self, input_tape, config):
        validate(config)
        payload = {"input": input_tape, "config": serialize(config)}
        response = self._check(self._request("POST", "/api/execute", payload=payload))
        return ExecutionResult.from_dict(self._json(response))

    def execute_on_display(self, input_tape, config, delay=500):
        validate(config)
        payload = {"input": input_tape, "config": serialize(config), "delay": int(delay)}
        self._check(self._request("POST", "/api/execute-display", payload=payload), display=True)

    def start_step_mode(self, input_tape, config):
        validate(config)
        payload = {"input": input_tape, "config": serialize(config)}
        response = self._check(self._request("POST", "/api/start-step-mode", payload=payload), display=True)
        data = self._json(response)
        return data.get("message", "") if isinstance(data, dict) else ""


def download_locally(name, config, download_directory="downloads/"):
    """Write the configuration to ``<download_directory>/<name>.json``."""
    folder = Path(download_directory)
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / f"{strip_extension(name)}.json"
    with open(path, "w", encoding="utf-8") as f:
        f.write(dumps(config))
    return path


def save_or_download(client, name, config, download_directory="downloads/"):
    """Save on the engine, falling back to a local file when it is unreachable.

    Returns ``(location, remote)``. Engine-side refusals (non-2xx) are not
    masked by the fallback.
    """
    try:
        return client.save(name, config), True
    except EngineUnavailable:
        return str(download_locally(name, config, download_directory)), False
