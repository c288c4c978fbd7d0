"""
Pytest configuration and fixtures for the editor tests.

Provides small machines and a fake HTTP session for the engine client.
"""

import json

import pytest


@pytest.fixture
def binary_model():
    """
    Machine over {0, 1} with the initial state q0 and one normal state q1.
    """
    from machine.model import MachineModel

    model = MachineModel(name="binary")
    model.configure_alphabets("01")
    model.add_state(False)
    return model


@pytest.fixture
def binary_config(binary_model):
    """Configuration of binary_model with one complete transition."""
    binary_model.set_transition("q0", "0", "q1", "1", "R")
    return binary_model.to_configuration()


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class FakeSession:
    """
    Records requests and answers them from a route table.

    Routes map (method, path) to a FakeResponse or to an exception instance
    that is raised instead.
    """

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.calls = []

    def request(self, method, url, params=None, data=None, headers=None, timeout=None):
        path = "/" + url.split("://", 1)[-1].split("/", 1)[-1]
        self.calls.append({"method": method, "path": path, "params": params, "data": data, "headers": headers})
        answer = self.routes.get((method, path))
        if answer is None:
            return FakeResponse(404, {"error": "not found"})
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_session():
    return FakeSession
