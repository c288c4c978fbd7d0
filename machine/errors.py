# machine/errors.py


class MachineError(Exception):
    """Base class for every error raised by the editor core."""


class InvalidAlphabet(MachineError):
    pass


class CannotDeleteInitial(MachineError):
    pass


class UnknownCell(MachineError):
    """A (state, symbol) pair that is not part of the reconciled table."""

    def __init__(self, state, symbol):
        super().__init__(f"No transition cell for ({state}, {symbol})")
        self.state = state
        self.symbol = symbol


class MalformedConfiguration(MachineError):
    pass


class InconsistentConfiguration(MachineError):
    pass


class InvalidTapeInput(MachineError):
    pass


class MachineNotReady(MachineError):
    pass


class MalformedResult(MachineError):
    pass


# === Engine transport ===
class EngineError(MachineError):
    pass


class EngineUnavailable(EngineError):
    """The engine could not be reached at all."""


class EngineRequestFailed(EngineError):
    def __init__(self, status_code, message=""):
        text = f"Engine responded with HTTP {status_code}"
        if message:
            text += f": {message}"
        super().__init__(text)
        self.status_code = status_code
        self.message = message


class DisplayUnavailable(EngineRequestFailed):
    """HTTP 503: no display device is attached to the engine."""

    def __init__(self, message="Display device is not active"):
        super().__init__(503, message)
