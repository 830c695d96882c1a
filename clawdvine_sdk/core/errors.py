from typing import Optional


class ClawdvineError(Exception):
    """Base class for every failure the client reports to its caller."""


class InputError(ClawdvineError, ValueError):
    """Raised when a required argument or credential is missing or invalid."""


class PaymentError(ClawdvineError):
    """Raised when the x402 payment handshake cannot be completed."""


class TransportError(ClawdvineError):
    """Raised on network or JSON-decode failures while talking to the API."""


class SubmissionError(ClawdvineError):
    """Raised when the creation endpoint does not accept the job."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class RemoteJobFailure(ClawdvineError):
    """Raised when the status endpoint reports the job as failed."""

    def __init__(self, task_id: str, error: str, elapsed_seconds: float = 0.0):
        self.task_id = task_id
        self.error = error
        self.elapsed_seconds = elapsed_seconds
        super().__init__(f"Failed after {elapsed_seconds:.0f}s: {error}")


class PollingTimeout(ClawdvineError):
    """Raised when the attempt budget runs out before a terminal status."""

    def __init__(self, task_id: str, attempts: int, timeout_label: str):
        self.task_id = task_id
        self.attempts = attempts
        self.timeout_label = timeout_label
        super().__init__(f"Timed out after {timeout_label}")
