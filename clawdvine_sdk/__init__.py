from .config import ClientConfig
from .core.errors import (
    ClawdvineError,
    InputError,
    PaymentError,
    SubmissionError,
    RemoteJobFailure,
    PollingTimeout,
    TransportError,
)
from .core.models import GenerationRequest, GenerationResult, SubmissionResult, PollingPolicy
from .core.generation import GenerationClient
from .core.payment import PaymentSession, EvmPaymentSession, resolve_payment_session
from .core.svm import SolanaPaymentSession
from .core.explorer import explorer_url

__all__ = [
    "ClientConfig",
    "GenerationClient",
    "GenerationRequest",
    "GenerationResult",
    "SubmissionResult",
    "PollingPolicy",
    "PaymentSession",
    "EvmPaymentSession",
    "SolanaPaymentSession",
    "resolve_payment_session",
    "explorer_url",
    "ClawdvineError",
    "InputError",
    "PaymentError",
    "SubmissionError",
    "RemoteJobFailure",
    "PollingTimeout",
    "TransportError",
]
