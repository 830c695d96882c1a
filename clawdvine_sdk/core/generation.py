import time
import dataclasses
import logging
from typing import Any, Callable, Optional

import requests

from ..constants import API_BASE, SHARE_BASE
from .errors import SubmissionError, RemoteJobFailure, PollingTimeout, TransportError, PaymentError
from .models import GenerationRequest, SubmissionResult, GenerationResult, PollStatus, PollingPolicy, JobState
from .payment import PaymentSession

logger = logging.getLogger(__name__)

# (status, percent, elapsed_seconds, attempt)
ProgressCallback = Callable[[str, float, float, int], None]


class GenerationClient:
    """
    Pays for a video generation job, then polls it to a terminal state.

    Submission goes through the payment session exactly once; it moves funds,
    so it is never retried here. Status reads are free and go out unpaid.
    """

    def __init__(
        self,
        session: PaymentSession,
        api_base: str = API_BASE,
        http: Any = requests,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        on_progress: Optional[ProgressCallback] = None,
        timeout: int = 30,
        share_base: str = SHARE_BASE,
    ):
        self.session = session
        self.api_base = api_base.rstrip("/")
        self.http = http
        self.sleep = sleep
        self.clock = clock
        self.on_progress = on_progress
        self.timeout = timeout
        self.share_base = share_base.rstrip("/")

    @property
    def network(self) -> str:
        return getattr(self.session, "network", "unknown")

    def submit(self, request: GenerationRequest) -> SubmissionResult:
        url = f"{self.api_base}/generation/create"
        logger.info("Submitting generation", extra={"context": {"model": request.model, "duration": request.duration}})
        try:
            response = self.session.request(
                "POST",
                url,
                json=request.to_payload(),
                headers={"Content-Type": "application/json"},
            )
        except (requests.RequestException, PaymentError) as e:
            raise SubmissionError(f"Generation request failed: {e}") from e

        raw = response.text
        try:
            body = response.json()
        except ValueError:
            raise SubmissionError(
                f"Generation failed: non-JSON response (HTTP {response.status_code})",
                status_code=response.status_code,
                body=raw,
            )

        result = SubmissionResult.from_response(response.status_code, body)
        if result is None:
            raise SubmissionError(
                f"Generation failed (HTTP {response.status_code})",
                status_code=response.status_code,
                body=raw,
            )
        if not result.tx_hash:
            # 202 bodies without txHash still carry the facilitator receipt
            settlement = getattr(self.session, "last_settlement", None)
            if isinstance(settlement, dict) and settlement.get("transaction"):
                result = dataclasses.replace(result, tx_hash=settlement["transaction"])
        logger.info("Generation queued", extra={"context": {"task_id": result.task_id, "tx_hash": result.tx_hash}})
        return result

    def fetch_status(self, task_id: str) -> PollStatus:
        url = f"{self.api_base}/generation/{task_id}/status"
        try:
            response = self.http.get(url, timeout=self.timeout)
            body = response.json()
        except requests.RequestException as e:
            raise TransportError(f"Status request failed for {task_id}: {e}") from e
        except ValueError as e:
            raise TransportError(f"Status response for {task_id} is not JSON: {e}") from e
        if not isinstance(body, dict):
            raise TransportError(f"Unexpected status payload for {task_id}: {body!r}")
        return PollStatus.from_body(body)

    def poll(self, task_id: str, policy: PollingPolicy, started_at: Optional[float] = None) -> GenerationResult:
        """
        Polls until the job completes, fails, or the attempt budget runs out.
        Sleeps before every poll, including the first.
        """
        started_at = self.clock() if started_at is None else started_at

        for attempt in range(1, policy.max_attempts + 1):
            self.sleep(policy.interval_seconds)

            status = self.fetch_status(task_id)
            elapsed = self.clock() - started_at

            if status.state is JobState.COMPLETED:
                gen = status.generation()
                logger.info("Generation completed", extra={"context": {"task_id": task_id, "attempt": attempt}})
                return GenerationResult(
                    task_id=task_id,
                    video=gen.get("video"),
                    thumbnail=gen.get("image"),
                    gif=gen.get("gif"),
                    share_url=f"{self.share_base}/{task_id}",
                    tx_hash=status.tx_hash,
                    explorer=status.explorer,
                    elapsed_seconds=elapsed,
                )

            if status.state is JobState.FAILED:
                logger.error("Generation failed", extra={"context": {"task_id": task_id, "error": status.error}})
                raise RemoteJobFailure(task_id, status.error if status.error is not None else "unknown error", elapsed)

            if status.state is JobState.UNKNOWN:
                logger.debug("Unrecognized status %r, still waiting", status.status)
            if self.on_progress:
                self.on_progress(status.status, status.percent, elapsed, attempt)

        logger.error("Generation timed out", extra={"context": {"task_id": task_id, "attempts": policy.max_attempts}})
        raise PollingTimeout(task_id, policy.max_attempts, policy.timeout_label)

    def run(self, request: GenerationRequest, on_submitted: Optional[Callable[[SubmissionResult, PollingPolicy], None]] = None) -> GenerationResult:
        submission = self.submit(request)
        policy = PollingPolicy.for_model(request.model)
        if on_submitted:
            on_submitted(submission, policy)
        result = self.poll(submission.task_id, policy)
        if not result.tx_hash and submission.tx_hash:
            result = dataclasses.replace(result, tx_hash=submission.tx_hash, explorer=result.explorer or submission.explorer)
        return result
