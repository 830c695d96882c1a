from dataclasses import dataclass
from typing import Optional, Dict, Any
from enum import Enum

from ..constants import (
    DEFAULT_VIDEO_MODEL,
    DEFAULT_DURATION,
    DEFAULT_ASPECT_RATIO,
    SLOW_MODELS,
)
from .errors import InputError


class JobState(Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "JobState":
        for state in cls:
            if state.value == value:
                return state
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.FAILED)


@dataclass(frozen=True)
class GenerationRequest:
    """
    One video generation job as submitted to ``/generation/create``.

    Only ``prompt`` is required. ``agent_id`` and ``image_data`` are left out of
    the wire payload entirely when unset.
    """

    prompt: str
    model: str = DEFAULT_VIDEO_MODEL
    duration: int = DEFAULT_DURATION
    aspect_ratio: str = DEFAULT_ASPECT_RATIO
    agent_id: Optional[str] = None
    image_data: Optional[str] = None

    def __post_init__(self):
        if not self.prompt or not self.prompt.strip():
            raise InputError("prompt is required")
        if not self.model:
            raise InputError("model is required")
        if isinstance(self.duration, bool) or not isinstance(self.duration, int) or self.duration <= 0:
            raise InputError(f"duration must be a positive integer, got {self.duration!r}")
        if not self.aspect_ratio:
            raise InputError("aspect_ratio is required")

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "prompt": self.prompt,
            "videoModel": self.model,
            "duration": self.duration,
            "aspectRatio": self.aspect_ratio,
        }
        if self.agent_id:
            payload["agentId"] = self.agent_id
        if self.image_data:
            payload["imageData"] = self.image_data
        return payload


@dataclass(frozen=True)
class SubmissionResult:
    task_id: str
    tx_hash: Optional[str] = None
    explorer: Optional[str] = None

    @classmethod
    def from_response(cls, status_code: int, body: Any) -> Optional["SubmissionResult"]:
        """Returns None unless the response is a 202 carrying a non-empty taskId."""
        if status_code != 202 or not isinstance(body, dict):
            return None
        task_id = body.get("taskId")
        if not isinstance(task_id, str) or not task_id.strip():
            return None
        return cls(task_id=task_id, tx_hash=body.get("txHash") or None, explorer=body.get("explorer") or None)


@dataclass(frozen=True)
class GenerationResult:
    task_id: str
    video: Optional[str]
    share_url: str
    thumbnail: Optional[str] = None
    gif: Optional[str] = None
    tx_hash: Optional[str] = None
    explorer: Optional[str] = None
    elapsed_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "taskId": self.task_id,
            "video": self.video,
            "share": self.share_url,
            "elapsedSeconds": round(self.elapsed_seconds),
        }
        if self.thumbnail:
            out["thumbnail"] = self.thumbnail
        if self.gif:
            out["gif"] = self.gif
        if self.tx_hash:
            out["txHash"] = self.tx_hash
        if self.explorer:
            out["explorer"] = self.explorer
        return out


@dataclass
class PollStatus:
    status: str
    state: JobState
    percent: float = 0
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    tx_hash: Optional[str] = None
    explorer: Optional[str] = None

    @classmethod
    def from_body(cls, body: Dict[str, Any]) -> "PollStatus":
        status = body.get("status")
        metadata = body.get("metadata") or {}
        percent = metadata.get("percent") if isinstance(metadata, dict) else None
        return cls(
            status=str(status),
            state=JobState.parse(status),
            percent=percent or body.get("progress") or 0,
            result=body.get("result"),
            error=body.get("error"),
            tx_hash=body.get("txHash"),
            explorer=body.get("explorer"),
        )

    def generation(self) -> Dict[str, Any]:
        result = self.result if isinstance(self.result, dict) else {}
        gen = result.get("generation")
        return gen if isinstance(gen, dict) else {}


@dataclass(frozen=True)
class PollingPolicy:
    interval_ms: int
    max_attempts: int

    FAST_INTERVAL_MS = 5000
    SLOW_INTERVAL_MS = 10000
    MAX_ATTEMPTS = 120

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000

    @property
    def timeout_label(self) -> str:
        minutes = self.interval_ms * self.max_attempts / 60000
        if minutes >= 1 and minutes == int(minutes):
            return f"{int(minutes)} minutes"
        return f"{self.interval_ms * self.max_attempts / 1000:.0f} seconds"

    @staticmethod
    def is_slow_model(model: str) -> bool:
        return any(model.startswith(m) for m in SLOW_MODELS) or "kling" in model

    @classmethod
    def for_model(cls, model: str) -> "PollingPolicy":
        if cls.is_slow_model(model):
            return cls(cls.SLOW_INTERVAL_MS, cls.MAX_ATTEMPTS)
        return cls(cls.FAST_INTERVAL_MS, cls.MAX_ATTEMPTS)
