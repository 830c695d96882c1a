import sys
from typing import TextIO

from .core.explorer import explorer_url
from .core.models import GenerationRequest, SubmissionResult, GenerationResult, PollingPolicy


def _short(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def print_request(request: GenerationRequest, out: TextIO = sys.stdout) -> None:
    print("\n🎬 Generating video...", file=out)
    print(f'   Prompt:   "{_short(request.prompt, 80)}"', file=out)
    print(f"   Model:    {request.model}", file=out)
    print(f"   Duration: {request.duration}s", file=out)
    if request.agent_id:
        print(f"   Agent:    {request.agent_id}", file=out)
    if request.image_data:
        image = "[base64]" if request.image_data.startswith("data:") else request.image_data[:60] + "..."
        print(f"   Image:    {image}", file=out)
    print(file=out)


def print_submission(submission: SubmissionResult, policy: PollingPolicy, network: str, out: TextIO = sys.stdout) -> None:
    print(f"✅ Queued: {submission.task_id}", file=out)
    if submission.tx_hash:
        print(f"💳 Payment: {explorer_url(submission.tx_hash, network, submission.explorer)}", file=out)
    print("⏳ Polling...\n", file=out)
    if policy.interval_ms > PollingPolicy.FAST_INTERVAL_MS:
        print(f"ℹ️  Slow model detected: polling every {policy.interval_seconds:.0f}s, timeout {policy.timeout_label}\n", file=out)


def progress_printer(out: TextIO = sys.stdout):
    """Returns a progress callback that rewrites a single terminal line."""
    def _progress(status: str, percent: float, elapsed: float, attempt: int) -> None:
        out.write(f"\r   {status} {percent}% ({elapsed:.0f}s)")
        out.flush()
    return _progress


def print_result(result: GenerationResult, network: str, out: TextIO = sys.stdout) -> None:
    print(f"\n🎉 Complete! ({result.elapsed_seconds:.0f}s)", file=out)
    print(f"🎬 Video: {result.video}", file=out)
    if result.thumbnail:
        print(f"🖼️  Thumb: {result.thumbnail}", file=out)
    if result.gif:
        print(f"🎞️  GIF:   {result.gif}", file=out)
    print(f"🔗 Share: {result.share_url}", file=out)
    if result.tx_hash:
        print(f"💳 TX:    {explorer_url(result.tx_hash, network, result.explorer)}", file=out)
