from typing import Any, Dict, Iterator, Tuple
import json
import logging

import requests

from ..constants import API_BASE, DEFAULT_ASPECT_RATIO, DEFAULT_IMAGE_AGENT_ID
from ..core.errors import InputError, SubmissionError, PaymentError
from ..core.payment import PaymentSession

logger = logging.getLogger(__name__)


def build_image_call(prompt: str, aspect_ratio: str = DEFAULT_ASPECT_RATIO,
                     agent_id: str = DEFAULT_IMAGE_AGENT_ID, call_id: int = 1) -> Dict[str, Any]:
    if not prompt or not prompt.strip():
        raise InputError("prompt is required")
    return {
        "jsonrpc": "2.0",
        "id": call_id,
        "method": "tools/call",
        "params": {
            "name": "generate_image",
            "arguments": {"prompt": prompt, "agentId": agent_id, "aspectRatio": aspect_ratio},
        },
    }


def generate_image(session: PaymentSession, prompt: str, aspect_ratio: str = DEFAULT_ASPECT_RATIO,
                   agent_id: str = DEFAULT_IMAGE_AGENT_ID, api_base: str = API_BASE) -> Dict[str, Any]:
    """
    Calls the ``generate_image`` MCP tool. Image generation is synchronous, so
    the JSON-RPC response already carries the result.
    """
    payload = build_image_call(prompt, aspect_ratio, agent_id)
    url = f"{api_base.rstrip('/')}/mcp"
    try:
        response = session.request("POST", url, json=payload, headers={"Content-Type": "application/json"})
    except (requests.RequestException, PaymentError) as e:
        raise SubmissionError(f"Image request failed: {e}") from e

    try:
        body = response.json()
    except ValueError:
        raise SubmissionError(
            f"Image request failed: non-JSON response (HTTP {response.status_code})",
            status_code=response.status_code,
            body=response.text,
        )
    logger.info("Image call returned", extra={"context": {"status_code": response.status_code}})
    return body


def iter_image_content(body: Dict[str, Any]) -> Iterator[Tuple[str, str]]:
    """Yields (kind, value) pairs for the text and image parts of an MCP tool result."""
    result = body.get("result") if isinstance(body, dict) else None
    for item in (result or {}).get("content") or []:
        if item.get("type") == "text":
            yield "text", item.get("text", "")
        elif item.get("type") == "image":
            yield "image", item.get("data") or item.get("url") or json.dumps(item)
