import json
import base64
from typing import Callable, Dict, Any, List, Optional

PAYMENT_REQUIRED_HEADER = "PAYMENT-REQUIRED"
PAYMENT_HEADER_V1 = "X-PAYMENT"
PAYMENT_HEADER_V2 = "PAYMENT-SIGNATURE"
PAYMENT_RESPONSE_HEADERS = ("X-PAYMENT-RESPONSE", "PAYMENT-RESPONSE")


class X402:
    """
    Minimal implementation of x402 utilities for encoding/decoding payment tokens.
    """

    def encode(self, data: Dict[str, Any]) -> str:
        """
        Encodes a payment envelope into a base64 token string.
        """
        json_str = json.dumps(data, separators=(",", ":"))
        return base64.b64encode(json_str.encode("utf-8")).decode("utf-8")

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Decodes a base64 payment token into a dictionary.
        """
        try:
            json_str = base64.b64decode(token).decode("utf-8")
            return json.loads(json_str)
        except Exception as e:
            raise ValueError(f"Invalid x402 token: {e}")

    def extract_challenge(self, headers: Dict[str, str], body: Any) -> Dict[str, Any]:
        """
        Reads the payment challenge of a 402 response.

        v2 servers put it base64-encoded in the PAYMENT-REQUIRED header, v1
        servers return it as the JSON body. Returns ``{"x402Version", "accepts"}``.
        """
        header = headers.get(PAYMENT_REQUIRED_HEADER)
        if header:
            challenge = self.decode(header)
        elif isinstance(body, dict):
            challenge = body
        else:
            challenge = {}
        accepts = challenge.get("accepts") or []
        if not isinstance(accepts, list):
            accepts = []
        return {
            "x402Version": int(challenge.get("x402Version") or (2 if header else 1)),
            "accepts": accepts,
        }

    def decode_settlement(self, headers: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """Decodes the settlement receipt a server attaches after a paid request."""
        for name in PAYMENT_RESPONSE_HEADERS:
            token = headers.get(name)
            if token:
                return self.decode(token)
        return None


def requirement_amount(requirement: Dict[str, Any]) -> int:
    # v1 names it maxAmountRequired, v2 amount; both are atomic units as strings.
    raw = requirement.get("amount", requirement.get("maxAmountRequired", "0"))
    return int(str(raw), 0) if str(raw).lower().startswith("0x") else int(str(raw))


def pick_requirement(accepts: List[Dict[str, Any]], is_supported: Callable[[str], bool]) -> Optional[Dict[str, Any]]:
    for req in accepts:
        if not isinstance(req, dict):
            continue
        if req.get("scheme") == "exact" and is_supported(str(req.get("network", ""))):
            return req
    return None
