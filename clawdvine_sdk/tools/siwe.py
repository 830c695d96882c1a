import base64
import secrets
from datetime import datetime, timezone
from typing import Dict, Optional

from ..constants import SIWE_DOMAIN, SIWE_URI, SIWE_STATEMENT, BASE_CHAIN_ID
from ..core.wallet import EvmWallet


def build_siwe_message(
    address: str,
    nonce: str,
    issued_at: str,
    domain: str = SIWE_DOMAIN,
    uri: str = SIWE_URI,
    statement: str = SIWE_STATEMENT,
    chain_id: int = BASE_CHAIN_ID,
    version: str = "1",
) -> str:
    """Renders an EIP-4361 message."""
    return (
        f"{domain} wants you to sign in with your Ethereum account:\n"
        f"{address}\n"
        f"\n"
        f"{statement}\n"
        f"\n"
        f"URI: {uri}\n"
        f"Version: {version}\n"
        f"Chain ID: {chain_id}\n"
        f"Nonce: {nonce}\n"
        f"Issued At: {issued_at}"
    )


def sign_siwe_headers(wallet: EvmWallet, nonce: Optional[str] = None, issued_at: Optional[str] = None) -> Dict[str, str]:
    nonce = nonce or secrets.token_hex(8)
    issued_at = issued_at or datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    message = build_siwe_message(wallet.address, nonce, issued_at)
    signature = wallet.sign_message(message)

    # Multi-line messages are not valid header values
    encoded = base64.b64encode(message.encode("utf-8")).decode("utf-8")
    return {
        "X-EVM-SIGNATURE": signature,
        "X-EVM-MESSAGE": encoded,
        "X-EVM-ADDRESS": wallet.address,
    }
