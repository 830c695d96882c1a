import os
import re
from typing import Optional

from ..constants import NETWORK_SOLANA, BASE_EXPLORER_TX, SOLANA_EXPLORER_TX

# Base58 alphabet, length of a Solana transaction signature.
SOLANA_SIGNATURE_RE = re.compile(r"[1-9A-HJ-NP-Za-km-z]{80,90}")


def is_solana_signature(tx_ref: str) -> bool:
    return bool(SOLANA_SIGNATURE_RE.fullmatch(tx_ref or ""))


def explorer_url(tx_ref: str, network: str, override: Optional[str] = None) -> str:
    """
    Builds a block explorer link for a payment transaction.

    A link supplied by the server is used as-is. Otherwise a Solana payment
    network, or a reference shaped like a Solana signature, selects Solscan;
    everything else goes to Basescan. The signature shape is checked even when
    the declared network is EVM, since the API reports whichever chain settled.

    The BASE_EXPLORER_TX and SOLANA_EXPLORER_TX environment variables are read
    per call, so templates loaded from a .env file apply.
    """
    if override:
        return override
    if network == NETWORK_SOLANA or is_solana_signature(tx_ref):
        return os.getenv("SOLANA_EXPLORER_TX", SOLANA_EXPLORER_TX).format(tx=tx_ref)
    return os.getenv("BASE_EXPLORER_TX", BASE_EXPLORER_TX).format(tx=tx_ref)
