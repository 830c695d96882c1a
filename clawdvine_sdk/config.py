import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .constants import API_BASE, SHARE_BASE, BASE_RPC_URL, SOLANA_RPC_URL
from .core.errors import InputError


@dataclass
class ClientConfig:
    """
    Runtime configuration for the ClawdVine client.

    At least one payer key is needed for paid calls:
    - evm_private_key: 0x-prefixed hex key of a wallet holding USDC on Base
    - solana_private_key: base58 key of a wallet holding USDC on Solana

    Read-only commands (balance with an explicit address) need neither.
    """

    api_base: str = API_BASE
    share_base: str = SHARE_BASE
    evm_private_key: Optional[str] = None
    solana_private_key: Optional[str] = None
    agent_id: Optional[str] = None
    rpc_url: str = BASE_RPC_URL
    solana_rpc_url: str = SOLANA_RPC_URL

    # HTTP timeout for a single request, not for the whole polling session
    request_timeout: int = 30

    log_level: str = "WARNING"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "ClientConfig":
        load_dotenv(dotenv_path)
        raw_timeout = os.getenv("CLAWDVINE_TIMEOUT", "30")
        try:
            request_timeout = int(raw_timeout)
        except ValueError:
            raise InputError(f"CLAWDVINE_TIMEOUT must be a whole number of seconds, got {raw_timeout!r}")
        return cls(
            api_base=os.getenv("CLAWDVINE_API_BASE", API_BASE),
            share_base=os.getenv("CLAWDVINE_SHARE_BASE", SHARE_BASE),
            evm_private_key=os.getenv("EVM_PRIVATE_KEY") or None,
            solana_private_key=os.getenv("SOLANA_PRIVATE_KEY") or None,
            agent_id=os.getenv("CLAWDVINE_AGENT_ID") or None,
            rpc_url=os.getenv("BASE_RPC_URL", BASE_RPC_URL),
            solana_rpc_url=os.getenv("SOLANA_RPC_URL", SOLANA_RPC_URL),
            request_timeout=request_timeout,
            log_level=os.getenv("LOG_LEVEL", "WARNING"),
            log_file=os.getenv("LOG_FILE") or None,
        )

    @property
    def has_payer(self) -> bool:
        return bool(self.evm_private_key or self.solana_private_key)

    def validate(self, require_payer: bool = False) -> None:
        if not self.api_base:
            raise InputError("api_base is required")
        if self.request_timeout <= 0:
            raise InputError("request_timeout must be positive")
        if require_payer and not self.has_payer:
            raise InputError("Set EVM_PRIVATE_KEY (Base) or SOLANA_PRIVATE_KEY (Solana)")
