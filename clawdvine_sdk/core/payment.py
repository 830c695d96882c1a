import os
import time
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..config import ClientConfig
from ..constants import NETWORK_BASE
from .errors import InputError, PaymentError
from .wallet import EvmWallet
from .x402 import X402, PAYMENT_HEADER_V1, PAYMENT_HEADER_V2, pick_requirement, requirement_amount

logger = logging.getLogger(__name__)

# x402 v1 network names. v2 uses CAIP-2 ids (eip155:<chainId>).
EVM_CHAIN_IDS = {
    "base": 8453,
    "base-sepolia": 84532,
    "ethereum": 1,
    "polygon": 137,
    "avalanche": 43114,
}


def evm_chain_id(network: str) -> Optional[int]:
    if network in EVM_CHAIN_IDS:
        return EVM_CHAIN_IDS[network]
    if network.startswith("eip155:"):
        try:
            return int(network.split(":", 1)[1])
        except ValueError:
            return None
    return None


class PaymentSession(ABC):
    """
    Interface for payment-capable HTTP clients.
    The generation client only ever sees one resolved session.
    """

    network: str = "unknown"
    last_settlement: Optional[Dict[str, Any]] = None

    @abstractmethod
    def request(self, method: str, url: str, **kwargs) -> requests.Response:
        """
        Send a request, paying for it if the server answers 402.
        """
        pass


class ExactSigner(ABC):
    """
    Produces the ``payload`` of an x402 "exact" payment for one chain family.
    """

    network: str = "unknown"

    @abstractmethod
    def supports(self, network: str) -> bool:
        pass

    @abstractmethod
    def sign(self, requirement: Dict[str, Any]) -> Dict[str, Any]:
        pass


class EvmExactSigner(ExactSigner):
    """EIP-3009 TransferWithAuthorization, settled by the facilitator."""

    network = NETWORK_BASE

    def __init__(self, wallet: EvmWallet):
        self.wallet = wallet

    def supports(self, network: str) -> bool:
        return evm_chain_id(network) is not None

    def sign(self, requirement: Dict[str, Any]) -> Dict[str, Any]:
        try:
            pay_to = requirement["payTo"]
            asset = requirement["asset"]
            value = requirement_amount(requirement)
        except (KeyError, ValueError) as e:
            raise PaymentError(f"Malformed payment requirement: {e}") from e

        extra = requirement.get("extra") or {}
        now = int(time.time())
        nonce = os.urandom(32)
        authorization = {
            "from": self.wallet.address,
            "to": pay_to,
            "value": value,
            "validAfter": now - 60,
            "validBefore": now + int(requirement.get("maxTimeoutSeconds") or 600),
            "nonce": nonce,
        }

        signable = {
            "types": {
                "EIP712Domain": [
                    {"name": "name", "type": "string"},
                    {"name": "version", "type": "string"},
                    {"name": "chainId", "type": "uint256"},
                    {"name": "verifyingContract", "type": "address"}
                ],
                "TransferWithAuthorization": [
                    {"name": "from", "type": "address"},
                    {"name": "to", "type": "address"},
                    {"name": "value", "type": "uint256"},
                    {"name": "validAfter", "type": "uint256"},
                    {"name": "validBefore", "type": "uint256"},
                    {"name": "nonce", "type": "bytes32"}
                ]
            },
            "primaryType": "TransferWithAuthorization",
            "domain": {
                "name": extra.get("name", "USD Coin"),
                "version": extra.get("version", "2"),
                "chainId": evm_chain_id(str(requirement["network"])),
                "verifyingContract": asset,
            },
            "message": authorization,
        }

        logger.info("Authorizing payment of %s units of %s to %s", value, asset, pay_to)
        try:
            signature = self.wallet.sign_typed_data(signable)
        except Exception as e:
            raise PaymentError(f"Could not sign payment authorization: {e}") from e

        # JSON-safe copy for the header
        return {
            "signature": signature,
            "authorization": {
                "from": authorization["from"],
                "to": authorization["to"],
                "value": str(authorization["value"]),
                "validAfter": str(authorization["validAfter"]),
                "validBefore": str(authorization["validBefore"]),
                "nonce": "0x" + nonce.hex(),
            },
        }


class X402PaymentSession(PaymentSession):
    """
    x402 "exact" scheme client.

    The first attempt goes out unpaid. On 402 the challenge is read, the first
    offered requirement a signer supports is signed (signers in preference
    order) and the request is sent once more with the payment header.
    """

    def __init__(self, signers: List[ExactSigner], http: Optional[requests.Session] = None, timeout: int = 30):
        if not signers:
            raise InputError("At least one payment signer is required")
        self.signers = signers
        self.network = signers[0].network
        self.http = http or requests.Session()
        self.timeout = timeout
        self.x402 = X402()
        self.last_settlement = None

    def request(self, method: str, url: str, **kwargs) -> requests.Response:
        self.last_settlement = None
        kwargs.setdefault("timeout", self.timeout)
        response = self.http.request(method, url, **kwargs)
        if response.status_code != 402:
            return response

        logger.info("402 Payment Required from %s", url)
        try:
            body = response.json()
        except ValueError:
            body = None
        try:
            challenge = self.x402.extract_challenge(response.headers, body)
            header_name, token = self.build_payment_header(challenge)
        except PaymentError:
            raise
        except (ValueError, TypeError, AttributeError, KeyError) as e:
            raise PaymentError(f"Unreadable payment challenge from {url}: {e}") from e

        headers = dict(kwargs.pop("headers", None) or {})
        headers[header_name] = token
        paid = self.http.request(method, url, headers=headers, **kwargs)
        if paid.status_code == 402:
            logger.warning("Payment was not accepted by %s", url)
        try:
            self.last_settlement = self.x402.decode_settlement(paid.headers)
        except ValueError as e:
            logger.warning("Could not decode settlement receipt: %s", e)
        return paid

    def select(self, accepts: List[Dict[str, Any]]) -> Tuple[ExactSigner, Dict[str, Any]]:
        for signer in self.signers:
            requirement = pick_requirement(accepts, signer.supports)
            if requirement:
                return signer, requirement
        networks = [a.get("network") for a in accepts if isinstance(a, dict)]
        raise PaymentError(f"No supported payment option offered (networks: {networks})")

    def build_payment_header(self, challenge: Dict[str, Any]):
        signer, requirement = self.select(challenge["accepts"])
        version = challenge["x402Version"]
        payload = signer.sign(requirement)
        self.network = signer.network
        if version >= 2:
            envelope = {"x402Version": version, "accepted": requirement, "payload": payload}
            return PAYMENT_HEADER_V2, self.x402.encode(envelope)
        envelope = {
            "x402Version": version,
            "scheme": requirement["scheme"],
            "network": requirement["network"],
            "payload": payload,
        }
        return PAYMENT_HEADER_V1, self.x402.encode(envelope)


class EvmPaymentSession(X402PaymentSession):
    """Pays with USDC on an EVM chain (Base by default)."""

    def __init__(self, wallet: EvmWallet, http: Optional[requests.Session] = None, timeout: int = 30):
        self.wallet = wallet
        super().__init__([EvmExactSigner(wallet)], http=http, timeout=timeout)


def resolve_payment_session(config: ClientConfig, http: Optional[requests.Session] = None) -> PaymentSession:
    """
    Picks the payment session for this invocation.

    Solana is preferred when its key is set. An EVM key set alongside it is
    kept as a second signer for servers that only offer EVM payment.
    """
    if not config.has_payer:
        raise InputError("Set EVM_PRIVATE_KEY (Base) or SOLANA_PRIVATE_KEY (Solana)")

    evm_wallet = EvmWallet(config.evm_private_key) if config.evm_private_key else None

    if config.solana_private_key:
        from .svm import SolanaPaymentSession, load_keypair
        return SolanaPaymentSession(
            load_keypair(config.solana_private_key),
            rpc_url=config.solana_rpc_url,
            evm_wallet=evm_wallet,
            http=http,
            timeout=config.request_timeout,
        )

    return EvmPaymentSession(evm_wallet, http=http, timeout=config.request_timeout)
