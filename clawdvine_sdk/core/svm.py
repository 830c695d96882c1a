import json
import base64
import logging
from typing import Any, Dict, Optional

import base58
import requests
from solana.rpc.api import Client
from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price
from solders.keypair import Keypair
from solders.message import MessageV0, to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import TransferCheckedParams, get_associated_token_address, transfer_checked

from ..constants import NETWORK_SOLANA, SOLANA_MAINNET_CAIP, SOLANA_RPC_URL
from .errors import InputError, PaymentError
from .payment import EvmExactSigner, ExactSigner, X402PaymentSession
from .wallet import EvmWallet
from .x402 import requirement_amount

logger = logging.getLogger(__name__)

SOLANA_NETWORKS = (NETWORK_SOLANA, SOLANA_MAINNET_CAIP)

COMPUTE_UNIT_LIMIT = 20_000
COMPUTE_UNIT_PRICE_MICROLAMPORTS = 1


def load_keypair(secret: str) -> Keypair:
    """
    Accepts a base58 secret key or the JSON byte array written by solana-keygen.
    """
    if not secret:
        raise InputError("Solana private key is required")
    secret = secret.strip()
    try:
        if secret.startswith("["):
            return Keypair.from_bytes(bytes(json.loads(secret)))
        return Keypair.from_bytes(base58.b58decode(secret))
    except Exception as e:
        raise InputError(f"Invalid Solana private key: {e}") from e


class SvmExactSigner(ExactSigner):
    """
    x402 "exact" payment on Solana.

    Builds an SPL TransferChecked from the payer's token account to the
    payee's, with the facilitator as fee payer. The payer signs its own slot
    only; the facilitator adds the fee payer signature when it settles.
    """

    network = NETWORK_SOLANA

    def __init__(self, keypair: Keypair, rpc: Client):
        self.keypair = keypair
        self.rpc = rpc

    @property
    def address(self) -> str:
        return str(self.keypair.pubkey())

    def supports(self, network: str) -> bool:
        return network in SOLANA_NETWORKS

    def _decimals(self, mint: Pubkey, extra: Dict[str, Any]) -> int:
        if extra.get("decimals") is not None:
            return int(extra["decimals"])
        try:
            return self.rpc.get_token_supply(mint).value.decimals
        except Exception as e:
            raise PaymentError(f"Could not read decimals of {mint}: {e}") from e

    def build_transaction(self, requirement: Dict[str, Any]) -> VersionedTransaction:
        extra = requirement.get("extra") or {}
        try:
            mint = Pubkey.from_string(requirement["asset"])
            pay_to = Pubkey.from_string(requirement["payTo"])
            fee_payer = Pubkey.from_string(extra["feePayer"])
            amount = requirement_amount(requirement)
        except (KeyError, ValueError, TypeError) as e:
            raise PaymentError(f"Malformed payment requirement: {e}") from e

        owner = self.keypair.pubkey()
        transfer = transfer_checked(TransferCheckedParams(
            program_id=TOKEN_PROGRAM_ID,
            source=get_associated_token_address(owner, mint),
            mint=mint,
            dest=get_associated_token_address(pay_to, mint),
            owner=owner,
            amount=amount,
            decimals=self._decimals(mint, extra),
        ))
        instructions = [
            set_compute_unit_limit(COMPUTE_UNIT_LIMIT),
            set_compute_unit_price(COMPUTE_UNIT_PRICE_MICROLAMPORTS),
            transfer,
        ]

        try:
            blockhash = self.rpc.get_latest_blockhash().value.blockhash
        except Exception as e:
            raise PaymentError(f"Could not fetch a recent blockhash: {e}") from e

        message = MessageV0.try_compile(fee_payer, instructions, [], blockhash)
        signers = list(message.account_keys[:message.header.num_required_signatures])
        signatures = [Signature.default()] * len(signers)
        signatures[signers.index(owner)] = self.keypair.sign_message(to_bytes_versioned(message))
        return VersionedTransaction.populate(message, signatures)

    def sign(self, requirement: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Authorizing Solana payment of %s units of %s to %s",
                    requirement.get("amount", requirement.get("maxAmountRequired")),
                    requirement.get("asset"), requirement.get("payTo"))
        tx = self.build_transaction(requirement)
        return {"transaction": base64.b64encode(bytes(tx)).decode("utf-8")}


class SolanaPaymentSession(X402PaymentSession):
    """
    Pays with USDC on Solana. An EVM wallet, when given, is used only for
    servers that offer no Solana payment option.
    """

    def __init__(
        self,
        keypair: Keypair,
        rpc_url: str = SOLANA_RPC_URL,
        evm_wallet: Optional[EvmWallet] = None,
        http: Optional[requests.Session] = None,
        timeout: int = 30,
        rpc: Optional[Client] = None,
    ):
        self.keypair = keypair
        self.wallet = evm_wallet
        signers = [SvmExactSigner(keypair, rpc or Client(rpc_url, timeout=timeout))]
        if evm_wallet is not None:
            signers.append(EvmExactSigner(evm_wallet))
        super().__init__(signers, http=http, timeout=timeout)
