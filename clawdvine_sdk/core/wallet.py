from typing import Dict, Any

from eth_account import Account
from eth_account.messages import encode_defunct

from .errors import InputError


def to_hex(value) -> str:
    # HexBytes.hex() dropped the 0x prefix in hexbytes 1.0
    out = value.hex() if hasattr(value, "hex") else str(value)
    return out if out.startswith("0x") else "0x" + out


class EvmWallet:
    """
    Payer wallet loaded from an EVM private key.
    The key is only held in memory; nothing is written to disk.
    """

    def __init__(self, private_key: str):
        if not private_key:
            raise InputError("EVM private key is required")
        key = private_key.strip()
        if not key.startswith("0x"):
            key = "0x" + key
        try:
            self.account = Account.from_key(key)
        except Exception as e:
            raise InputError(f"Invalid EVM private key: {e}") from e
        self.address = self.account.address
        self._private_key = key

    def sign_message(self, text: str) -> str:
        signed = self.account.sign_message(encode_defunct(text=text))
        return to_hex(signed.signature)

    def sign_typed_data(self, full_message: Dict[str, Any]) -> str:
        signed = Account.sign_typed_data(self._private_key, full_message=full_message)
        return to_hex(signed.signature)
