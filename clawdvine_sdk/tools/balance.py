from typing import Dict, Any, Optional

from web3 import Web3

from ..constants import BASE_RPC_URL, IMAGINE_TOKEN, IMAGINE_DECIMALS, MIN_BALANCE, NETWORK_BASE
from ..core.errors import InputError, TransportError

# Minimal ERC20 ABI
ERC20_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function"
    }
]


def check_balance(address: str, w3: Optional[Web3] = None, rpc_url: str = BASE_RPC_URL,
                  token_address: str = IMAGINE_TOKEN) -> Dict[str, Any]:
    """
    Reads the $CLAWDVINE balance of ``address`` on Base and compares it to the
    membership threshold. Balances are reported in whole tokens (floored).
    """
    if not address or not Web3.is_address(address):
        raise InputError(f"Invalid address: {address!r}")

    w3 = w3 or Web3(Web3.HTTPProvider(rpc_url))
    token = w3.eth.contract(address=Web3.to_checksum_address(token_address), abi=ERC20_ABI)
    try:
        raw_balance = token.functions.balanceOf(Web3.to_checksum_address(address)).call()
    except Exception as e:
        raise TransportError(f"balanceOf call failed: {e}") from e

    raw_balance = int(raw_balance or 0)
    human_balance = raw_balance // 10**IMAGINE_DECIMALS
    return {
        "address": address,
        "tokenAddress": token_address,
        "chain": NETWORK_BASE,
        "rawBalance": str(raw_balance),
        "balance": f"{human_balance:,}",
        "requiredBalance": f"{MIN_BALANCE:,}",
        "eligible": human_balance >= MIN_BALANCE,
    }
