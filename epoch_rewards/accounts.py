"""
Address helpers shared by the token, the ledger and the web3 client.
"""

from web3 import Web3

from .errors import RevertError

ZERO_ADDRESS = '0x0000000000000000000000000000000000000000'


def normalize_address(address: str) -> str:
    """Return the EIP-55 checksummed form, reverting on anything else"""
    try:
        return Web3.to_checksum_address(address)
    except (TypeError, ValueError) as e:
        raise RevertError("Invalid address") from e


def create_address(deployer: str, nonce: int) -> str:
    """Deterministic address for the nonce-th contract created by deployer"""
    digest = Web3.keccak(text=f"{deployer.lower()}:{nonce}")
    return Web3.to_checksum_address('0x' + bytes(digest[-20:]).hex())


def mask_wallet_address(wallet_address: str) -> str:
    """Mask wallet address for logging"""
    if not wallet_address or len(wallet_address) < 10:
        return wallet_address
    return wallet_address[:6] + "..." + wallet_address[-4:]


def require_amount(value, reason: str = "Invalid amount") -> None:
    """Token amounts and durations are whole integers; bool is not one"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise RevertError(reason)
