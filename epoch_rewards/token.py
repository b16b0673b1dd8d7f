"""
Reward Token

Minimal ERC20-style token paid out by the rewards ledger. The deployer
receives the whole initial supply and is recorded as owner; balances only
move through transfer().
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from .accounts import ZERO_ADDRESS, create_address, mask_wallet_address, normalize_address, require_amount
from .errors import RevertError

logger = logging.getLogger(__name__)

TOKEN_UNIT = 10**18
DEFAULT_INITIAL_SUPPLY = 1_000_000 * TOKEN_UNIT


@dataclass
class Event:
    name: str
    args: Dict[str, Any]
    timestamp: int = 0
    emitter: str = ''


class RewardToken:
    """In-memory ERC20 balance book"""

    def __init__(self, name: str = "Reward Token", symbol: str = "RWT",
                 initial_supply: int = DEFAULT_INITIAL_SUPPLY, *, sender: str, chain):
        require_amount(initial_supply, "Invalid supply")
        if initial_supply < 0:
            raise RevertError("Invalid supply")

        self.name = name
        self.symbol = symbol
        self.decimals = 18
        self.chain = chain
        self.owner = normalize_address(sender)
        self.address = create_address(self.owner, chain.next_nonce(self.owner))

        self._balances: Dict[str, int] = {self.owner: int(initial_supply)}
        self._total_supply = int(initial_supply)
        self.events: List[Event] = []

        self._emit("Transfer", {"from": ZERO_ADDRESS, "to": self.owner, "value": self._total_supply})
        logger.info(f"🪙 {symbol} deployed at {self.address} with supply {initial_supply / TOKEN_UNIT} {symbol}")

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(normalize_address(account), 0)

    def transfer(self, to: str, amount: int, *, sender: str) -> bool:
        """Transfer signed by sender. Opens a new block on the chain, even when it reverts."""
        self.chain.mine()
        self.transfer_in_block(normalize_address(sender), normalize_address(to), amount)
        return True

    def _check_transfer(self, sender: str, to: str, amount: int) -> None:
        if to == ZERO_ADDRESS:
            raise RevertError("ERC20: transfer to the zero address")
        require_amount(amount, "ERC20: invalid amount")
        if amount < 0:
            raise RevertError("ERC20: invalid amount")
        if self._balances.get(sender, 0) < amount:
            raise RevertError("ERC20: transfer amount exceeds balance")

    def transfer_in_block(self, sender: str, to: str, amount: int) -> None:
        """
        Move amount from sender to to inside a transaction that already opened
        its block. Contracts holding a balance pay out through this; it never
        mines.
        """
        sender = normalize_address(sender)
        to = normalize_address(to)
        self._check_transfer(sender, to, amount)
        self._balances[sender] = self._balances.get(sender, 0) - amount
        self._balances[to] = self._balances.get(to, 0) + amount

        self._emit("Transfer", {"from": sender, "to": to, "value": amount})
        logger.debug(f"💸 {amount / TOKEN_UNIT} {self.symbol} {mask_wallet_address(sender)} -> {mask_wallet_address(to)}")

    def _emit(self, name: str, args: Dict[str, Any]) -> None:
        self.events.append(Event(name=name, args=args, timestamp=self.chain.now(), emitter=self.address))
