"""
Rewards Ledger

Distributes a fixed reward budget per epoch among participants in
proportion to the balance they have supplied to the lending contract.

- The lending contract reports balances through supply() and withdraw();
  no tokens move on those calls.
- Each epoch emits reward_per_epoch tokens linearly over its first
  reward_duration seconds.
- Participants claim() their accrued share, paid from the ledger's own
  reward token balance.

Amounts are integers in the token's smallest unit.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .accounts import ZERO_ADDRESS, create_address, mask_wallet_address, normalize_address, require_amount
from .errors import RevertError
from .token import TOKEN_UNIT, Event

logger = logging.getLogger(__name__)

PRECISION = 10**18


@dataclass
class UserState:
    supplied: int = 0
    reward_per_token_paid: int = 0
    accrued: int = 0
    claimed: int = 0
    last_claim_time: int = 0


def _validate_schedule(reward_per_epoch: int, epoch_duration: int, reward_duration: int) -> None:
    for value in (reward_per_epoch, epoch_duration, reward_duration):
        require_amount(value, "Invalid schedule")
    if reward_per_epoch <= 0 or epoch_duration <= 0:
        raise RevertError("Invalid schedule")
    if reward_duration <= 0 or reward_duration > epoch_duration:
        raise RevertError("Invalid schedule")


class Rewards:
    """Epoch based reward distribution for lending participants"""

    def __init__(self, reward_per_epoch: int, epoch_duration: int, reward_duration: int,
                 lending_contract: str, reward_token, *, sender: str, chain):
        _validate_schedule(reward_per_epoch, epoch_duration, reward_duration)

        self.lending_contract = normalize_address(lending_contract)
        if self.lending_contract == ZERO_ADDRESS or normalize_address(reward_token.address) == ZERO_ADDRESS:
            raise RevertError("Invalid address")

        self.chain = chain
        self.owner = normalize_address(sender)
        self.reward_token = reward_token
        self.address = create_address(self.owner, chain.next_nonce(self.owner))

        self._reward_per_epoch = int(reward_per_epoch)
        self.epoch_duration = int(epoch_duration)
        self.reward_duration = int(reward_duration)
        self.schedule_start = chain.now()

        self.reward_per_token_stored = 0
        self.last_update_time = self.schedule_start
        self.total_supplied = 0
        self.total_claimed = 0

        self._users: Dict[str, UserState] = {}
        self.events: List[Event] = []

        logger.info(f"💰 Rewards deployed at {self.address}: {reward_per_epoch / TOKEN_UNIT} per "
                    f"{epoch_duration}s epoch, emitted over {reward_duration}s")

    @property
    def reward_per_epoch(self) -> int:
        return self._reward_per_epoch

    # ----------------------------------------------------------------------
    # Emission schedule
    # ----------------------------------------------------------------------

    def _emitted_until(self, timestamp: int) -> int:
        """Cumulative emission from schedule_start up to timestamp"""
        elapsed = max(0, timestamp - self.schedule_start)
        full_epochs, offset = divmod(elapsed, self.epoch_duration)
        partial = min(offset, self.reward_duration) * self._reward_per_epoch // self.reward_duration
        return full_epochs * self._reward_per_epoch + partial

    def _reward_per_token(self, now: int) -> int:
        if self.total_supplied == 0:
            return self.reward_per_token_stored
        emitted = self._emitted_until(now) - self._emitted_until(self.last_update_time)
        return self.reward_per_token_stored + emitted * PRECISION // self.total_supplied

    def _earned(self, user: UserState, reward_per_token: int) -> int:
        pending = user.supplied * (reward_per_token - user.reward_per_token_paid) // PRECISION
        return user.accrued + pending

    def _settle(self, now: int, account: Optional[str] = None) -> Optional[UserState]:
        """Fold emission up to now into the accumulator and into account's accrual"""
        reward_per_token = self._reward_per_token(now)
        self.reward_per_token_stored = reward_per_token
        self.last_update_time = now

        if account is None:
            return None

        user = self._users.setdefault(account, UserState())
        user.accrued = self._earned(user, reward_per_token)
        user.reward_per_token_paid = reward_per_token
        return user

    # ----------------------------------------------------------------------
    # Transactions
    # ----------------------------------------------------------------------

    def _only_lending_contract(self, sender: str) -> None:
        if normalize_address(sender) != self.lending_contract:
            raise RevertError("Caller is not the lending contract")

    def _only_owner(self, sender: str) -> None:
        if normalize_address(sender) != self.owner:
            raise RevertError("Caller is not the owner")

    def supply(self, account: str, amount: int, *, sender: str) -> None:
        """Record amount more supplied balance for account"""
        now = self.chain.mine()
        self._only_lending_contract(sender)
        account = normalize_address(account)
        if account == ZERO_ADDRESS:
            raise RevertError("Invalid address")
        require_amount(amount)
        if amount <= 0:
            raise RevertError("Amount must be > 0")

        user = self._settle(now, account)
        user.supplied += amount
        self.total_supplied += amount

        self._emit("Supply", {"account": account, "amount": amount, "timestamp": now})
        logger.info(f"📥 Supply {amount / TOKEN_UNIT} for {mask_wallet_address(account)} "
                    f"(total {self.total_supplied / TOKEN_UNIT})")

    def withdraw(self, account: str, amount: int, *, sender: str) -> None:
        """Lower account's supplied balance. Rewards accrued so far stay claimable."""
        now = self.chain.mine()
        self._only_lending_contract(sender)
        account = normalize_address(account)
        require_amount(amount)
        if amount <= 0:
            raise RevertError("Amount must be > 0")
        if self._users.get(account, UserState()).supplied < amount:
            raise RevertError("Insufficient supplied balance")

        user = self._settle(now, account)
        user.supplied -= amount
        self.total_supplied -= amount

        self._emit("Withdraw", {"account": account, "amount": amount, "timestamp": now})
        logger.info(f"📤 Withdraw {amount / TOKEN_UNIT} for {mask_wallet_address(account)} "
                    f"(total {self.total_supplied / TOKEN_UNIT})")

    def claim(self, *, sender: str) -> int:
        """Pay out everything sender has accrued and return the amount"""
        now = self.chain.mine()
        account = normalize_address(sender)

        reward = self.available_reward(account)
        if reward == 0:
            raise RevertError("Nothing to claim")
        if self.reward_token.balance_of(self.address) < reward:
            raise RevertError("Insufficient reward balance")

        user = self._settle(now, account)
        user.accrued = 0
        user.claimed += reward
        user.last_claim_time = now
        self.total_claimed += reward

        self.reward_token.transfer_in_block(self.address, account, reward)

        self._emit("Claim", {"account": account, "amount": reward, "timestamp": now})
        logger.info(f"✅ {mask_wallet_address(account)} claimed {reward / TOKEN_UNIT} {self.reward_token.symbol}")
        return reward

    def set_parameters(self, reward_per_epoch: int, epoch_duration: int, reward_duration: int,
                       *, sender: str) -> None:
        """Replace the schedule. The new schedule's first epoch starts now."""
        now = self.chain.mine()
        self._only_owner(sender)
        _validate_schedule(reward_per_epoch, epoch_duration, reward_duration)

        self._settle(now)

        self._reward_per_epoch = int(reward_per_epoch)
        self.epoch_duration = int(epoch_duration)
        self.reward_duration = int(reward_duration)
        self.schedule_start = now

        self._emit("ParametersUpdated", {
            "rewardPerEpoch": self._reward_per_epoch,
            "epochDuration": self.epoch_duration,
            "rewardDuration": self.reward_duration,
        })
        logger.info(f"🔧 Schedule updated: {reward_per_epoch / TOKEN_UNIT} per {epoch_duration}s epoch, "
                    f"emitted over {reward_duration}s")

    # ----------------------------------------------------------------------
    # Views
    # ----------------------------------------------------------------------

    def available_reward(self, account: str) -> int:
        user = self._users.get(normalize_address(account))
        if user is None:
            return 0
        return self._earned(user, self._reward_per_token(self.chain.now()))

    def get_user_info(self, accounts: List[str]) -> List[Dict[str, Any]]:
        info = []
        for account in accounts:
            account = normalize_address(account)
            user = self._users.get(account, UserState())
            info.append({
                "account": account,
                "supplied": user.supplied,
                "available_reward": self.available_reward(account),
                "claimed": user.claimed,
                "last_claim_time": user.last_claim_time,
            })
        return info

    def get_data(self) -> Dict[str, Any]:
        now = self.chain.now()
        current_epoch = max(0, now - self.schedule_start) // self.epoch_duration
        return {
            "reward_per_epoch": self._reward_per_epoch,
            "epoch_duration": self.epoch_duration,
            "reward_duration": self.reward_duration,
            "schedule_start": self.schedule_start,
            "current_epoch": current_epoch,
            "epoch_end": self.schedule_start + (current_epoch + 1) * self.epoch_duration,
            "total_supplied": self.total_supplied,
            "reward_per_token": self._reward_per_token(now),
            "total_claimed": self.total_claimed,
            "pool_balance": self.reward_token.balance_of(self.address),
            "lending_contract": self.lending_contract,
            "reward_token": self.reward_token.address,
            "owner": self.owner,
        }

    def _emit(self, name: str, args: Dict[str, Any]) -> None:
        self.events.append(Event(name=name, args=args, timestamp=self.chain.now(), emitter=self.address))
