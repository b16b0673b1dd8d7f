"""
Weekly rewards scenario

Replays the lifecycle of a freshly deployed Rewards ledger on a simulated
chain: the owner funds the pool with its whole token balance, every
participant supplies the same amount, then everyone claims right away and
again after each week. One extra account never supplies and must be
refused with "Nothing to claim".
"""

import sys
import logging
import argparse
from typing import Any, Dict, List, Optional

from eth_account import Account

from .accounts import mask_wallet_address
from .chain import Chain
from .config import WEEK
from .errors import RevertError
from .ledger import Rewards
from .token import TOKEN_UNIT, RewardToken

logger = logging.getLogger(__name__)

REWARD_PER_EPOCH = 10000 * TOKEN_UNIT
SUPPLY_AMOUNT = 100 * TOKEN_UNIT


def _claim_round(label: str, rewards: Rewards, token: RewardToken,
                 participants: List[str], idle: str) -> Dict[str, Any]:
    claimed = {}
    for account in participants:
        claimed[account] = rewards.claim(sender=account)

    idle_error = None
    try:
        rewards.claim(sender=idle)
    except RevertError as e:
        idle_error = e.reason

    balances = {account: token.balance_of(account) for account in participants + [idle]}

    logger.info(f"📊 {label}")
    for account, balance in balances.items():
        logger.info(f"   {mask_wallet_address(account)}: {balance}")
    if idle_error:
        logger.info(f"   {mask_wallet_address(idle)} refused: {idle_error}")

    return {
        "round": label,
        "timestamp": rewards.chain.now(),
        "claimed": claimed,
        "balances": balances,
        "idle_error": idle_error,
        "pool_balance": token.balance_of(rewards.address),
    }


def run_weekly_scenario(weeks: int = 3, participants: int = 4, supply_amount: int = SUPPLY_AMOUNT,
                        chain: Optional[Chain] = None) -> Dict[str, Any]:
    """Deploy, fund, supply and claim week after week. Returns every round."""
    if participants < 1:
        raise ValueError("At least one participant is required")

    chain = chain or Chain(block_time=1)
    accounts = [Account.create().address for _ in range(participants + 1)]
    owner = accounts[0]
    suppliers, idle = accounts[:participants], accounts[participants]

    token = RewardToken(sender=owner, chain=chain)
    rewards = Rewards(REWARD_PER_EPOCH, WEEK, WEEK, owner, token, sender=owner, chain=chain)

    funded = token.balance_of(owner)
    token.transfer(rewards.address, funded, sender=owner)

    for account in suppliers:
        rewards.supply(account, supply_amount, sender=owner)

    rounds = [_claim_round("Claim now", rewards, token, suppliers, idle)]
    for week in range(1, weeks + 1):
        chain.increase(WEEK)
        label = "Claim after week" if week == 1 else f"Claim after {week} weeks"
        rounds.append(_claim_round(label, rewards, token, suppliers, idle))

    data = rewards.get_data()
    logger.info(f"📋 Data: {data}")

    return {
        "funded": funded,
        "participants": suppliers,
        "idle": idle,
        "rounds": rounds,
        "data": data,
    }


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Replay the weekly rewards claim scenario")
    parser.add_argument("--weeks", type=int, default=3, help="weeks to advance after the first claim")
    parser.add_argument("--participants", type=int, default=4, help="accounts supplying a balance")
    parser.add_argument("--supply", type=int, default=100, help="whole tokens supplied per participant")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        result = run_weekly_scenario(
            weeks=args.weeks,
            participants=args.participants,
            supply_amount=args.supply * TOKEN_UNIT,
        )
    except (RevertError, ValueError) as e:
        logger.error(f"❌ Scenario failed: {e}")
        return 1

    total = sum(result["rounds"][-1]["balances"].values())
    logger.info(f"✅ {len(result['rounds'])} rounds, {total / TOKEN_UNIT} tokens distributed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
