import pytest
from eth_account import Account

from epoch_rewards import Chain, RewardToken, Rewards, TOKEN_UNIT

GENESIS = 1_700_000_000
WEEK = 86400 * 7
REWARD_PER_EPOCH = 10000 * TOKEN_UNIT


@pytest.fixture
def chain():
    return Chain(timestamp=GENESIS)


@pytest.fixture
def owner():
    return Account.create().address


@pytest.fixture
def accounts():
    return [Account.create().address for _ in range(4)]


@pytest.fixture
def token(chain, owner):
    return RewardToken(sender=owner, chain=chain)


@pytest.fixture
def rewards(chain, owner, token):
    # the owner doubles as the lending contract, as on a local test node
    return Rewards(REWARD_PER_EPOCH, WEEK, WEEK, owner, token, sender=owner, chain=chain)


@pytest.fixture
def funded_rewards(rewards, token, owner):
    token.transfer(rewards.address, token.balance_of(owner), sender=owner)
    return rewards
