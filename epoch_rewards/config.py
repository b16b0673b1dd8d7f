"""
Rewards Configuration
"""
import os

# Network configuration
RPC_URL = os.getenv('RPC_URL', 'http://127.0.0.1:8545')
CHAIN_ID = int(os.getenv('CHAIN_ID', 31337))
EXPLORER_URL = os.getenv('EXPLORER_URL', '').rstrip('/')

# Contracts
LENDING_CONTRACT_ADDRESS = os.getenv('LENDING_CONTRACT_ADDRESS', '0x577B08faE2F7fEDD5BFeDe95E02445ed56D02e0e')
REWARD_TOKEN_ADDRESS = os.getenv('REWARD_TOKEN_ADDRESS', '0x577B08faE2F7fEDD5BFeDe95E02445ed56D02e0e')
REWARDS_CONTRACT_ADDRESS = os.getenv('REWARDS_CONTRACT_ADDRESS')
REWARDS_ARTIFACT_PATH = os.getenv('REWARDS_ARTIFACT_PATH', 'artifacts/contracts/Rewards.sol/Rewards.json')

# Signer for deployment and contract calls
DEPLOYER_PRIVATE_KEY = os.getenv('DEPLOYER_PRIVATE_KEY')

WEEK = 86400 * 7

# ============================
# Reward Schedule Settings
# ============================
REWARDS_CONFIG = {
    # Whole tokens emitted per epoch
    'REWARD_PER_EPOCH': int(os.getenv('REWARD_PER_EPOCH', 10000)),

    # Timing (seconds)
    'EPOCH_DURATION': int(os.getenv('EPOCH_DURATION', WEEK)),
    'REWARD_DURATION': int(os.getenv('REWARD_DURATION', WEEK)),

    'TOKEN_DECIMALS': 18,
}


def get_reward_per_epoch_wei():
    """Reward per epoch in the token's smallest unit"""
    return REWARDS_CONFIG['REWARD_PER_EPOCH'] * 10**REWARDS_CONFIG['TOKEN_DECIMALS']
