"""
Rewards Contract Service

This service interacts with a deployed Rewards smart contract: the lending
contract reports supplied balances, participants claim their epoch rewards.

Uses DEPLOYER_PRIVATE_KEY to sign all transactions.
"""

import logging
from typing import Any, Dict, List, Optional

from web3 import Web3
from web3.exceptions import ContractLogicError
from eth_account import Account

from . import config
from .accounts import mask_wallet_address

logger = logging.getLogger(__name__)


REWARDS_ABI = [
    {
        "inputs": [
            {"name": "account", "type": "address"},
            {"name": "amount", "type": "uint256"}
        ],
        "name": "supply",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [
            {"name": "account", "type": "address"},
            {"name": "amount", "type": "uint256"}
        ],
        "name": "withdraw",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "claim",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [
            {"name": "rewardPerEpoch", "type": "uint256"},
            {"name": "epochDuration", "type": "uint256"},
            {"name": "rewardDuration", "type": "uint256"}
        ],
        "name": "setParameters",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "rewardPerEpoch",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"name": "account", "type": "address"}],
        "name": "availableReward",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "getData",
        "outputs": [
            {"name": "rewardPerEpoch", "type": "uint256"},
            {"name": "epochDuration", "type": "uint256"},
            {"name": "rewardDuration", "type": "uint256"},
            {"name": "scheduleStart", "type": "uint256"},
            {"name": "currentEpoch", "type": "uint256"},
            {"name": "totalSupplied", "type": "uint256"},
            {"name": "rewardPerToken", "type": "uint256"},
            {"name": "totalClaimed", "type": "uint256"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"name": "accounts", "type": "address[]"}],
        "name": "getUserInfo",
        "outputs": [
            {"name": "supplied", "type": "uint256[]"},
            {"name": "availableRewards", "type": "uint256[]"},
            {"name": "claimed", "type": "uint256[]"},
            {"name": "lastClaimTime", "type": "uint256[]"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "rewardToken",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function"
    }
]

ERC20_BALANCE_ABI = [
    {
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    }
]

GET_DATA_FIELDS = (
    "reward_per_epoch",
    "epoch_duration",
    "reward_duration",
    "schedule_start",
    "current_epoch",
    "total_supplied",
    "reward_per_token",
    "total_claimed",
)


def revert_reason(error: Exception) -> str:
    """'execution reverted: Nothing to claim' -> 'Nothing to claim'"""
    message = getattr(error, "message", None) or str(error)
    if "execution reverted:" in message:
        message = message.split("execution reverted:", 1)[1]
    return message.strip()


class RewardsContractService:
    """Service for interacting with the Rewards smart contract"""

    def __init__(self, w3: Optional[Web3] = None, contract_address: Optional[str] = None,
                 private_key: Optional[str] = None):
        self.chain_id = config.CHAIN_ID
        self.contract_address = contract_address or config.REWARDS_CONTRACT_ADDRESS
        self.private_key = private_key or config.DEPLOYER_PRIVATE_KEY

        self.w3 = w3 or Web3(Web3.HTTPProvider(config.RPC_URL))
        self.contract = None
        self.token_contract = None
        self.account = None

        self._initialize()

    def _initialize(self):
        """Initialize Web3 connection and contract instances"""
        try:
            if not self.w3.is_connected():
                logger.error(f"❌ Failed to connect to {config.RPC_URL}")
                return

            logger.info(f"✅ Connected to chain {self.chain_id} for Rewards contract")

            if self.contract_address:
                self.contract = self.w3.eth.contract(
                    address=Web3.to_checksum_address(self.contract_address),
                    abi=REWARDS_ABI
                )
                logger.info(f"📋 Rewards contract loaded: {self.contract_address}")
            else:
                logger.warning("⚠️ REWARDS_CONTRACT_ADDRESS not set - deploy contract first")

            self.token_contract = self.w3.eth.contract(
                address=Web3.to_checksum_address(config.REWARD_TOKEN_ADDRESS),
                abi=ERC20_BALANCE_ABI
            )

            if self.private_key:
                if not self.private_key.startswith('0x'):
                    self.private_key = '0x' + self.private_key
                self.account = Account.from_key(self.private_key)
                logger.info(f"👛 Signer wallet: {self.account.address}")
            else:
                logger.error("❌ DEPLOYER_PRIVATE_KEY not configured")

        except Exception as e:
            logger.error(f"❌ Initialization error: {e}")

    def _send_transaction(self, txn_builder, gas_limit=300000) -> Dict[str, Any]:
        """Build, sign, and send a transaction"""
        try:
            if not self.account:
                return {"success": False, "error": "Signer not configured"}

            nonce = self.w3.eth.get_transaction_count(self.account.address)
            gas_price = int(self.w3.eth.gas_price * 1.2)

            txn = txn_builder.build_transaction({
                'chainId': self.chain_id,
                'from': self.account.address,
                'gas': gas_limit,
                'gasPrice': gas_price,
                'nonce': nonce,
            })

            signed_txn = self.w3.eth.account.sign_transaction(txn, self.private_key)
            tx_hash = self.w3.eth.send_raw_transaction(signed_txn.raw_transaction)
            tx_hash_hex = tx_hash.hex()

            if not tx_hash_hex.startswith('0x'):
                tx_hash_hex = '0x' + tx_hash_hex

            logger.info(f"📡 Transaction sent: {tx_hash_hex}")

            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=120)

            result = {
                "success": receipt.status == 1,
                "tx_hash": tx_hash_hex,
                "gas_used": receipt.gasUsed,
                "block_number": receipt.blockNumber,
            }
            if config.EXPLORER_URL:
                result["explorer_url"] = f"{config.EXPLORER_URL}/tx/{tx_hash_hex}"
            return result

        except ContractLogicError as e:
            reason = revert_reason(e)
            logger.error(f"❌ Transaction reverted: {reason}")
            return {"success": False, "error": reason, "reverted": True}
        except Exception as e:
            logger.error(f"❌ Transaction error: {e}")
            return {"success": False, "error": str(e)}

    def supply(self, account: str, amount: int) -> Dict[str, Any]:
        """
        Report supplied balance for a participant (lending contract only)

        Args:
            account: Participant wallet address
            amount: Amount in wei

        Returns:
            Dict with transaction result
        """
        if not self.contract:
            return {"success": False, "error": "Contract not initialized"}

        logger.info(f"📥 Supplying {amount / 10**18} for {mask_wallet_address(account)}...")

        return self._send_transaction(
            self.contract.functions.supply(Web3.to_checksum_address(account), int(amount)),
            gas_limit=200000
        )

    def withdraw(self, account: str, amount: int) -> Dict[str, Any]:
        """Lower a participant's supplied balance (lending contract only)"""
        if not self.contract:
            return {"success": False, "error": "Contract not initialized"}

        logger.info(f"📤 Withdrawing {amount / 10**18} for {mask_wallet_address(account)}...")

        return self._send_transaction(
            self.contract.functions.withdraw(Web3.to_checksum_address(account), int(amount)),
            gas_limit=200000
        )

    def claim(self) -> Dict[str, Any]:
        """Claim every reward the signer has accrued"""
        if not self.contract:
            return {"success": False, "error": "Contract not initialized"}

        logger.info(f"💰 Claiming rewards for {mask_wallet_address(self.account.address if self.account else '')}...")

        result = self._send_transaction(self.contract.functions.claim(), gas_limit=250000)

        if result["success"]:
            logger.info(f"✅ Rewards claimed - TX: {result['tx_hash']}")

        return result

    def set_parameters(self, reward_per_epoch: int, epoch_duration: int, reward_duration: int) -> Dict[str, Any]:
        """Replace the emission schedule (owner only)"""
        if not self.contract:
            return {"success": False, "error": "Contract not initialized"}

        if reward_duration <= 0 or reward_duration > epoch_duration:
            return {"success": False, "error": "Reward duration must be within the epoch"}

        logger.info(f"🔧 Setting schedule: {reward_per_epoch / 10**18} per {epoch_duration}s epoch")

        return self._send_transaction(
            self.contract.functions.setParameters(int(reward_per_epoch), int(epoch_duration), int(reward_duration)),
            gas_limit=150000
        )

    def get_reward_per_epoch(self) -> int:
        try:
            if not self.contract:
                return 0
            return self.contract.functions.rewardPerEpoch().call()
        except Exception as e:
            logger.error(f"❌ Error getting reward per epoch: {e}")
            return 0

    def available_reward(self, account: str) -> int:
        """Claimable amount in wei for account right now"""
        try:
            if not self.contract:
                return 0
            return self.contract.functions.availableReward(Web3.to_checksum_address(account)).call()
        except Exception as e:
            logger.error(f"❌ Error getting available reward: {e}")
            return 0

    def get_data(self) -> Dict[str, Any]:
        """Get schedule and totals as a dict"""
        try:
            if not self.contract:
                return {}

            data = self.contract.functions.getData().call()
            return dict(zip(GET_DATA_FIELDS, data))

        except Exception as e:
            logger.error(f"❌ Error getting contract data: {e}")
            return {}

    def get_user_info(self, accounts: List[str]) -> List[Dict[str, Any]]:
        try:
            if not self.contract:
                return []

            checksummed = [Web3.to_checksum_address(a) for a in accounts]
            supplied, available, claimed, last_claim = self.contract.functions.getUserInfo(checksummed).call()

            return [
                {
                    "account": account,
                    "supplied": supplied[i],
                    "available_reward": available[i],
                    "claimed": claimed[i],
                    "last_claim_time": last_claim[i],
                }
                for i, account in enumerate(checksummed)
            ]

        except Exception as e:
            logger.error(f"❌ Error getting user info: {e}")
            return []

    def get_pool_balance(self) -> int:
        """Reward tokens held by the contract, in wei"""
        try:
            if not self.contract or not self.token_contract:
                return 0
            return self.token_contract.functions.balanceOf(
                Web3.to_checksum_address(self.contract_address)
            ).call()
        except Exception as e:
            logger.error(f"❌ Error getting pool balance: {e}")
            return 0


_rewards_contract_service = None


def get_rewards_contract_service() -> RewardsContractService:
    """Shared service instance, built on first use"""
    global _rewards_contract_service
    if _rewards_contract_service is None:
        _rewards_contract_service = RewardsContractService()
    return _rewards_contract_service
