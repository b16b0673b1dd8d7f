"""
Rewards Contract Deployment Script

Deploys the compiled Rewards contract with its five constructor
parameters (reward per epoch, epoch duration, reward duration, lending
contract, reward token) using DEPLOYER_PRIVATE_KEY as the owner.

The contract is compiled by Hardhat; REWARDS_ARTIFACT_PATH points at the
artifact JSON holding its abi and bytecode.
"""

import os
import sys
import json
import logging
from typing import Any, Dict, Optional

from web3 import Web3
from eth_account import Account

from . import config

logger = logging.getLogger(__name__)


def default_settings() -> Dict[str, Any]:
    """Constructor values from configuration"""
    return {
        "reward_per_epoch": config.get_reward_per_epoch_wei(),
        "epoch_duration": config.REWARDS_CONFIG['EPOCH_DURATION'],
        "reward_duration": config.REWARDS_CONFIG['REWARD_DURATION'],
        "lending_contract": config.LENDING_CONTRACT_ADDRESS,
        "reward_token": config.REWARD_TOKEN_ADDRESS,
    }


def constructor_args(settings: Dict[str, Any]) -> tuple:
    if settings["reward_duration"] > settings["epoch_duration"]:
        raise ValueError("Reward duration cannot exceed epoch duration")

    return (
        int(settings["reward_per_epoch"]),
        int(settings["epoch_duration"]),
        int(settings["reward_duration"]),
        Web3.to_checksum_address(settings["lending_contract"]),
        Web3.to_checksum_address(settings["reward_token"]),
    )


def load_artifact(path: str) -> Dict[str, Any]:
    """Read abi and bytecode from a Hardhat artifact"""
    with open(path, 'r') as f:
        artifact = json.load(f)

    bytecode = artifact.get("bytecode")
    if not artifact.get("abi") or not bytecode or bytecode == "0x":
        raise ValueError(f"Artifact {path} has no abi or bytecode")

    return {"abi": artifact["abi"], "bytecode": bytecode}


def deploy_contract(w3: Optional[Web3] = None, private_key: Optional[str] = None,
                    settings: Optional[Dict[str, Any]] = None,
                    artifact_path: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Deploy the Rewards contract and return the deployment info"""
    private_key = private_key or config.DEPLOYER_PRIVATE_KEY
    settings = settings or default_settings()
    artifact_path = artifact_path or config.REWARDS_ARTIFACT_PATH

    if not private_key:
        logger.error("DEPLOYER_PRIVATE_KEY not set!")
        return None

    w3 = w3 or Web3(Web3.HTTPProvider(config.RPC_URL))

    if not w3.is_connected():
        logger.error(f"Failed to connect to {config.RPC_URL}")
        return None

    logger.info(f"Connected to network (Chain ID: {config.CHAIN_ID})")

    if not private_key.startswith('0x'):
        private_key = '0x' + private_key
    account = Account.from_key(private_key)

    logger.info(f"Deploying from: {account.address}")

    try:
        compiled = load_artifact(artifact_path)
        args = constructor_args(settings)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot prepare deployment: {e}")
        return None

    contract = w3.eth.contract(
        abi=compiled["abi"],
        bytecode=compiled["bytecode"]
    )

    logger.info("Building deployment transaction...")

    try:
        nonce = w3.eth.get_transaction_count(account.address)
        gas_price = int(w3.eth.gas_price * 1.2)

        constructor_txn = contract.constructor(*args).build_transaction({
            'chainId': config.CHAIN_ID,
            'from': account.address,
            'gas': 3000000,
            'gasPrice': gas_price,
            'nonce': nonce,
        })

        logger.info("Signing transaction...")
        signed_txn = w3.eth.account.sign_transaction(constructor_txn, private_key)

        logger.info("Sending deployment transaction...")
        tx_hash = w3.eth.send_raw_transaction(signed_txn.raw_transaction)
        tx_hash_hex = tx_hash.hex()

        if not tx_hash_hex.startswith('0x'):
            tx_hash_hex = '0x' + tx_hash_hex

        logger.info(f"Transaction hash: {tx_hash_hex}")

        logger.info("Waiting for confirmation...")
        receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=300)
    except Exception as e:
        logger.error(f"❌ Deployment transaction error: {e}")
        return None

    if receipt.status != 1:
        logger.error("Deployment failed!")
        logger.error(f"Transaction: {tx_hash_hex}")
        logger.error(f"Gas used: {receipt.gasUsed}")
        return None

    contract_address = receipt.contractAddress
    logger.info(f"Rewarding contract deployed to {contract_address}")
    logger.info(f"Gas used: {receipt.gasUsed}")
    logger.info(f"Block: {receipt.blockNumber}")

    deployment_info = {
        "contract_address": contract_address,
        "tx_hash": tx_hash_hex,
        "owner": account.address,
        "reward_per_epoch": str(args[0]),
        "epoch_duration": args[1],
        "reward_duration": args[2],
        "lending_contract": args[3],
        "reward_token": args[4],
        "chain_id": config.CHAIN_ID,
        "block_number": receipt.blockNumber,
        "gas_used": receipt.gasUsed,
    }

    output_path = os.path.join(os.path.dirname(os.path.abspath(artifact_path)), 'deployment_info.json')
    with open(output_path, 'w') as f:
        json.dump(deployment_info, f, indent=2)

    logger.info(f"Deployment info saved to: {output_path}")

    return deployment_info


def main() -> int:
    logging.basicConfig(level=logging.INFO)

    settings = default_settings()
    logger.info("=" * 60)
    logger.info("Rewards Contract Deployment")
    logger.info("=" * 60)
    logger.info(f"RPC: {config.RPC_URL} (Chain ID: {config.CHAIN_ID})")
    logger.info(f"Reward per epoch: {settings['reward_per_epoch'] / 10**18}")
    logger.info(f"Epoch duration: {settings['epoch_duration']}s, reward duration: {settings['reward_duration']}s")
    logger.info(f"Lending contract: {settings['lending_contract']}")
    logger.info(f"Reward token: {settings['reward_token']}")
    logger.info("=" * 60)

    result = deploy_contract(settings=settings)

    if not result:
        logger.error("Deployment failed.")
        return 1

    logger.info("\nSet environment variable:")
    logger.info(f"REWARDS_CONTRACT_ADDRESS={result['contract_address']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
