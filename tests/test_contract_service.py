from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from eth_account import Account
from web3.exceptions import ContractLogicError

from epoch_rewards import config
from epoch_rewards.contract_service import (
    REWARDS_ABI,
    RewardsContractService,
    get_rewards_contract_service,
    revert_reason,
)

CONTRACT_ADDRESS = Account.create().address
TX_HASH = bytes.fromhex("ab" * 32)


@pytest.fixture
def signer():
    return Account.create()


@pytest.fixture
def rewards_contract():
    return MagicMock(name="rewards_contract")


@pytest.fixture
def token_contract():
    return MagicMock(name="token_contract")


@pytest.fixture
def w3(rewards_contract, token_contract):
    w3 = MagicMock(name="w3")
    w3.is_connected.return_value = True
    w3.eth.contract.side_effect = lambda address, abi: rewards_contract if abi is REWARDS_ABI else token_contract
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.gas_price = 10**9
    w3.eth.send_raw_transaction.return_value = TX_HASH
    w3.eth.wait_for_transaction_receipt.return_value = SimpleNamespace(status=1, gasUsed=51000, blockNumber=12)
    return w3


@pytest.fixture
def service(w3, signer):
    return RewardsContractService(w3=w3, contract_address=CONTRACT_ADDRESS, private_key=signer.key.hex())


def test_initializes_contract_and_signer(service, signer, rewards_contract):
    assert service.contract is rewards_contract
    assert service.account.address == signer.address
    assert service.private_key.startswith('0x')


def test_not_connected_leaves_contract_unset(w3, signer):
    w3.is_connected.return_value = False
    service = RewardsContractService(w3=w3, contract_address=CONTRACT_ADDRESS, private_key=signer.key.hex())

    assert service.contract is None
    assert service.claim() == {"success": False, "error": "Contract not initialized"}
    assert service.get_data() == {}


def test_missing_address_leaves_contract_unset(w3, signer, monkeypatch):
    monkeypatch.setattr(config, "REWARDS_CONTRACT_ADDRESS", None)
    service = RewardsContractService(w3=w3, private_key=signer.key.hex())

    assert service.supply(CONTRACT_ADDRESS, 1) == {"success": False, "error": "Contract not initialized"}


def test_claim_sends_signed_transaction(service, w3, signer, rewards_contract):
    builder = rewards_contract.functions.claim.return_value
    builder.build_transaction.return_value = {"data": "0x4e71d92d"}

    result = service.claim()

    assert result["success"] is True
    assert result["tx_hash"] == "0x" + "ab" * 32
    assert result["gas_used"] == 51000
    assert result["block_number"] == 12

    params = builder.build_transaction.call_args[0][0]
    assert params["nonce"] == 7
    assert params["chainId"] == config.CHAIN_ID
    assert params["from"] == signer.address
    assert params["gasPrice"] == int(10**9 * 1.2)
    w3.eth.account.sign_transaction.assert_called_once_with({"data": "0x4e71d92d"}, service.private_key)


def test_supply_and_withdraw_checksum_accounts(service, rewards_contract):
    account = Account.create().address

    assert service.supply(account.lower(), 100 * 10**18)["success"] is True
    rewards_contract.functions.supply.assert_called_once_with(account, 100 * 10**18)

    assert service.withdraw(account.lower(), 10**18)["success"] is True
    rewards_contract.functions.withdraw.assert_called_once_with(account, 10**18)


def test_revert_reason_is_reported(service, rewards_contract):
    builder = rewards_contract.functions.claim.return_value
    builder.build_transaction.side_effect = ContractLogicError("execution reverted: Nothing to claim")

    result = service.claim()

    assert result == {"success": False, "error": "Nothing to claim", "reverted": True}


def test_failed_receipt_is_not_success(service, w3):
    w3.eth.wait_for_transaction_receipt.return_value = SimpleNamespace(status=0, gasUsed=21000, blockNumber=13)

    result = service.claim()

    assert result["success"] is False
    assert result["block_number"] == 13


def test_transport_errors_are_reported(service, w3):
    w3.eth.send_raw_transaction.side_effect = ConnectionError("node down")

    assert service.claim() == {"success": False, "error": "node down"}


def test_set_parameters_validates_durations(service, rewards_contract):
    result = service.set_parameters(10**18, 86400, 86401)

    assert result["success"] is False
    rewards_contract.functions.setParameters.assert_not_called()

    assert service.set_parameters(5000 * 10**18, 604800, 604800)["success"] is True
    rewards_contract.functions.setParameters.assert_called_once_with(5000 * 10**18, 604800, 604800)


def test_get_data_names_fields(service, rewards_contract):
    rewards_contract.functions.getData.return_value.call.return_value = (
        10000 * 10**18, 604800, 604800, 1700000000, 2, 400 * 10**18, 25 * 10**18, 5000 * 10**18
    )

    data = service.get_data()

    assert data["reward_per_epoch"] == 10000 * 10**18
    assert data["current_epoch"] == 2
    assert data["total_claimed"] == 5000 * 10**18
    assert len(data) == 8


def test_get_user_info_zips_columns(service, rewards_contract):
    first, second = Account.create().address, Account.create().address
    rewards_contract.functions.getUserInfo.return_value.call.return_value = ([1, 2], [3, 4], [5, 6], [1700000000, 0])

    info = service.get_user_info([first, second])

    assert info == [
        {"account": first, "supplied": 1, "available_reward": 3, "claimed": 5, "last_claim_time": 1700000000},
        {"account": second, "supplied": 2, "available_reward": 4, "claimed": 6, "last_claim_time": 0},
    ]


def test_views_fall_back_on_errors(service, rewards_contract, token_contract):
    rewards_contract.functions.rewardPerEpoch.return_value.call.side_effect = ValueError("boom")
    rewards_contract.functions.availableReward.return_value.call.side_effect = ValueError("boom")
    rewards_contract.functions.getUserInfo.return_value.call.side_effect = ValueError("boom")
    token_contract.functions.balanceOf.return_value.call.side_effect = ValueError("boom")

    assert service.get_reward_per_epoch() == 0
    assert service.available_reward(CONTRACT_ADDRESS) == 0
    assert service.get_user_info([CONTRACT_ADDRESS]) == []
    assert service.get_pool_balance() == 0


def test_views_return_values(service, rewards_contract, token_contract):
    rewards_contract.functions.rewardPerEpoch.return_value.call.return_value = 10000 * 10**18
    rewards_contract.functions.availableReward.return_value.call.return_value = 42
    token_contract.functions.balanceOf.return_value.call.return_value = 99

    assert service.get_reward_per_epoch() == 10000 * 10**18
    assert service.available_reward(CONTRACT_ADDRESS) == 42
    assert service.get_pool_balance() == 99
    token_contract.functions.balanceOf.assert_called_once_with(CONTRACT_ADDRESS)


def test_revert_reason():
    assert revert_reason(ValueError("execution reverted: Nothing to claim")) == "Nothing to claim"
    assert revert_reason(ValueError("out of gas")) == "out of gas"


def test_shared_service_is_built_once(monkeypatch):
    built = []
    monkeypatch.setattr("epoch_rewards.contract_service._rewards_contract_service", None)
    monkeypatch.setattr("epoch_rewards.contract_service.RewardsContractService",
                        lambda: built.append(1) or object())

    first = get_rewards_contract_service()
    assert get_rewards_contract_service() is first
    assert len(built) == 1
