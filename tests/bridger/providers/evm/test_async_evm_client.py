from types import SimpleNamespace
from unittest import mock

import pytest
from eth_account import Account
from web3.exceptions import TimeExhausted, Web3Exception

from bridger.errors import RpcError, SubmissionError
from bridger.models import USDC_BASE, EvmTransactionRequest
from bridger.providers.evm.async_evm_client import AsyncEVMClient

ACCOUNT = Account.from_key("0x" + "11" * 32)
BRIDGE = "0x1231DEB6f5749EF6cE6943a275A1D3E7486F4EaE"
TX_HASH = bytes.fromhex("ab" * 32)


class FakeEth:
    def __init__(self, status=1):
        self.contract = mock.MagicMock()
        self.get_balance = mock.AsyncMock(return_value=10**18)
        self.get_transaction_count = mock.AsyncMock(return_value=7)
        self.send_raw_transaction = mock.AsyncMock(return_value=TX_HASH)
        self.wait_for_transaction_receipt = mock.AsyncMock(
            return_value={"status": status, "transactionHash": TX_HASH}
        )

    @property
    async def chain_id(self):
        return 8453

    @property
    def functions(self):
        return self.contract.return_value.functions


def _client(status=1, is_dryrun=False):
    eth = FakeEth(status)
    w3 = SimpleNamespace(eth=eth, provider=mock.AsyncMock())
    return AsyncEVMClient(ACCOUNT, w3=w3, is_dryrun=is_dryrun), eth


def _request(**overrides):
    data = {
        "to": BRIDGE.lower(),
        "from": ACCOUNT.address,
        "chainId": 8453,
        "value": "0x0",
        "data": "0xabcdef",
        "gasPrice": "0x5f5e100",
        "gasLimit": "0x3d090",
    }
    data.update(overrides)
    return EvmTransactionRequest.from_dict(data)


async def test_get_token_balance():
    client, eth = _client()
    eth.functions.balanceOf.return_value.call = mock.AsyncMock(return_value=2_500_000)

    balance = await client.get_token_balance(USDC_BASE)

    assert balance.raw == 2_500_000
    assert balance.ui_amount == 2.5
    eth.functions.balanceOf.assert_called_once_with(ACCOUNT.address)


async def test_get_allowance():
    client, eth = _client()
    eth.functions.allowance.return_value.call = mock.AsyncMock(return_value=500_000)

    assert await client.get_allowance(USDC_BASE, BRIDGE.lower()) == 500_000
    eth.functions.allowance.assert_called_once_with(ACCOUNT.address, BRIDGE)


async def test_rpc_error_is_wrapped():
    client, eth = _client()
    eth.get_balance.side_effect = Web3Exception("connection refused")
    with pytest.raises(RpcError):
        await client.get_wei()


async def test_send_transaction_request():
    client, eth = _client()

    receipt = await client.send_transaction_request(_request())

    expected_tx = {
        "chainId": 8453,
        "from": ACCOUNT.address,
        "to": BRIDGE,
        "value": 0,
        "data": "0xabcdef",
        "gasPrice": 100_000_000,
        "gas": 250_000,
        "nonce": 7,
    }
    eth.send_raw_transaction.assert_awaited_once_with(
        ACCOUNT.sign_transaction(expected_tx).raw_transaction
    )
    eth.wait_for_transaction_receipt.assert_awaited_once_with(TX_HASH, timeout=120.0)
    assert receipt["status"] == 1


async def test_failed_receipt_raises():
    client, _ = _client(status=0)
    with pytest.raises(SubmissionError):
        await client.send_transaction_request(_request())


async def test_receipt_timeout_raises():
    client, eth = _client()
    eth.wait_for_transaction_receipt.side_effect = TimeExhausted("timeout")
    with pytest.raises(SubmissionError):
        await client.send_transaction_request(_request())


async def test_dryrun_does_not_broadcast():
    client, eth = _client(is_dryrun=True)

    receipt = await client.send_transaction_request(_request())

    assert receipt["status"] == 1
    eth.send_raw_transaction.assert_not_called()
    eth.wait_for_transaction_receipt.assert_not_called()


async def test_approve_waits_for_receipt():
    client, eth = _client()
    build = mock.AsyncMock(
        return_value={
            "from": ACCOUNT.address,
            "to": USDC_BASE.address,
            "data": "0x095ea7b3",
            "value": 0,
            "gas": 60_000,
            "gasPrice": 100_000_000,
            "nonce": 7,
            "chainId": 8453,
        }
    )
    eth.functions.approve.return_value.build_transaction = build

    receipt = await client.approve(USDC_BASE, BRIDGE, 2_000_000)

    eth.functions.approve.assert_called_once_with(BRIDGE, 2_000_000)
    build.assert_awaited_once_with({"from": ACCOUNT.address, "nonce": 7, "chainId": 8453})
    eth.send_raw_transaction.assert_awaited_once()
    assert receipt["transactionHash"] == TX_HASH


async def test_close_disconnects_provider():
    client, _ = _client()
    await client.close()
    client.w3.provider.disconnect.assert_awaited_once()
