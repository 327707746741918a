from unittest.mock import AsyncMock

import pytest
from solders.keypair import Keypair
from solders.signature import Signature

from bridger.errors import InsufficientFunds
from bridger.models import USDC_SOLANA, BridgeConfig, TokenAmount
from bridger.providers import AsyncRPCClient
from bridger.transfer import SolanaTransfer


@pytest.fixture
def accounts():
    return Keypair(), Keypair()


def _rpc_client(balances: dict, receiver_has_ata: bool):
    rpc_client = AsyncMock(spec=AsyncRPCClient)
    rpc_client.get_lamports.return_value = 1_000_000_000

    async def get_token_balance(owner, token):
        return TokenAmount(raw=balances[owner], decimals=6)

    rpc_client.get_token_balance.side_effect = get_token_balance
    rpc_client.token_account_exists.return_value = receiver_has_ata
    rpc_client.create_ata_instruction.return_value = "create_ata_ix"
    rpc_client.transfer_instruction.return_value = "transfer_ix"

    async def build_transaction(instructions, payer):
        return ("tx", tuple(instructions), payer)

    rpc_client.build_transaction.side_effect = build_transaction
    return rpc_client


async def test_transfer_creates_token_account_first(accounts):
    account1, account2 = accounts
    rpc_client = _rpc_client(
        {account1.pubkey(): 5_000_000, account2.pubkey(): 0}, receiver_has_ata=False
    )
    signatures = [Signature.new_unique(), Signature.new_unique()]
    rpc_client.send_and_confirm.side_effect = signatures

    svc = SolanaTransfer(BridgeConfig(), account1, account2, rpc_client=rpc_client)
    result = await svc.run()

    rpc_client.token_account_exists.assert_awaited_once_with(
        account2.pubkey(), USDC_SOLANA
    )
    rpc_client.create_ata_instruction.assert_called_once_with(
        account1.pubkey(), account2.pubkey(), USDC_SOLANA
    )
    rpc_client.transfer_instruction.assert_called_once_with(
        account1.pubkey(), account2.pubkey(), USDC_SOLANA, 1_000_000
    )
    sent = [call.args[0] for call in rpc_client.send_and_confirm.await_args_list]
    assert sent == [
        ("tx", ("create_ata_ix",), account1),
        ("tx", ("transfer_ix",), account1),
    ]
    assert result.sender == str(account1.pubkey())
    assert result.receiver == str(account2.pubkey())
    assert result.signature == str(signatures[1])
    assert result.created_token_account


async def test_transfer_skips_existing_token_account(accounts):
    account1, account2 = accounts
    rpc_client = _rpc_client(
        {account1.pubkey(): 0, account2.pubkey(): 3_000_000}, receiver_has_ata=True
    )
    signature = Signature.new_unique()
    rpc_client.send_and_confirm.return_value = signature

    svc = SolanaTransfer(BridgeConfig(), account1, account2, rpc_client=rpc_client)
    result = await svc.run()

    rpc_client.create_ata_instruction.assert_not_called()
    rpc_client.send_and_confirm.assert_awaited_once_with(
        ("tx", ("transfer_ix",), account2)
    )
    assert result.sender == str(account2.pubkey())
    assert result.signature == str(signature)
    assert not result.created_token_account


async def test_transfer_tie_second_account_sends(accounts):
    account1, account2 = accounts
    rpc_client = _rpc_client(
        {account1.pubkey(): 2_000_000, account2.pubkey(): 2_000_000},
        receiver_has_ata=True,
    )
    rpc_client.send_and_confirm.return_value = Signature.new_unique()

    svc = SolanaTransfer(BridgeConfig(), account1, account2, rpc_client=rpc_client)
    result = await svc.run()

    assert result.sender == str(account2.pubkey())
    assert result.receiver == str(account1.pubkey())


async def test_transfer_insufficient_funds(accounts):
    account1, account2 = accounts
    rpc_client = _rpc_client(
        {account1.pubkey(): 900_000, account2.pubkey(): 100_000}, receiver_has_ata=False
    )

    svc = SolanaTransfer(BridgeConfig(), account1, account2, rpc_client=rpc_client)
    with pytest.raises(InsufficientFunds) as ex:
        await svc.run()

    assert ex.value.sender == str(account1.pubkey())
    rpc_client.build_transaction.assert_not_awaited()
    rpc_client.send_and_confirm.assert_not_awaited()
