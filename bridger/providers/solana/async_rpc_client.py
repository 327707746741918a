import asyncio
import logging
import time
from contextlib import contextmanager

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.core import RPCException
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction, VersionedTransaction
from solders.transaction_status import TransactionConfirmationStatus
from spl.token.instructions import (
    create_associated_token_account,
    get_associated_token_address,
    transfer,
)
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.models import TransferParams

from bridger.errors import RpcError, SubmissionError
from bridger.models.tokens import Token, TokenAmount


@contextmanager
def _rpc_errors(method: str):
    try:
        yield
    except (SolanaRpcException, RPCException) as ex:
        raise RpcError(f"Erro no RPC Solana ({method}): {ex}") from ex


class AsyncRPCClient:
    def __init__(
        self,
        client=None,
        rpc_url: str | None = None,
        commitment: Commitment = Confirmed,
        is_dryrun=False,
        confirmation_timeout: float = 60.0,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        if client:
            self.client = client
        else:
            assert rpc_url, "RPC URL não definida"
            self.client = AsyncClient(rpc_url, commitment=commitment)
        self.rpc_url = rpc_url
        self.is_dryrun = is_dryrun
        self.confirmation_timeout = confirmation_timeout

    def __repr__(self):
        return f"{self.__class__.__name__}({self.rpc_url}, {self.is_dryrun=})"

    async def get_lamports(self, pubkey: Pubkey) -> int:
        with _rpc_errors("get_balance"):
            resp = await self.client.get_balance(pubkey)
        return resp.value

    async def account_exists(self, pubkey: Pubkey) -> bool:
        with _rpc_errors("get_account_info"):
            resp = await self.client.get_account_info(pubkey)
        return resp.value is not None

    def token_account_address(self, owner: Pubkey, token: Token) -> Pubkey:
        return get_associated_token_address(owner, token.pubkey)

    async def token_account_exists(self, owner: Pubkey, token: Token) -> bool:
        return await self.account_exists(self.token_account_address(owner, token))

    async def get_token_balance(self, owner: Pubkey, token: Token) -> TokenAmount:
        """Saldo da associated token account do owner. Conta inexistente vale zero."""
        ata = self.token_account_address(owner, token)
        if not await self.account_exists(ata):
            self.logger.debug(f"get_token_balance: ATA {ata} inexistente para {owner}")
            return token.zero()

        with _rpc_errors("get_token_account_balance"):
            resp = await self.client.get_token_account_balance(ata)
        return TokenAmount(raw=int(resp.value.amount), decimals=resp.value.decimals)

    async def get_latest_blockhash(self) -> Hash:
        with _rpc_errors("get_latest_blockhash"):
            latest = await self.client.get_latest_blockhash()
        return latest.value.blockhash

    def sign_transaction(
        self, tx: VersionedTransaction, keypair: Keypair
    ) -> VersionedTransaction:
        """Assina de novo a mensagem recebida, substituindo a assinatura placeholder"""
        new_tx = VersionedTransaction(message=tx.message, keypairs=[keypair])
        self.logger.debug(f"sign_transaction: signature={new_tx.signatures[0]}")
        return new_tx

    async def build_transaction(
        self, instructions: list[Instruction], payer: Keypair
    ) -> Transaction:
        blockhash = await self.get_latest_blockhash()
        return Transaction.new_signed_with_payer(
            instructions, payer.pubkey(), [payer], blockhash
        )

    def create_ata_instruction(
        self, payer: Pubkey, owner: Pubkey, token: Token
    ) -> Instruction:
        return create_associated_token_account(payer, owner, token.pubkey)

    def transfer_instruction(
        self, sender: Pubkey, receiver: Pubkey, token: Token, amount: int
    ) -> Instruction:
        return transfer(
            TransferParams(
                program_id=TOKEN_PROGRAM_ID,
                source=self.token_account_address(sender, token),
                dest=self.token_account_address(receiver, token),
                owner=sender,
                amount=amount,
            )
        )

    async def send_transaction(
        self, tx: Transaction | VersionedTransaction
    ) -> Signature:
        if self.is_dryrun:
            return Signature.new_unique()

        try:
            resp = await self.client.send_raw_transaction(bytes(tx))
        except (SolanaRpcException, RPCException) as ex:
            raise SubmissionError(f"Erro ao enviar transação: {ex}") from ex
        self.logger.debug(f"send_transaction: {resp.value=}")
        return resp.value

    async def wait_for_confirmation(self, signature: Signature) -> None:
        if self.is_dryrun:
            return

        start = time.time()
        while True:
            with _rpc_errors("get_signature_statuses"):
                result = await self.client.get_signature_statuses([signature])
            status = result.value[0]

            if status is not None:
                if status.err is not None:
                    raise SubmissionError(f"Transação falhou: {status.err}")
                if status.confirmation_status in [
                    TransactionConfirmationStatus.Confirmed,
                    TransactionConfirmationStatus.Finalized,
                ]:
                    return

            if time.time() - start > self.confirmation_timeout:
                raise SubmissionError(
                    f"Transação {signature} não foi confirmada a tempo."
                )
            await asyncio.sleep(1.0)

    async def send_and_confirm(
        self, tx: Transaction | VersionedTransaction
    ) -> Signature:
        signature = await self.send_transaction(tx)
        self.logger.info(f"✓ Transação enviada: {signature}")
        await self.wait_for_confirmation(signature)
        return signature

    async def close(self):
        await self.client.close()
