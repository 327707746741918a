import logging
from dataclasses import dataclass

from solders.keypair import Keypair

from bridger.models import BridgeConfig, Chain
from bridger.providers import AsyncRPCClient
from bridger.settlement import check_funds, first_is_sender


@dataclass
class TransferResult:
    sender: str
    receiver: str
    signature: str
    created_token_account: bool = False


class SolanaTransfer:
    """Transferência direta de USDC entre duas contas Solana"""

    def __init__(
        self,
        config: BridgeConfig,
        account1: Keypair,
        account2: Keypair,
        rpc_client=None,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.account1 = account1
        self.account2 = account2
        self.token = config.solana_token
        self.rpc_client = rpc_client or AsyncRPCClient(
            rpc_url=config.solana_rpc_url, is_dryrun=config.is_dryrun
        )

    async def run(self) -> TransferResult:
        native = Chain.SOLANA.info
        for name, account in (("Account1", self.account1), ("Account2", self.account2)):
            lamports = await self.rpc_client.get_lamports(account.pubkey())
            self.logger.info(f"{name} public key: {account.pubkey()}")
            self.logger.info(
                f"{name} saldo {native.native_symbol}: "
                f"{lamports / 10**native.native_decimals} {native.native_symbol}"
            )

        balance1 = await self.rpc_client.get_token_balance(self.account1.pubkey(), self.token)
        balance2 = await self.rpc_client.get_token_balance(self.account2.pubkey(), self.token)
        self.logger.info(f"Account1 saldo USDC: {balance1}")
        self.logger.info(f"Account2 saldo USDC: {balance2}")

        if first_is_sender(balance1, balance2):
            sender, receiver, sender_balance = self.account1, self.account2, balance1
        else:
            sender, receiver, sender_balance = self.account2, self.account1, balance2

        check_funds(str(sender.pubkey()), sender_balance, self.config.amount)

        self.logger.info("Verificando a token account do destinatário...")
        created = False
        if not await self.rpc_client.token_account_exists(receiver.pubkey(), self.token):
            self.logger.info("→ Criando a token account do destinatário...")
            create_ata_tx = await self.rpc_client.build_transaction(
                [
                    self.rpc_client.create_ata_instruction(
                        sender.pubkey(), receiver.pubkey(), self.token
                    )
                ],
                sender,
            )
            await self.rpc_client.send_and_confirm(create_ata_tx)
            created = True

        self.logger.info("→ Preparando transação de transferência...")
        transfer_tx = await self.rpc_client.build_transaction(
            [
                self.rpc_client.transfer_instruction(
                    sender.pubkey(), receiver.pubkey(), self.token, self.config.amount
                )
            ],
            sender,
        )
        self.logger.info("→ Enviando transação...")
        signature = await self.rpc_client.send_and_confirm(transfer_tx)

        return TransferResult(
            sender=str(sender.pubkey()),
            receiver=str(receiver.pubkey()),
            signature=str(signature),
            created_token_account=created,
        )

    async def close(self):
        await self.rpc_client.close()
