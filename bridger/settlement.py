import logging
from dataclasses import dataclass
from enum import StrEnum, auto

from eth_account.signers.local import LocalAccount
from solders.errors import BincodeError, SignerError
from solders.keypair import Keypair
from solders.transaction import VersionedTransaction
from web3 import Web3

from bridger.errors import InsufficientFunds, MalformedQuote
from bridger.models import (
    BridgeConfig,
    Chain,
    EvmTransactionRequest,
    LiFiQuote,
    LiFiToken,
    SolanaTransactionRequest,
    Token,
    TokenAmount,
)
from bridger.providers import AsyncEVMClient, AsyncLiFiClient, AsyncRPCClient
from bridger.routing import ExpectedRoute, ValidatedRoute, validate


class Direction(StrEnum):
    SOLANA_TO_EVM = auto()
    EVM_TO_SOLANA = auto()


def first_is_sender(first: TokenAmount, second: TokenAmount) -> bool:
    """Só um saldo estritamente maior faz da primeira conta o remetente. Empate: a segunda envia."""
    return first.ui_amount > second.ui_amount


def check_funds(sender: str, balance: TokenAmount, amount: int) -> None:
    if balance.raw < amount:
        raise InsufficientFunds(sender, balance.raw, amount)


@dataclass
class Balances:
    lamports: int
    wei: int
    solana_token: TokenAmount
    evm_token: TokenAmount


@dataclass
class SettlementResult:
    direction: Direction
    signature: str
    approval: str | None = None


class BridgeSettlement:
    """Move USDC entre a conta Solana e a conta EVM passando pela LI.FI"""

    def __init__(
        self,
        config: BridgeConfig,
        keypair: Keypair,
        evm_account: LocalAccount,
        rpc_client=None,
        evm_client=None,
        lifi_client=None,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config
        self.keypair = keypair

        self.rpc_client = rpc_client or AsyncRPCClient(
            rpc_url=config.solana_rpc_url, is_dryrun=config.is_dryrun
        )
        self.evm_client = evm_client or AsyncEVMClient(
            evm_account, rpc_url=config.evm_rpc_url, is_dryrun=config.is_dryrun
        )
        self.lifi_client = lifi_client or AsyncLiFiClient(
            base_url=config.lifi_api_url, api_key=config.lifi_api_key
        )

    def __repr__(self):
        return f"{self.__class__.__name__}.{self.solana_address} <-> {self.evm_address}"

    @property
    def solana_address(self) -> str:
        return str(self.keypair.pubkey())

    @property
    def evm_address(self) -> str:
        return self.evm_client.address

    @property
    def amount(self) -> int:
        return self.config.amount

    async def fetch_balances(self) -> Balances:
        pubkey = self.keypair.pubkey()
        balances = Balances(
            lamports=await self.rpc_client.get_lamports(pubkey),
            wei=await self.evm_client.get_wei(),
            solana_token=await self.rpc_client.get_token_balance(
                pubkey, self.config.solana_token
            ),
            evm_token=await self.evm_client.get_token_balance(self.config.evm_token),
        )
        sol, eth = Chain.SOLANA.info, Chain.BASE.info
        self.logger.info(
            f"Saldo {sol.native_symbol} da conta Solana: "
            f"{balances.lamports / 10**sol.native_decimals} {sol.native_symbol}"
        )
        self.logger.info(
            f"Saldo {eth.native_symbol} da conta EVM: "
            f"{balances.wei / 10**eth.native_decimals} {eth.native_symbol}"
        )
        self.logger.info(f"Saldo USDC da conta Solana: {balances.solana_token}")
        self.logger.info(f"Saldo USDC da conta EVM: {balances.evm_token}")
        return balances

    def choose_direction(self, balances: Balances) -> Direction:
        if first_is_sender(balances.solana_token, balances.evm_token):
            return Direction.SOLANA_TO_EVM
        return Direction.EVM_TO_SOLANA

    def check_funds(self, direction: Direction, balances: Balances) -> None:
        if direction == Direction.SOLANA_TO_EVM:
            check_funds(self.solana_address, balances.solana_token, self.amount)
        else:
            check_funds(self.evm_address, balances.evm_token, self.amount)

    def _endpoints(self, direction: Direction) -> tuple[Token, str, Token, str]:
        """(token de origem, endereço de origem, token de destino, endereço de destino)"""
        solana = (self.config.solana_token, self.solana_address)
        evm = (self.config.evm_token, self.evm_address)
        if direction == Direction.SOLANA_TO_EVM:
            return (*solana, *evm)
        return (*evm, *solana)

    @staticmethod
    def _token_id(token: Token) -> str:
        if token.chain.info.is_evm:
            return Web3.to_checksum_address(token.address)
        return token.address

    def _lifi_token(self, token: Token) -> LiFiToken:
        return LiFiToken(
            address=self._token_id(token),
            chainId=token.chain.info.lifi_chain_id,
            symbol=token.symbol,
            decimals=token.decimals,
        )

    def expected_route(self, direction: Direction) -> ExpectedRoute:
        source_token, sender, dest_token, _ = self._endpoints(direction)
        return ExpectedRoute(
            sender_address=sender,
            source_chain_id=source_token.chain.info.lifi_chain_id,
            amount=str(self.amount),
            source_token=self._lifi_token(source_token),
            dest_token=self._lifi_token(dest_token),
        )

    async def fetch_quote(self, direction: Direction) -> LiFiQuote:
        source_token, sender, dest_token, receiver = self._endpoints(direction)
        self.logger.info("→ Pedindo quote à LI.FI...")
        return await self.lifi_client.get_quote(
            from_chain=source_token.chain.info.lifi_key,
            to_chain=dest_token.chain.info.lifi_key,
            from_token=self._token_id(source_token),
            to_token=self._token_id(dest_token),
            from_amount=self.amount,
            from_address=sender,
            to_address=receiver,
        )

    async def run(self) -> SettlementResult:
        balances = await self.fetch_balances()
        direction = self.choose_direction(balances)
        self.logger.info(f"Direção escolhida: {direction}")
        self.check_funds(direction, balances)

        quote = await self.fetch_quote(direction)
        route = validate(quote, self.expected_route(direction))
        self.logger.info(
            f"✓ Rota validada: quote {quote.id} via {quote.tool}, "
            f"estimativa no destino {quote.estimate.get('toAmount')} "
            f"(mínimo {quote.estimate.get('toAmountMin')}) minor units"
        )

        if direction == Direction.SOLANA_TO_EVM:
            return await self._submit_from_solana(route)
        return await self._submit_from_evm(route)

    async def _submit_from_solana(self, route: ValidatedRoute) -> SettlementResult:
        request = SolanaTransactionRequest.from_dict(route.transaction_request)
        try:
            tx = VersionedTransaction.from_bytes(request.data)
        except (BincodeError, ValueError) as ex:
            raise MalformedQuote(f"Transação Solana inválida na quote: {ex}") from ex

        self.logger.info("→ Assinando transação...")
        try:
            signed = self.rpc_client.sign_transaction(tx, self.keypair)
        except SignerError as ex:
            raise MalformedQuote(f"Transação da quote exige outros signatários: {ex}") from ex
        self.logger.info("→ Enviando transação...")
        signature = await self.rpc_client.send_and_confirm(signed)
        return SettlementResult(Direction.SOLANA_TO_EVM, str(signature))

    async def _submit_from_evm(self, route: ValidatedRoute) -> SettlementResult:
        request = EvmTransactionRequest.from_dict(route.transaction_request)
        token = self.config.evm_token

        allowance = await self.evm_client.get_allowance(token, request.to)
        self.logger.info(f"Allowance: {allowance}")
        approval = None
        if allowance < self.amount:
            receipt = await self.evm_client.approve(token, request.to, self.amount * 2)
            approval = Web3.to_hex(receipt["transactionHash"])

        self.logger.info("→ Enviando transação da bridge...")
        receipt = await self.evm_client.send_transaction_request(request)
        return SettlementResult(
            Direction.EVM_TO_SOLANA, Web3.to_hex(receipt["transactionHash"]), approval
        )

    async def close(self):
        await self.rpc_client.close()
        await self.evm_client.close()
        await self.lifi_client.close()
