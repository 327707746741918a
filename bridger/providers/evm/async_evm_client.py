import logging
from contextlib import contextmanager
from typing import Any

from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3
from web3.exceptions import Web3Exception

from bridger.errors import RpcError, SubmissionError
from bridger.models.lifi_data import EvmTransactionRequest
from bridger.models.tokens import Token, TokenAmount

ERC20_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "_spender", "type": "address"},
            {"name": "_value", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "success", "type": "bool"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [
            {"name": "_owner", "type": "address"},
            {"name": "_spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "remaining", "type": "uint256"}],
        "type": "function",
    },
]


@contextmanager
def _rpc_errors(method: str):
    try:
        yield
    except Web3Exception as ex:
        raise RpcError(f"Erro no RPC EVM ({method}): {ex}") from ex


class AsyncEVMClient:
    def __init__(
        self,
        account: LocalAccount,
        w3=None,
        rpc_url: str | None = None,
        is_dryrun=False,
        receipt_timeout: float = 120.0,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.account = account
        if w3:
            self.w3 = w3
        else:
            assert rpc_url, "RPC URL não definida"
            self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self.rpc_url = rpc_url
        self.is_dryrun = is_dryrun
        self.receipt_timeout = receipt_timeout

    def __repr__(self):
        return f"{self.__class__.__name__}({self.rpc_url}, {self.is_dryrun=})"

    @property
    def address(self) -> str:
        return self.account.address

    def _token_contract(self, token: Token):
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(token.address), abi=ERC20_ABI
        )

    async def get_wei(self, address: str | None = None) -> int:
        with _rpc_errors("eth_getBalance"):
            return await self.w3.eth.get_balance(address or self.address)

    async def get_token_balance(
        self, token: Token, owner: str | None = None
    ) -> TokenAmount:
        contract = self._token_contract(token)
        with _rpc_errors("balanceOf"):
            balance = await contract.functions.balanceOf(owner or self.address).call()
        return token.amount(balance)

    async def get_allowance(self, token: Token, spender: str) -> int:
        contract = self._token_contract(token)
        with _rpc_errors("allowance"):
            return await contract.functions.allowance(
                self.address, Web3.to_checksum_address(spender)
            ).call()

    async def approve(self, token: Token, spender: str, amount: int) -> Any:
        """Aprova o spender e só retorna depois de um recibo com sucesso"""
        contract = self._token_contract(token)
        with _rpc_errors("approve"):
            tx = await contract.functions.approve(
                Web3.to_checksum_address(spender), amount
            ).build_transaction(
                {
                    "from": self.address,
                    "nonce": await self.w3.eth.get_transaction_count(
                        self.address, "pending"
                    ),
                    "chainId": await self.w3.eth.chain_id,
                }
            )
        self.logger.info(f"→ Aprovando {amount} {token.symbol} para {spender}...")
        tx_hash = await self._sign_and_send(tx)
        return await self.wait_for_receipt(tx_hash)

    async def send_transaction_request(self, request: EvmTransactionRequest) -> Any:
        with _rpc_errors("eth_getTransactionCount"):
            nonce = await self.w3.eth.get_transaction_count(self.address, "pending")
        tx = {
            "chainId": request.chainId,
            "from": Web3.to_checksum_address(request.from_),
            "to": Web3.to_checksum_address(request.to),
            "value": request.value,
            "data": request.data,
            "gasPrice": request.gasPrice,
            "gas": request.gasLimit,
            "nonce": nonce,
        }
        tx_hash = await self._sign_and_send(tx)
        return await self.wait_for_receipt(tx_hash)

    async def _sign_and_send(self, tx: dict[str, Any]) -> bytes:
        signed = self.account.sign_transaction(tx)
        if self.is_dryrun:
            self.logger.info(f"[DRY] Transação não enviada: {signed.hash.hex()}")
            return signed.hash

        try:
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except Web3Exception as ex:
            raise SubmissionError(f"Erro ao enviar transação: {ex}") from ex
        self.logger.info(f"✓ Transação enviada: {tx_hash.hex()}")
        return tx_hash

    async def wait_for_receipt(self, tx_hash: bytes) -> Any:
        if self.is_dryrun:
            return {"status": 1, "transactionHash": tx_hash}

        self.logger.info("→ Aguardando recibo...")
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout
            )
        except Web3Exception as ex:
            raise SubmissionError(f"Recibo não obtido para {tx_hash.hex()}: {ex}") from ex
        self.logger.debug(f"wait_for_receipt: {Web3.to_json(receipt)}")
        if receipt["status"] != 1:
            raise SubmissionError(f"Transação {tx_hash.hex()} falhou: {receipt=}")
        return receipt

    async def close(self):
        await self.w3.provider.disconnect()
