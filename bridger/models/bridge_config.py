import os
from dataclasses import dataclass, field
from enum import StrEnum, auto
from pathlib import Path

from eth_account import Account
from eth_account.signers.local import LocalAccount
from solders.keypair import Keypair

from bridger.errors import ConfigError

from .tokens import USDC_BASE, USDC_SOLANA, Token


class RunningMode(StrEnum):
    REAL = auto()
    DRY = auto()


@dataclass
class BridgeConfig:
    solana_rpc_url: str = "https://api.mainnet-beta.solana.com"
    evm_rpc_url: str = "https://mainnet.base.org"
    lifi_api_url: str = "https://li.quest/v1"
    lifi_api_key: str | None = None

    amount: int = 1_000_000  # 1 USDC
    solana_token: Token = field(default=USDC_SOLANA)
    evm_token: Token = field(default=USDC_BASE)
    mode: RunningMode = RunningMode.REAL

    @property
    def is_dryrun(self) -> bool:
        return self.mode == RunningMode.DRY


def create_bridge_config(amount: int, mode: RunningMode = RunningMode.REAL) -> BridgeConfig:
    """Monta a configuração a partir das variáveis de ambiente, quando definidas"""
    defaults = BridgeConfig()
    return BridgeConfig(
        solana_rpc_url=os.getenv("SOLANA_RPC_URL", defaults.solana_rpc_url),
        evm_rpc_url=os.getenv("EVM_RPC_URL", defaults.evm_rpc_url),
        lifi_api_url=os.getenv("LIFI_API_URL", defaults.lifi_api_url),
        lifi_api_key=os.getenv("LIFI_API_KEY") or None,
        amount=amount,
        mode=mode,
    )


def _read_key_file(path: str | Path) -> str:
    try:
        content = Path(path).read_text().strip()
    except OSError as ex:
        raise ConfigError(f"Não foi possível ler o arquivo de chave {path}: {ex}") from ex
    if not content:
        raise ConfigError(f"Arquivo de chave vazio: {path}")
    return content


def get_keypair_from_file(path: str | Path) -> Keypair:
    private_key = _read_key_file(path)
    try:
        return Keypair.from_base58_string(private_key)
    except ValueError as ex:
        raise ConfigError(f"Chave privada Solana inválida em {path}") from ex


def get_evm_account_from_file(path: str | Path) -> LocalAccount:
    private_key = _read_key_file(path)
    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError) as ex:
        raise ConfigError(f"Chave privada EVM inválida em {path}") from ex
