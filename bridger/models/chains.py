from dataclasses import dataclass
from enum import StrEnum, auto


@dataclass(frozen=True)
class ChainInfo:
    lifi_key: str  # identificador da chain na API da LI.FI
    lifi_chain_id: int
    native_symbol: str
    native_decimals: int
    is_evm: bool


class Chain(StrEnum):
    SOLANA = auto()
    BASE = auto()

    @property
    def info(self) -> ChainInfo:
        return CHAINS[self]


CHAINS = {
    Chain.SOLANA: ChainInfo("SOL", 1151111081099710, "SOL", 9, is_evm=False),
    Chain.BASE: ChainInfo("BAS", 8453, "ETH", 18, is_evm=True),
}
