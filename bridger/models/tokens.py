from dataclasses import dataclass
from decimal import Decimal

from solders.pubkey import Pubkey

from .chains import Chain


@dataclass(frozen=True)
class TokenAmount:
    """Quantidade inteira em minor units. O valor em float serve apenas para exibição."""

    raw: int
    decimals: int

    @property
    def ui_amount(self) -> float:
        return self.raw / 10**self.decimals

    @classmethod
    def from_ui(cls, ui_amount: Decimal | float | int | str, decimals: int) -> "TokenAmount":
        """
        Converte valor em UI (ex: 1.23 USDC) para raw (int)
        """
        ui = Decimal(str(ui_amount))
        scale = Decimal(10) ** decimals
        return cls(raw=int(ui * scale), decimals=decimals)

    def __str__(self) -> str:
        return str(self.ui_amount)


class Token:
    __slots__ = ("address", "symbol", "decimals", "chain")

    def __init__(self, address: str, symbol: str, decimals: int, chain: Chain):
        self.address = address
        self.symbol = symbol
        self.decimals = decimals
        self.chain = chain

    @property
    def pubkey(self) -> Pubkey:
        return Pubkey.from_string(self.address)

    def amount(self, raw_amount: int) -> TokenAmount:
        return TokenAmount(raw=int(raw_amount), decimals=self.decimals)

    def zero(self) -> TokenAmount:
        return self.amount(0)

    def __repr__(self) -> str:
        return f"Token(symbol={self.symbol}, chain={self.chain}, decimals={self.decimals})"


USDC_SOLANA = Token("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", "USDC", 6, Chain.SOLANA)
USDC_BASE = Token("0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913", "USDC", 6, Chain.BASE)
