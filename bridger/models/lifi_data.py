"""
Dataclasses para dados da API de quotes da LI.FI (bridge cross-chain).
"""

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from bridger.errors import MalformedQuote


def parse_quantity(value: str | int) -> int:
    """Aceita inteiros ou strings em hex ("0x...") ou decimal"""
    if isinstance(value, int):
        return value
    return int(value, 0)


@dataclass
class LiFiToken:
    """Token como descrito pela LI.FI"""

    address: str
    chainId: int
    symbol: str
    decimals: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LiFiToken":
        """Cria uma instância LiFiToken a partir de um dicionário"""
        return cls(
            address=data["address"],
            chainId=data["chainId"],
            symbol=data["symbol"],
            decimals=data["decimals"],
        )


@dataclass
class LiFiQuote:
    """Resposta da API de quote da LI.FI"""

    action: Dict[str, Any]
    transactionRequest: Dict[str, Any]
    id: Optional[str] = None
    tool: Optional[str] = None
    estimate: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LiFiQuote":
        """Cria uma instância LiFiQuote a partir de um dicionário"""
        action = data.get("action")
        transaction_request = data.get("transactionRequest")
        if not isinstance(action, dict):
            raise MalformedQuote("Quote sem o objeto 'action'")
        if not isinstance(transaction_request, dict):
            raise MalformedQuote("Quote sem o objeto 'transactionRequest'")
        return cls(
            action=action,
            transactionRequest=transaction_request,
            id=data.get("id"),
            tool=data.get("tool"),
            estimate=data.get("estimate") or {},
        )


@dataclass
class SolanaTransactionRequest:
    """Transação serializada pronta, enviada em base64"""

    data: bytes

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SolanaTransactionRequest":
        try:
            return cls(data=base64.b64decode(data["data"], validate=True))
        except (KeyError, TypeError, ValueError) as ex:
            raise MalformedQuote(f"transactionRequest.data inválido: {ex}") from ex


@dataclass
class EvmTransactionRequest:
    """Parâmetros da chamada ao contrato da bridge"""

    to: str
    from_: str
    chainId: int
    value: int
    data: str
    gasPrice: int
    gasLimit: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EvmTransactionRequest":
        try:
            return cls(
                to=data["to"],
                from_=data["from"],
                chainId=parse_quantity(data["chainId"]),
                value=parse_quantity(data["value"]),
                data=data["data"],
                gasPrice=parse_quantity(data["gasPrice"]),
                gasLimit=parse_quantity(data["gasLimit"]),
            )
        except (KeyError, TypeError, ValueError) as ex:
            raise MalformedQuote(f"transactionRequest inválido: {ex!r}") from ex
