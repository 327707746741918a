"""
Validação da rota devolvida pela LI.FI.

A quote só é aceita se cada campo ecoado em `action` for exatamente igual ao
que foi pedido. Qualquer divergência levanta `FieldMismatch` antes de qualquer
transação ser montada ou assinada.
"""

from dataclasses import dataclass
from typing import Any, Dict

from bridger.errors import FieldMismatch
from bridger.models.lifi_data import LiFiQuote, LiFiToken

_MISSING = object()


@dataclass(frozen=True)
class ExpectedRoute:
    sender_address: str
    source_chain_id: int
    amount: str  # minor units
    source_token: LiFiToken
    dest_token: LiFiToken


@dataclass(frozen=True)
class ValidatedRoute:
    route: Dict[str, Any]
    transaction_request: Dict[str, Any]


def _check(field: str, expected: Any, actual: Any) -> None:
    if actual is _MISSING:
        raise FieldMismatch(field, expected, None)
    # bool é subclasse de int, então compara o tipo também
    if type(actual) is not type(expected) or actual != expected:
        raise FieldMismatch(field, expected, actual)


def _check_token(prefix: str, expected: LiFiToken, actual: Any) -> None:
    if not isinstance(actual, dict):
        raise FieldMismatch(prefix, expected, actual)
    for name in ("address", "chainId", "symbol", "decimals"):
        _check(f"{prefix}.{name}", getattr(expected, name), actual.get(name, _MISSING))


def validate(quote: LiFiQuote, expected: ExpectedRoute) -> ValidatedRoute:
    route = quote.action
    _check("fromAddress", expected.sender_address, route.get("fromAddress", _MISSING))
    _check("fromChainId", expected.source_chain_id, route.get("fromChainId", _MISSING))
    _check("fromAmount", expected.amount, route.get("fromAmount", _MISSING))
    _check_token("fromToken", expected.source_token, route.get("fromToken"))
    _check_token("toToken", expected.dest_token, route.get("toToken"))

    return ValidatedRoute(route=route, transaction_request=quote.transactionRequest)
