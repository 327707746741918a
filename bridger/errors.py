"""
Exceções do bridger.
Nenhuma delas é tratada internamente: cada uma interrompe a execução.
"""

from typing import Any


class BridgerError(Exception):
    pass


class ConfigError(BridgerError):
    """Arquivo de credencial ausente, ilegível ou inválido"""

    pass


class RpcError(BridgerError):
    """Falha em qualquer chamada RPC de uma chain"""

    pass


class InsufficientFunds(BridgerError):
    def __init__(self, sender: str, balance: int, amount: int):
        self.sender = sender
        self.balance = balance
        self.amount = amount
        super().__init__(
            f"Saldo insuficiente em {sender}: {balance} < {amount} (minor units)"
        )


class ValidationError(BridgerError):
    """A quote da bridge não corresponde ao que foi pedido"""

    pass


class FieldMismatch(ValidationError):
    def __init__(self, field: str, expected: Any, actual: Any):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(f"Campo {field} divergente: esperado={expected!r} recebido={actual!r}")


class MalformedQuote(ValidationError):
    pass


class SubmissionError(BridgerError):
    """Transação rejeitada ou recibo com falha"""

    pass
