"""
Módulo de modelos de dados: chains, tokens, quotes da LI.FI e configuração.
"""

from .bridge_config import BridgeConfig, RunningMode, create_bridge_config
from .chains import CHAINS, Chain, ChainInfo
from .lifi_data import (
    EvmTransactionRequest,
    LiFiQuote,
    LiFiToken,
    SolanaTransactionRequest,
)
from .tokens import USDC_BASE, USDC_SOLANA, Token, TokenAmount

__all__ = [
    # Config
    "BridgeConfig",
    "RunningMode",
    "create_bridge_config",
    # Chains
    "CHAINS",
    "Chain",
    "ChainInfo",
    # LI.FI
    "EvmTransactionRequest",
    "LiFiQuote",
    "LiFiToken",
    "SolanaTransactionRequest",
    # Tokens
    "USDC_BASE",
    "USDC_SOLANA",
    "Token",
    "TokenAmount",
]
