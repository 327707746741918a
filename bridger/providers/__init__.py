"""
Clientes dos serviços externos: RPC Solana, RPC EVM e API de quotes da LI.FI.
"""

from .evm.async_evm_client import AsyncEVMClient
from .lifi.async_lifi_client import AsyncLiFiClient
from .solana.async_rpc_client import AsyncRPCClient

__all__ = [
    "AsyncEVMClient",
    "AsyncLiFiClient",
    "AsyncRPCClient",
]
