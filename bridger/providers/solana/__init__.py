from .async_rpc_client import AsyncRPCClient

__all__ = ["AsyncRPCClient"]
