from .async_evm_client import ERC20_ABI, AsyncEVMClient

__all__ = ["ERC20_ABI", "AsyncEVMClient"]
