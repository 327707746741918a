from .async_lifi_client import AsyncLiFiClient

__all__ = ["AsyncLiFiClient"]
