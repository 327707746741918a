import json
import logging
from typing import Any, Dict

import httpx

from bridger.models.lifi_data import LiFiQuote


class AsyncLiFiClient:
    def __init__(
        self,
        client=None,
        base_url: str = "https://li.quest/v1",
        api_key: str | None = None,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.base_url = base_url.rstrip("/")

        if client:
            self.client = client
        else:
            self.client = httpx.AsyncClient()
            self.client.headers.update({"Accept": "application/json"})
            if api_key:
                self.client.headers.update({"x-lifi-api-key": api_key})

    async def get_quote(
        self,
        from_chain: str,
        to_chain: str,
        from_token: str,
        to_token: str,
        from_amount: int,
        from_address: str,
        to_address: str,
    ) -> LiFiQuote:
        params: Dict[str, Any] = {
            "fromChain": from_chain,
            "toChain": to_chain,
            "fromToken": from_token,
            "toToken": to_token,
            "fromAmount": str(from_amount),
            "fromAddress": from_address,
            "toAddress": to_address,
        }

        url = f"{self.base_url}/quote"
        response = await self.client.get(url, params=params)
        try:
            response.raise_for_status()
            response_json = response.json()
        except Exception as ex:
            ex.add_note(f"URL: {url}")
            ex.add_note(f"Status Code: {response.status_code}")
            ex.add_note(f"Response: {response.text}")
            raise ex

        self.logger.debug(f"Quote: {json.dumps(response_json, indent=2)}")
        return LiFiQuote.from_dict(response_json)

    async def close(self):
        await self.client.aclose()
