from unittest import mock

import httpx
import pytest

from bridger.providers.lifi.async_lifi_client import AsyncLiFiClient


class TestAsyncLiFiClient:
    class TestGetQuote:
        fake_request_get_quote = httpx.Response(
            200,
            request=httpx.Request("GET", ""),
            json={
                "id": "0x1a2b",
                "tool": "mayan",
                "action": {
                    "fromAddress": "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM",
                    "fromChainId": 1151111081099710,
                    "fromAmount": "1000000",
                },
                "estimate": {"toAmount": "990000"},
                "transactionRequest": {"data": "AQID"},
            },
        )

        @mock.patch.object(
            httpx.AsyncClient,
            "get",
            return_value=fake_request_get_quote,
        )
        async def test_get_quote(self, mock_make_request):
            client = AsyncLiFiClient()
            quote = await client.get_quote(
                from_chain="SOL",
                to_chain="BAS",
                from_token="EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
                to_token="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
                from_amount=1_000_000,
                from_address="9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM",
                to_address="0x2c7536E3605D9C16a7a3D7b1898e529396a65c23",
            )
            assert quote.id == "0x1a2b"
            assert quote.action["fromAmount"] == "1000000"
            assert quote.transactionRequest == {"data": "AQID"}
            assert quote.estimate == {"toAmount": "990000"}
            mock_make_request.assert_called_once_with(
                "https://li.quest/v1/quote",
                params={
                    "fromChain": "SOL",
                    "toChain": "BAS",
                    "fromToken": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
                    "toToken": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
                    "fromAmount": "1000000",
                    "fromAddress": "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM",
                    "toAddress": "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23",
                },
            )

        @mock.patch.object(
            httpx.AsyncClient,
            "get",
            return_value=httpx.Response(
                404,
                request=httpx.Request("GET", "https://li.quest/v1/quote"),
                text="No available quotes for the requested transfer",
            ),
        )
        async def test_http_error_has_notes(self, mock_make_request):
            client = AsyncLiFiClient(base_url="https://li.quest/v1/")
            with pytest.raises(httpx.HTTPStatusError) as exc_info:
                await client.get_quote("BAS", "SOL", "a", "b", 1, "c", "d")
            assert "URL: https://li.quest/v1/quote" in exc_info.value.__notes__
            assert "Status Code: 404" in exc_info.value.__notes__

    def test_api_key_header(self):
        client = AsyncLiFiClient(api_key="secret")
        assert client.client.headers["x-lifi-api-key"] == "secret"
        assert "x-lifi-api-key" not in AsyncLiFiClient().client.headers
