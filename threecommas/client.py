"""High level 3Commas API client."""

from __future__ import annotations

from typing import Any, Literal, Mapping, Optional

import httpx

from .config import APIOptions, ErrorHandler, get_settings
from .constants import CHANNEL_PATHS, Channel
from .models import (
    BotOptionalParams,
    BotsParams,
    BotsStatsParams,
    CurrencyParams,
    DealsParams,
    FundParams,
    Identifier,
    MarketCurrencyParams,
    Order,
    SmartTradeHistoryParams,
    SmartTradeParams,
    TransferHistoryParams,
    TransferParams,
)
from .rest import ThreeCommasRESTClient
from .websocket import Connector, StreamErrorHandler, StreamHandler, ThreeCommasStream


HTTPMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]
APIVersion = Literal[1, 2]
Payload = Optional[Mapping[str, Any]]


class ThreeCommasAPI:
    """Asynchronous wrapper around the 3Commas REST API and its stream.

    Every call method signs its request with the configured credentials and
    returns the decoded JSON body. Use ``async with ThreeCommasAPI(...)`` or
    call :meth:`aclose` to release the HTTP client and the stream.
    """

    def __init__(
        self,
        options: APIOptions | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        connect: Connector | None = None,
        stream_error_handler: StreamErrorHandler | None = None,
    ) -> None:
        self.options = options or APIOptions()
        self._rest = ThreeCommasRESTClient(self.options, client=client)
        self._stream = ThreeCommasStream(self.options, connect=connect, error_handler=stream_error_handler)

    @classmethod
    def from_env(cls, error_handler: ErrorHandler | None = None, **kwargs: Any) -> "ThreeCommasAPI":
        """Build a client from ``THREECOMMAS_*`` environment variables."""

        return cls(get_settings().to_options(error_handler), **kwargs)

    @property
    def stream(self) -> ThreeCommasStream:
        return self._stream

    async def __aenter__(self) -> "ThreeCommasAPI":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._stream.unsubscribe()
        await self._rest.aclose()

    async def _request(self, method: HTTPMethod, version: APIVersion, path: str, payload: Any = None) -> Any:
        return await self._rest.request(method, version, path, payload)

    # ------------------------------------------------------------------
    # General
    # ------------------------------------------------------------------
    async def ping(self) -> Any:
        return await self._request("GET", 1, "/ping")

    async def time(self) -> Any:
        return await self._request("GET", 1, "/time")

    async def custom_request(
        self,
        method: HTTPMethod,
        version: APIVersion,
        path: str,
        payload: Any = None,
    ) -> Any:
        """Send a signed request to an endpoint without a dedicated method."""

        return await self._request(method, version, path, payload)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    async def transfer(self, params: TransferParams) -> Any:
        return await self._request("POST", 1, "/accounts/transfer", params)

    async def get_transfer_history(self, params: TransferHistoryParams) -> Any:
        return await self._request("GET", 1, "/accounts/transfer_history", params)

    async def get_transfer_data(self) -> Any:
        return await self._request("GET", 1, "/accounts/transfer_data")

    async def add_exchange_account(self, params: Payload) -> Any:
        return await self._request("POST", 1, "/accounts/new", params)

    async def edit_exchange_account(self, params: Payload) -> Any:
        return await self._request("POST", 1, "/accounts/update", params)

    async def get_exchange(self) -> Any:
        return await self._request("GET", 1, "/accounts")

    async def get_market_list(self) -> Any:
        return await self._request("GET", 1, "/accounts/market_list")

    async def get_market_pairs(self, params: Payload = None) -> Any:
        return await self._request("GET", 1, "/accounts/market_pairs", params)

    async def get_currency_rate(self, params: CurrencyParams) -> Any:
        return await self._request("GET", 1, "/accounts/currency_rates", params)

    async def get_currency_rate_with_leverage_data(self, params: MarketCurrencyParams) -> Any:
        return await self._request("GET", 1, "/accounts/currency_rates_with_leverage_data", params)

    async def get_active_trade_entities(self, account_id: Identifier) -> Any:
        return await self._request("GET", 1, f"/accounts/{account_id}/active_trading_entities")

    async def sell_all_to_usd(self, account_id: Identifier) -> Any:
        return await self._request("POST", 1, f"/accounts/{account_id}/sell_all_to_usd")

    async def sell_all_to_btc(self, account_id: Identifier) -> Any:
        return await self._request("POST", 1, f"/accounts/{account_id}/sell_all_to_btc")

    async def get_balance_chart_data(self, account_id: Identifier, params: Payload) -> Any:
        return await self._request("GET", 1, f"/accounts/{account_id}/balance_chart_data", params)

    async def load_balances(self, account_id: Identifier) -> Any:
        return await self._request("POST", 1, f"/accounts/{account_id}/load_balances")

    async def rename_exchange_account(self, account_id: Identifier, name: str) -> Any:
        return await self._request("POST", 1, f"/accounts/{account_id}/rename", {"name": name})

    async def remove_exchange_account(self, account_id: Identifier) -> Any:
        return await self._request("POST", 1, f"/accounts/{account_id}/remove")

    async def get_pie_chart_data(self, account_id: Identifier) -> Any:
        return await self._request("POST", 1, f"/accounts/{account_id}/pie_chart_data")

    async def get_account_table_data(self, account_id: Identifier) -> Any:
        return await self._request("POST", 1, f"/accounts/{account_id}/account_table_data")

    async def get_account_info(self, account_id: Identifier | None = None) -> Any:
        """Return a single account, or the summary of all accounts by default."""

        target = "summary" if account_id is None else account_id
        return await self._request("GET", 1, f"/accounts/{target}")

    async def get_leverage_data(self, account_id: Identifier, pair: str) -> Any:
        return await self._request("GET", 1, f"/accounts/{account_id}/leverage_data", {"pair": pair})

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    async def change_user_mode(self, mode: Literal["paper", "real"]) -> Any:
        return await self._request("POST", 1, "/users/change_mode", {"mode": mode})

    # ------------------------------------------------------------------
    # Smart trades (v2)
    # ------------------------------------------------------------------
    async def get_smart_trade_history(self, params: SmartTradeHistoryParams | None = None) -> Any:
        return await self._request("GET", 2, "/smart_trades", params)

    async def smart_trade(self, params: SmartTradeParams) -> Any:
        return await self._request("POST", 2, "/smart_trades", params)

    async def get_smart_trade(self, trade_id: int) -> Any:
        return await self._request("GET", 2, f"/smart_trades/{trade_id}")

    async def cancel_smart_trade(self, trade_id: int) -> Any:
        return await self._request("DELETE", 2, f"/smart_trades/{trade_id}")

    async def update_smart_trade(self, trade_id: int, params: Payload) -> Any:
        return await self._request("PATCH", 2, f"/smart_trades/{trade_id}", params)

    async def average_smart_trade(self, trade_id: int, params: FundParams) -> Any:
        return await self._request("POST", 2, f"/smart_trades/{trade_id}/add_funds", params)

    async def reduce_fund(self, trade_id: int, params: FundParams) -> Any:
        return await self._request("POST", 2, f"/smart_trades/{trade_id}/reduce_funds", params)

    async def close_smart_trade(self, trade_id: int) -> Any:
        return await self._request("POST", 2, f"/smart_trades/{trade_id}/close_by_market")

    async def force_start_smart_trade(self, trade_id: int) -> Any:
        return await self._request("POST", 2, f"/smart_trades/{trade_id}/force_start")

    async def force_process_smart_trade(self, trade_id: int) -> Any:
        return await self._request("POST", 2, f"/smart_trades/{trade_id}/force_process")

    async def set_note_smart_trade(self, trade_id: int, note: str) -> Any:
        return await self._request("POST", 2, f"/smart_trades/{trade_id}/set_note", {"note": note})

    async def get_sub_trade(self, trade_id: int) -> Any:
        """Return the sub trades of a smart trade, including entry and take profit orders."""

        return await self._request("GET", 2, f"/smart_trades/{trade_id}/trades")

    async def close_sub_trade(self, trade_id: int, sub_trade_id: int) -> Any:
        return await self._request(
            "POST", 2, f"/smart_trades/{trade_id}/trades/{sub_trade_id}/close_by_market"
        )

    async def cancel_sub_trade(self, trade_id: int, sub_trade_id: int) -> Any:
        return await self._request("DELETE", 2, f"/smart_trades/{trade_id}/trades/{sub_trade_id}")

    # ------------------------------------------------------------------
    # Bots and deals
    # ------------------------------------------------------------------
    async def get_bots(self, params: BotsParams | None = None) -> Any:
        return await self._request("GET", 1, "/bots", params or BotsParams())

    async def get_bots_stats(self, params: BotsStatsParams | None = None) -> Any:
        return await self._request("GET", 1, "/bots/stats", params)

    async def get_bot(self, bot_id: int, options: BotOptionalParams | None = None) -> Any:
        return await self._request("GET", 1, f"/bots/{bot_id}/show", options)

    async def get_deals(self, params: DealsParams | None = None) -> Any:
        return await self._request("GET", 1, "/deals", params or DealsParams())

    async def get_deal(self, deal_id: int) -> Any:
        return await self._request("GET", 1, f"/deals/{deal_id}/show")

    async def get_deal_safety_orders(self, deal_id: int) -> Any:
        return await self._request("GET", 1, f"/deals/{deal_id}/market_orders")

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------
    async def subscribe_smart_trade(self, handler: StreamHandler | None = None) -> None:
        await self._stream.subscribe(Channel.SMART_TRADES, CHANNEL_PATHS[Channel.SMART_TRADES], handler)

    async def subscribe_deal(self, handler: StreamHandler | None = None) -> None:
        await self._stream.subscribe(Channel.DEALS, CHANNEL_PATHS[Channel.DEALS], handler)

    async def unsubscribe(self) -> None:
        # 3Commas has no per-channel unsubscribe; this closes the whole stream.
        await self._stream.unsubscribe()

    @staticmethod
    def validate_order_type(order: Mapping[str, Any]) -> Order:
        """Validate that ``order`` has the shape of a smart trade.

        Raises :class:`pydantic.ValidationError` when it does not.
        """

        return Order.model_validate(order)


__all__ = ["ThreeCommasAPI"]
