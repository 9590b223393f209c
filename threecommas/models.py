"""Pydantic schemas for 3Commas endpoint parameters and responses.

Parameter models only name the fields the client documents; any other keyword
is accepted and sent as-is, since 3Commas payloads are transported without
interpretation. Unset optional fields are dropped before serialization.
"""
from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Identifier = Union[int, str]
Number = Union[float, str]


class Params(BaseModel):
    """Base class of every request parameter model."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class TransferParams(Params):
    currency: str
    amount: Number
    to_account_id: Identifier
    from_account_id: Identifier


class TransferHistoryParams(Params):
    account_id: Identifier
    currency: str
    page: Optional[int] = Field(default=None, ge=1)
    per_page: Optional[int] = Field(default=None, ge=1)


class CurrencyParams(Params):
    pair: str
    market_code: Optional[str] = None


class MarketCurrencyParams(Params):
    market_code: str
    pair: str


class SmartTradeHistoryParams(Params):
    account_id: Optional[Identifier] = None
    pair: Optional[str] = None
    type: Optional[Literal["buy", "sell"]] = None
    status: Optional[str] = None
    order_by: Optional[str] = None
    order_direction: Optional[Literal["asc", "desc"]] = None
    page: Optional[int] = Field(default=None, ge=1)
    per_page: Optional[int] = Field(default=None, ge=1)


class SmartTradeParams(Params):
    account_id: Identifier
    pair: str
    instant: Optional[bool] = None
    skip_enter_step: Optional[bool] = None
    note: Optional[str] = None
    leverage: Optional[dict[str, Any]] = None
    position: dict[str, Any]
    take_profit: Optional[dict[str, Any]] = None
    stop_loss: Optional[dict[str, Any]] = None


class FundParams(Params):
    quantity: Number
    is_market: Optional[bool] = None
    rate: Optional[Number] = None


class BotsParams(Params):
    limit: Optional[int] = Field(default=50, ge=1, le=100)
    offset: Optional[int] = Field(default=None, ge=0)
    from_: Optional[str] = Field(default=None, alias="from")
    account_id: Optional[Identifier] = None
    scope: Optional[Literal["enabled", "disabled"]] = None
    strategy: Optional[Literal["long", "short"]] = None
    sort_by: Optional[Literal["profit", "created_at", "updated_at"]] = "created_at"
    sort_direction: Optional[Literal["asc", "desc"]] = "desc"
    quote: Optional[str] = None


class BotsStatsParams(Params):
    account_id: Optional[Identifier] = None
    bot_id: Optional[Identifier] = None


class BotOptionalParams(Params):
    include_events: Optional[bool] = None


class DealsParams(Params):
    limit: Optional[int] = Field(default=50, ge=1, le=1000)
    offset: Optional[int] = Field(default=None, ge=0)
    from_: Optional[str] = Field(default=None, alias="from")
    account_id: Optional[Identifier] = None
    bot_id: Optional[Identifier] = None
    scope: Optional[str] = None
    order: Optional[Literal["created_at", "updated_at", "closed_at", "id"]] = "created_at"
    order_direction: Optional[Literal["asc", "desc"]] = "desc"
    base: Optional[str] = None
    quote: Optional[str] = None


class OrderStatus(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    basic_type: Optional[str] = None
    title: Optional[str] = None


class OrderAccount(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Identifier
    type: Optional[str] = None
    name: Optional[str] = None
    market: Optional[str] = None


class Order(BaseModel):
    """Smart trade as returned by the v2 smart trade endpoints."""

    model_config = ConfigDict(extra="allow")

    id: int
    pair: str
    status: OrderStatus
    account: Optional[OrderAccount] = None
    version: Optional[int] = None
    instant: Optional[bool] = None
    note: Optional[str] = None
    skip_enter_step: Optional[bool] = None
    leverage: Optional[dict[str, Any]] = None
    position: Optional[dict[str, Any]] = None
    take_profit: Optional[dict[str, Any]] = None
    stop_loss: Optional[dict[str, Any]] = None
    data: Optional[dict[str, Any]] = None
    profit: Optional[dict[str, Any]] = None
    margin: Optional[dict[str, Any]] = None
    is_position_not_filled: Optional[bool] = None


__all__ = [
    "BotOptionalParams",
    "BotsParams",
    "BotsStatsParams",
    "CurrencyParams",
    "DealsParams",
    "FundParams",
    "MarketCurrencyParams",
    "Order",
    "OrderAccount",
    "OrderStatus",
    "Params",
    "SmartTradeHistoryParams",
    "SmartTradeParams",
    "TransferHistoryParams",
    "TransferParams",
]
