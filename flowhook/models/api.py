"""Pydantic wire models for the HTTP API.

Amounts travel as decimal strings (uint256 / int256) so 1e18-scaled values
survive JSON clients that parse numbers as doubles. Field names are
camelCase on the wire and snake_case in Python.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from flowhook.book.depth import DepthLevel, DepthSnapshot
from flowhook.book.order import Order, Side
from flowhook.constants import ADDRESS_ZERO
from flowhook.hooks.controller import PlacementResult
from flowhook.matching.types import Fill, MatchResult, SwapRequest
from flowhook.models.pool import PoolKey
from flowhook.models.types import Address, Int256, Uint256


class PoolKeyModel(BaseModel):
    """Pool identity as sent by clients."""

    currency0: Address = Field(description="Base token address.")
    currency1: Address = Field(description="Quote token address.")
    fee: int = Field(ge=0, description="Pool LP fee in pips.")
    tick_spacing: int = Field(default=60, gt=0, alias="tickSpacing")
    hooks: Address | None = Field(
        default=None, description="Hook address; defaults to this service's hook."
    )

    model_config = {"populate_by_name": True}

    def to_pool_key(self, default_hooks: str) -> PoolKey:
        return PoolKey(
            currency0=self.currency0,
            currency1=self.currency1,
            fee=self.fee,
            tick_spacing=self.tick_spacing,
            hooks=self.hooks or default_hooks,
        )


class InitializePoolRequest(BaseModel):
    """Create a pool and its order book."""

    key: PoolKeyModel
    sqrt_price_x96: Uint256 = Field(alias="sqrtPriceX96")
    tick: int = 0
    sender: Address = ADDRESS_ZERO

    model_config = {"populate_by_name": True}


class PlaceOrderRequest(BaseModel):
    """Place a limit order in a pool's book."""

    owner: Address
    side: Side
    limit_price: Uint256 = Field(alias="limitPrice", description="Quote per base, 1e18 scaled.")
    quantity: Uint256 = Field(description="Base token quantity.")

    model_config = {"populate_by_name": True}


class QuoteRequest(BaseModel):
    """Dry-run a swap against a pool's book."""

    direction: Side
    amount_specified: Int256 = Field(
        alias="amountSpecified",
        description="Positive for exact-input, negative for exact-output.",
    )
    price_limit: Uint256 | None = Field(default=None, alias="priceLimit")
    specifies_quote: bool = Field(default=False, alias="specifiesQuote")

    model_config = {"populate_by_name": True}

    def to_swap_request(self) -> SwapRequest:
        return SwapRequest(
            direction=self.direction,
            amount_specified=int(self.amount_specified),
            price_limit=int(self.price_limit) if self.price_limit is not None else None,
            specifies_quote=self.specifies_quote,
        )


class FillModel(BaseModel):
    order_id: int = Field(alias="orderId")
    owner: Address
    price: Uint256
    quantity: Uint256
    quote_amount: Uint256 = Field(alias="quoteAmount")
    order_remaining: Uint256 = Field(alias="orderRemaining")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_fill(cls, fill: Fill) -> FillModel:
        return cls(
            order_id=fill.order_id,
            owner=fill.owner,
            price=fill.price,
            quantity=fill.quantity,
            quote_amount=fill.quote_amount,
            order_remaining=fill.order_remaining,
        )


class PoolResponse(BaseModel):
    pool_id: str = Field(alias="poolId")
    receipt: dict[str, Any]

    model_config = {"populate_by_name": True}


class PlaceOrderResponse(BaseModel):
    """Result of a placement: immediate fills plus what rests."""

    order_id: int = Field(alias="orderId")
    filled_quantity: Uint256 = Field(alias="filledQuantity")
    rested_quantity: Uint256 = Field(alias="restedQuantity")
    unrested_quantity: Uint256 = Field(alias="unrestedQuantity")
    fills: list[FillModel] = Field(default_factory=list)
    evicted_order_id: int | None = Field(default=None, alias="evictedOrderId")
    receipt: dict[str, Any]

    model_config = {"populate_by_name": True}

    @classmethod
    def from_placement(
        cls, placement: PlacementResult, receipt: dict[str, Any]
    ) -> PlaceOrderResponse:
        return cls(
            order_id=placement.order_id,
            filled_quantity=placement.filled_quantity,
            rested_quantity=placement.rested_quantity,
            unrested_quantity=placement.unrested_quantity,
            fills=[FillModel.from_fill(f) for f in placement.fills],
            evicted_order_id=placement.evicted.id if placement.evicted else None,
            receipt=receipt,
        )


class OrderModel(BaseModel):
    """One resting order as listed to its owner."""

    order_id: int = Field(alias="orderId")
    owner: Address
    side: Side
    limit_price: Uint256 = Field(alias="limitPrice")
    original_quantity: Uint256 = Field(alias="originalQuantity")
    remaining_quantity: Uint256 = Field(alias="remainingQuantity")
    locked_amount: Uint256 = Field(
        alias="lockedAmount", description="Quote for bids, base for asks."
    )

    model_config = {"populate_by_name": True}

    @classmethod
    def from_order(cls, order: Order) -> OrderModel:
        return cls(
            order_id=order.id,
            owner=order.owner,
            side=order.side,
            limit_price=order.limit_price,
            original_quantity=order.original_quantity,
            remaining_quantity=order.remaining_quantity,
            locked_amount=order.locked_amount,
        )


class OrdersResponse(BaseModel):
    pool_id: str = Field(alias="poolId")
    owner: Address
    orders: list[OrderModel]

    model_config = {"populate_by_name": True}


class CancelOrderResponse(BaseModel):
    order_id: int = Field(alias="orderId")
    freed_quantity: Uint256 = Field(alias="freedQuantity")
    receipt: dict[str, Any]

    model_config = {"populate_by_name": True}


class QuoteResponse(BaseModel):
    """What the book would do with a swap, without doing it."""

    filled_quantity: Uint256 = Field(alias="filledQuantity")
    average_price: Uint256 = Field(alias="averagePrice")
    notional: Uint256
    remaining_unmatched_amount: Uint256 = Field(alias="remainingUnmatchedAmount")
    delta_specified: Int256 = Field(alias="deltaSpecified")
    delta_unspecified: Int256 = Field(alias="deltaUnspecified")
    levels_consumed: int = Field(alias="levelsConsumed")
    depth_capped: bool = Field(alias="depthCapped")
    fills: list[FillModel] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_result(cls, result: MatchResult) -> QuoteResponse:
        return cls(
            filled_quantity=result.filled_quantity,
            average_price=result.average_price,
            notional=result.notional,
            remaining_unmatched_amount=result.remaining_unmatched_amount,
            delta_specified=result.delta.specified,
            delta_unspecified=result.delta.unspecified,
            levels_consumed=result.levels_consumed,
            depth_capped=result.depth_capped,
            fills=[FillModel.from_fill(f) for f in result.fills],
        )


class DepthLevelModel(BaseModel):
    price: Uint256
    quantity: Uint256
    order_count: int = Field(alias="orderCount")
    total: Uint256

    model_config = {"populate_by_name": True}

    @classmethod
    def from_level(cls, level: DepthLevel) -> DepthLevelModel:
        return cls(
            price=level.price,
            quantity=level.quantity,
            order_count=level.order_count,
            total=level.total,
        )


class BookResponse(BaseModel):
    """Depth snapshot of one pool's book."""

    pool_id: str = Field(alias="poolId")
    bids: list[DepthLevelModel]
    asks: list[DepthLevelModel]
    spread: Uint256
    mid_price: Uint256 = Field(alias="midPrice")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_snapshot(cls, pool_id: str, snapshot: DepthSnapshot) -> BookResponse:
        return cls(
            pool_id=pool_id,
            bids=[DepthLevelModel.from_level(level) for level in snapshot.bids],
            asks=[DepthLevelModel.from_level(level) for level in snapshot.asks],
            spread=snapshot.spread,
            mid_price=snapshot.mid_price,
        )


class ErrorResponse(BaseModel):
    detail: str
    receipt: dict[str, Any] | None = None


__all__ = [
    "PoolKeyModel",
    "InitializePoolRequest",
    "PlaceOrderRequest",
    "QuoteRequest",
    "FillModel",
    "PoolResponse",
    "PlaceOrderResponse",
    "OrderModel",
    "OrdersResponse",
    "CancelOrderResponse",
    "QuoteResponse",
    "DepthLevelModel",
    "BookResponse",
    "ErrorResponse",
]
