"""API endpoints for the order-book hook."""

import os

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from flowhook.config import HookConfig
from flowhook.constants import DEFAULT_HOOK_ADDRESS
from flowhook.errors import (
    AlreadyInitialized,
    BookFull,
    HookError,
    OrderNotFound,
    PoolNotInitialized,
    Unauthorized,
)
from flowhook.hooks.controller import HookController
from flowhook.hooks.registry import PoolEntry
from flowhook.models.api import (
    BookResponse,
    CancelOrderResponse,
    InitializePoolRequest,
    OrderModel,
    OrdersResponse,
    PlaceOrderRequest,
    PlaceOrderResponse,
    PoolResponse,
    QuoteRequest,
    QuoteResponse,
)
from flowhook.receipts import make_receipt, user_message

logger = structlog.get_logger()

router = APIRouter()

# Network name stamped on receipts
NETWORK = os.environ.get("FLOWHOOK_NETWORK", "local")

# User errors with a more specific status than 400
_USER_ERROR_STATUS: dict[type[HookError], int] = {
    OrderNotFound: 404,
    PoolNotInitialized: 404,
    Unauthorized: 403,
    AlreadyInitialized: 409,
    BookFull: 409,
}


def _create_default_controller() -> HookController:
    """Create the controller from FLOWHOOK_* environment variables."""
    return HookController(
        address=os.environ.get("FLOWHOOK_HOOK_ADDRESS", DEFAULT_HOOK_ADDRESS),
        config=HookConfig.from_env(),
    )


controller = _create_default_controller()


def get_controller() -> HookController:
    """Dependency provider for the hook controller.

    Override this in tests to inject a fresh controller:
        app.dependency_overrides[get_controller] = lambda: HookController()
    """
    return controller


def _failure_response(operation: str, exc: Exception) -> JSONResponse:
    """Translate a failed call into an HTTP error carrying a FAILED receipt.

    The controller has already rolled the book back and logged the failure.
    """
    if isinstance(exc, HookError) and not exc.is_fatal:
        status_code = _USER_ERROR_STATUS.get(type(exc), 400)
    else:
        status_code = 500
        if not isinstance(exc, HookError):
            logger.exception("unexpected_error", operation=operation)

    receipt = make_receipt(NETWORK, exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": user_message(exc), "receipt": receipt.export()},
    )


def _entry_or_404(hook: HookController, pool_id: str) -> PoolEntry:
    entry = hook.registry.get_by_id(pool_id)
    if entry is None or not entry.is_active:
        raise HTTPException(status_code=404, detail="Pool not found")
    return entry


@router.post("/pools", response_model=PoolResponse, response_model_by_alias=True)
async def create_pool(
    request: InitializePoolRequest,
    hook: HookController = Depends(get_controller),
) -> PoolResponse | JSONResponse:
    """Initialize a pool: runs before_initialize then after_initialize.

    Error Handling:
        - Malformed key (unordered currencies): 422
        - Hook address mismatch: 400
        - Pool already exists: 409
    """
    try:
        key = request.key.to_pool_key(hook.address)
    except ValueError as err:
        raise HTTPException(status_code=422, detail=str(err)) from err

    sqrt_price_x96 = int(request.sqrt_price_x96)
    try:
        hook.before_initialize(request.sender, key, sqrt_price_x96)
        try:
            hook.after_initialize(request.sender, key, sqrt_price_x96, request.tick)
        except Exception:
            hook.registry.abandon(key)
            raise
    except Exception as exc:
        return _failure_response("create_pool", exc)

    return PoolResponse(pool_id=key.pool_id, receipt=make_receipt(NETWORK).export())


@router.get("/pools/{pool_id}/book", response_model=BookResponse, response_model_by_alias=True)
async def get_book(
    pool_id: str,
    levels: int | None = Query(default=None, gt=0),
    hook: HookController = Depends(get_controller),
) -> BookResponse:
    """Depth snapshot of a pool's book, optionally capped to `levels` per side."""
    entry = _entry_or_404(hook, pool_id)
    snapshot = hook.depth(entry.key, max_levels=levels)
    return BookResponse.from_snapshot(entry.key.pool_id, snapshot)


@router.get(
    "/pools/{pool_id}/orders",
    response_model=OrdersResponse,
    response_model_by_alias=True,
)
async def list_orders(
    pool_id: str,
    owner: str = Query(pattern=r"^0x[a-fA-F0-9]{40}$"),
    hook: HookController = Depends(get_controller),
) -> OrdersResponse:
    """Resting orders of one owner, bids first, each side in priority order."""
    entry = _entry_or_404(hook, pool_id)
    orders = hook.orders_for(entry.key, owner)
    return OrdersResponse(
        pool_id=entry.key.pool_id,
        owner=owner,
        orders=[OrderModel.from_order(order) for order in orders],
    )


@router.post(
    "/pools/{pool_id}/orders",
    response_model=PlaceOrderResponse,
    response_model_by_alias=True,
)
async def place_order(
    pool_id: str,
    request: PlaceOrderRequest,
    hook: HookController = Depends(get_controller),
) -> PlaceOrderResponse | JSONResponse:
    """Place a limit order; the marketable part fills immediately."""
    entry = _entry_or_404(hook, pool_id)
    try:
        placement = hook.place_order(
            entry.key,
            owner=request.owner,
            side=request.side,
            limit_price=int(request.limit_price),
            quantity=int(request.quantity),
        )
    except Exception as exc:
        return _failure_response("place_order", exc)

    return PlaceOrderResponse.from_placement(placement, make_receipt(NETWORK).export())


@router.delete(
    "/pools/{pool_id}/orders/{order_id}",
    response_model=CancelOrderResponse,
    response_model_by_alias=True,
)
async def cancel_order(
    pool_id: str,
    order_id: int,
    owner: str = Query(pattern=r"^0x[a-fA-F0-9]{40}$"),
    hook: HookController = Depends(get_controller),
) -> CancelOrderResponse | JSONResponse:
    """Cancel a resting order on behalf of its owner."""
    entry = _entry_or_404(hook, pool_id)
    try:
        freed = hook.cancel_order(entry.key, caller=owner, order_id=order_id)
    except Exception as exc:
        return _failure_response("cancel_order", exc)

    return CancelOrderResponse(
        order_id=order_id,
        freed_quantity=freed,
        receipt=make_receipt(NETWORK).export(),
    )


@router.post("/pools/{pool_id}/quote", response_model=QuoteResponse, response_model_by_alias=True)
async def quote(
    pool_id: str,
    request: QuoteRequest,
    hook: HookController = Depends(get_controller),
) -> QuoteResponse | JSONResponse:
    """Match a swap against a copy of the book; nothing is changed."""
    entry = _entry_or_404(hook, pool_id)
    try:
        result = hook.quote(entry.key, request.to_swap_request())
    except Exception as exc:
        return _failure_response("quote", exc)

    logger.debug(
        "quote_served",
        pool_id=pool_id[:10],
        direction=request.direction.value,
        filled=result.filled_quantity,
    )
    return QuoteResponse.from_result(result)
