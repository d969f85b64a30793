"""Order-book hook controller.

HookController is the only object the pool manager talks to. It owns the
registry of per-pool books, turns swap callbacks into book matches, and
exposes order placement and cancellation.

Swap lifecycle:
1. before_swap matches the swap against the book and returns a delta for
   the matched part, so the AMM only prices the remainder
2. The pool manager executes the AMM leg
3. after_swap checks AMM leg + book leg == requested amount, or
   abort_swap undoes the match when the AMM leg fails

Between steps 1 and 3 the pool accepts no other state-changing call.

Every state-changing call snapshots the pool's book first and restores it
if anything raises, so a failed call leaves no partial fills behind. The
before_swap snapshot is kept until after_swap, which restores it on a
reconciliation failure: the whole swap is undone, not just the last step.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import structlog

from flowhook.book.depth import DepthSnapshot, depth_snapshot
from flowhook.book.order import Order, Side
from flowhook.book.order_book import OrderBook
from flowhook.config import DEFAULT_HOOK_CONFIG, DepthPolicy, HookConfig
from flowhook.constants import DEFAULT_HOOK_ADDRESS
from flowhook.errors import (
    BookFull,
    BoundaryMismatch,
    DeltaInvariantViolation,
    DeltaMismatch,
    HookAddressMismatch,
    HookError,
    InvalidLiquidityParams,
    LiquidityAccountingMismatch,
    ReentrantCall,
)
from flowhook.hooks.base import HookPermissions, HookSelector
from flowhook.hooks.registry import PoolBookRegistry, PoolEntry
from flowhook.matching.engine import MatchingEngine
from flowhook.matching.types import Fill, MatchResult, SwapRequest
from flowhook.math.price import sqrt_price_x96_to_price
from flowhook.models.pool import (
    BalanceDelta,
    BeforeSwapDelta,
    ModifyLiquidityParams,
    PoolKey,
    SwapParams,
)
from flowhook.models.types import normalize_address
from flowhook.safe_int import S

logger = structlog.get_logger()


@dataclass
class PendingSwap:
    """State carried from before_swap to after_swap for one pool."""

    params: SwapParams
    result: MatchResult
    snapshot: OrderBook


@dataclass
class PlacementResult:
    """Outcome of placing a limit order.

    Attributes:
        order_id: Id assigned to the order
        filled_quantity: Quantity matched immediately against the book
        rested_quantity: Quantity left resting in the book
        unrested_quantity: Marketable quantity dropped because matching hit
            the level cap (resting it would cross the book)
        fills: Fills against resting orders, in execution order
        evicted: Order removed to make room, if any
    """

    order_id: int
    filled_quantity: int
    rested_quantity: int
    unrested_quantity: int = 0
    fills: list[Fill] = field(default_factory=list)
    evicted: Order | None = None

    @property
    def is_resting(self) -> bool:
        return self.rested_quantity > 0


class HookController:
    """Limit-order book hook for one deployment.

    Args:
        address: Address the hook is deployed at; pool keys must name it
        config: Hook configuration (defaults to DEFAULT_HOOK_CONFIG)
        registry: Pool registry; a fresh one is created if not given
    """

    def __init__(
        self,
        address: str = DEFAULT_HOOK_ADDRESS,
        config: HookConfig | None = None,
        registry: PoolBookRegistry | None = None,
    ) -> None:
        self.address = normalize_address(address, validate=True)
        self.config = config or DEFAULT_HOOK_CONFIG
        self.engine = MatchingEngine(max_levels=self.config.max_match_levels)
        self.registry = registry or PoolBookRegistry()
        self._pending_swaps: dict[PoolKey, PendingSwap] = {}
        self._liquidity_fingerprints: dict[PoolKey, tuple[int, int, int, int]] = {}
        self._locked: set[PoolKey] = set()

    @staticmethod
    def permissions() -> HookPermissions:
        """Callbacks this hook implements."""
        return HookPermissions(
            before_initialize=True,
            after_initialize=True,
            before_swap=True,
            after_swap=True,
            before_modify_liquidity=True,
            after_modify_liquidity=True,
            before_swap_returns_delta=True,
        )

    # =========================================================================
    # Atomic sections
    # =========================================================================

    @contextmanager
    def _guard(self, key: PoolKey, operation: str) -> Iterator[None]:
        """Reject re-entry into any state-changing call on the same pool."""
        if key in self._locked:
            raise ReentrantCall(f"{operation} re-entered on pool {key.pool_id[:10]}")
        self._locked.add(key)
        try:
            yield
        finally:
            self._locked.discard(key)

    @contextmanager
    def _atomic(self, entry: PoolEntry, operation: str) -> Iterator[OrderBook]:
        """Run a book mutation all-or-nothing; yields the pre-call snapshot.

        A pool with a swap between before_swap and after_swap accepts no
        other mutation until the swap completes or is aborted.
        """
        if entry.key in self._pending_swaps:
            exc = ReentrantCall(
                f"{operation} while a swap is pending on {entry.key.pool_id[:10]}"
            )
            _log_abort(operation, entry.key, exc)
            raise exc
        book = entry.book
        snapshot = book.copy()
        with self._guard(entry.key, operation):
            try:
                yield snapshot
            except Exception as exc:
                book.restore(snapshot)
                _log_abort(operation, entry.key, exc)
                raise

    # =========================================================================
    # Initialization
    # =========================================================================

    def before_initialize(self, sender: str, key: PoolKey, sqrt_price_x96: int) -> HookSelector:
        """Prepare an empty book for a new pool.

        Raises:
            HookAddressMismatch: If the key names another hook
            AlreadyInitialized: If the pool already has a book
        """
        if key.hooks != self.address:
            raise HookAddressMismatch(
                f"Pool key hook {key.hooks} does not match this hook {self.address}"
            )
        self.registry.prepare(key, sqrt_price_x96)
        logger.info(
            "pool_initializing",
            pool_id=key.pool_id[:10],
            sender=normalize_address(sender)[-8:],
            currency0=key.currency0[-8:],
            currency1=key.currency1[-8:],
            fee=key.fee,
        )
        return HookSelector.BEFORE_INITIALIZE

    def after_initialize(
        self, sender: str, key: PoolKey, sqrt_price_x96: int, tick: int
    ) -> HookSelector:
        """Activate the prepared book; the pool now accepts swaps.

        Raises:
            PoolNotInitialized: If before_initialize did not run for this key
        """
        _ = (sender, sqrt_price_x96)
        self.registry.activate(key, tick)
        logger.info("pool_activated", pool_id=key.pool_id[:10], tick=tick)
        return HookSelector.AFTER_INITIALIZE

    # =========================================================================
    # Swaps
    # =========================================================================

    def before_swap(
        self, sender: str, key: PoolKey, params: SwapParams, hook_data: bytes = b""
    ) -> tuple[HookSelector, BeforeSwapDelta, int]:
        """Match the swap against the book before the AMM prices it.

        Returns:
            (selector, delta for the matched part, LP fee override or 0)

        Raises:
            PoolNotInitialized: If the pool is not active
            ReentrantCall: If a swap on this pool is already in flight
            DeltaInvariantViolation: If the delta is larger than the swap or
                points the wrong way
            CrossedBook: If the book is crossed after matching
        """
        _ = hook_data
        entry = self.registry.require_active(key)
        request = swap_request_from_params(params)
        with self._atomic(entry, "before_swap") as snapshot:
            result = self.engine.match(entry.book, request)
            _check_swap_delta(params, result.delta)
            entry.book.assert_not_crossed()
            fee_override = self.config.fee_policy.lp_fee_override(key, result)

        self._pending_swaps[key] = PendingSwap(params=params, result=result, snapshot=snapshot)

        if result.has_fill:
            logger.info(
                "swap_matched",
                pool_id=key.pool_id[:10],
                sender=normalize_address(sender)[-8:],
                direction=request.direction.value,
                amount_specified=params.amount_specified,
                filled=result.filled_quantity,
                average_price=result.average_price,
                unmatched=result.remaining_unmatched_amount,
                fills=len(result.fills),
                depth_capped=result.depth_capped,
            )
        return HookSelector.BEFORE_SWAP, result.delta, fee_override

    def after_swap(
        self,
        sender: str,
        key: PoolKey,
        params: SwapParams,
        delta: BalanceDelta,
        hook_data: bytes = b"",
    ) -> tuple[HookSelector, int]:
        """Reconcile the AMM leg against the book leg.

        Args:
            delta: Balance change realized by the AMM leg alone

        Returns:
            (selector, 0); the hook takes no further delta here

        Raises:
            DeltaMismatch: If AMM leg + book leg != requested amount; the
                book is restored to its state before before_swap
            BoundaryMismatch: If no swap is pending or params changed
        """
        _ = (sender, hook_data)
        entry = self.registry.require_active(key)
        pending = self._pending_swaps.pop(key, None)
        if pending is None:
            exc: HookError = BoundaryMismatch(
                f"after_swap without before_swap on pool {key.pool_id[:10]}"
            )
            _log_abort("after_swap", key, exc)
            raise exc

        with self._guard(key, "after_swap"):
            if pending.params != params:
                entry.book.restore(pending.snapshot)
                exc = BoundaryMismatch(
                    f"after_swap params {params} differ from before_swap {pending.params}"
                )
                _log_abort("after_swap", key, exc)
                raise exc

            requested = abs(params.amount_specified)
            amm_amount = abs(specified_amount(params, delta))
            hook_amount = pending.result.matched_specified
            if amm_amount + hook_amount != requested:
                entry.book.restore(pending.snapshot)
                exc = DeltaMismatch(requested, amm_amount, hook_amount)
                _log_abort("after_swap", key, exc)
                raise exc

        logger.debug(
            "swap_reconciled",
            pool_id=key.pool_id[:10],
            requested=requested,
            amm_amount=amm_amount,
            hook_amount=hook_amount,
        )
        return HookSelector.AFTER_SWAP, 0

    def abort_swap(self, key: PoolKey, reason: str = "amm_leg_failed") -> MatchResult:
        """Discard a pending swap whose AMM leg never completed.

        The book is restored to its state before before_swap and the pool
        accepts swaps and orders again.

        Returns:
            The match that was undone

        Raises:
            BoundaryMismatch: If no swap is pending on the pool
        """
        entry = self.registry.require_active(key)
        pending = self._pending_swaps.pop(key, None)
        if pending is None:
            exc = BoundaryMismatch(f"abort_swap without before_swap on pool {key.pool_id[:10]}")
            _log_abort("abort_swap", key, exc)
            raise exc

        with self._guard(key, "abort_swap"):
            entry.book.restore(pending.snapshot)
        logger.error(
            "call_aborted",
            operation="swap",
            pool_id=key.pool_id[:10],
            reason=reason,
            undone_fills=len(pending.result.fills),
            undone_quantity=pending.result.filled_quantity,
        )
        return pending.result

    # =========================================================================
    # Liquidity
    # =========================================================================

    def before_modify_liquidity(
        self,
        sender: str,
        key: PoolKey,
        params: ModifyLiquidityParams,
        hook_data: bytes = b"",
    ) -> HookSelector:
        """Validate a liquidity change; resting orders are not touched.

        Raises:
            PoolNotInitialized: If the pool is not active
            InvalidLiquidityParams: If tick_lower >= tick_upper
        """
        _ = (sender, hook_data)
        entry = self.registry.require_active(key)
        if params.tick_lower >= params.tick_upper:
            raise InvalidLiquidityParams(
                f"tick_lower {params.tick_lower} must be below tick_upper {params.tick_upper}"
            )
        self._liquidity_fingerprints[key] = entry.book.fingerprint()
        return HookSelector.BEFORE_MODIFY_LIQUIDITY

    def after_modify_liquidity(
        self,
        sender: str,
        key: PoolKey,
        params: ModifyLiquidityParams,
        delta: BalanceDelta,
        hook_data: bytes = b"",
    ) -> tuple[HookSelector, BalanceDelta]:
        """Check the book was unaffected by the liquidity change.

        Returns:
            (selector, zero BalanceDelta)

        Raises:
            BoundaryMismatch: If before_modify_liquidity did not run
            LiquidityAccountingMismatch: If resting-order totals changed
        """
        _ = (sender, params, delta, hook_data)
        entry = self.registry.require_active(key)
        before = self._liquidity_fingerprints.pop(key, None)
        if before is None:
            exc: HookError = BoundaryMismatch(
                f"after_modify_liquidity without before on pool {key.pool_id[:10]}"
            )
            _log_abort("after_modify_liquidity", key, exc)
            raise exc

        after = entry.book.fingerprint()
        if after != before:
            exc = LiquidityAccountingMismatch(
                f"Resting orders changed across liquidity modification: {before} -> {after}"
            )
            _log_abort("after_modify_liquidity", key, exc)
            raise exc
        return HookSelector.AFTER_MODIFY_LIQUIDITY, BalanceDelta.zero()

    # =========================================================================
    # Orders
    # =========================================================================

    def place_order(
        self, key: PoolKey, owner: str, side: Side, limit_price: int, quantity: int
    ) -> PlacementResult:
        """Place a limit order, matching any marketable part first.

        The order first trades against the opposite side at the resting
        orders' prices, exactly like a swap with a price limit. What is left
        rests in the book subject to the capacity policy.

        Raises:
            PoolNotInitialized: If the pool is not active
            InvalidQuantity / InvalidPrice: For non-positive inputs
            BookFull: If the side is at capacity and the order cannot rest
        """
        entry = self.registry.require_active(key)
        book = entry.book

        with self._atomic(entry, "place_order"):
            order = book.create_order(owner, side, limit_price, quantity)
            match = self.engine.match(
                book,
                SwapRequest(direction=side, amount_specified=quantity, price_limit=limit_price),
            )
            rest = (S(quantity) - match.filled_quantity).value

            placement = PlacementResult(
                order_id=order.id,
                filled_quantity=match.filled_quantity,
                rested_quantity=0,
                fills=match.fills,
            )
            if rest > 0:
                opposite = book.best(side.opposite)
                if opposite is not None and _crosses(order, opposite):
                    placement.unrested_quantity = rest
                else:
                    order.remaining_quantity = rest
                    placement.evicted = self._make_room(book, order)
                    book.insert(order)
                    placement.rested_quantity = rest
            book.assert_not_crossed()

        logger.info(
            "order_placed",
            pool_id=key.pool_id[:10],
            order_id=placement.order_id,
            owner=order.owner[-8:],
            side=side.value,
            price=limit_price,
            quantity=quantity,
            filled=placement.filled_quantity,
            rested=placement.rested_quantity,
            unrested=placement.unrested_quantity,
        )
        return placement

    def _make_room(self, book: OrderBook, order: Order) -> Order | None:
        """Apply the capacity policy before resting order.

        Returns:
            The evicted order, or None if there was room
        """
        cap = self.config.max_orders_per_side
        if cap is None or book.count(order.side) < cap:
            return None
        if self.config.depth_policy is DepthPolicy.REJECT:
            raise BookFull(f"{order.side.value} side is at capacity ({cap} orders)")

        worst = book.worst(order.side)
        if worst is None or not _ranks_before(order, worst):
            raise BookFull(f"Order would be the worst on a full {order.side.value} side")
        return book.evict_worst(order.side)

    def cancel_order(self, key: PoolKey, caller: str, order_id: int) -> int:
        """Cancel a resting order.

        Returns:
            The quantity that was still resting

        Raises:
            PoolNotInitialized: If the pool is not active
            OrderNotFound: If no such order rests (including repeat cancels)
            Unauthorized: If caller is not the owner
        """
        entry = self.registry.require_active(key)
        with self._atomic(entry, "cancel_order"):
            freed = entry.book.cancel(order_id, caller)
        logger.info(
            "order_canceled",
            pool_id=key.pool_id[:10],
            order_id=order_id,
            caller=normalize_address(caller)[-8:],
            freed=freed,
        )
        return freed

    # =========================================================================
    # Read-only views
    # =========================================================================

    def get_book(self, key: PoolKey) -> OrderBook:
        """The live book of an active pool (callers must not mutate it)."""
        return self.registry.require_active(key).book

    def orders_for(self, key: PoolKey, owner: str) -> list[Order]:
        """Resting orders of one owner in a pool's book."""
        return self.get_book(key).orders_for(owner)

    def depth(self, key: PoolKey, max_levels: int | None = None) -> DepthSnapshot:
        """Aggregated price-level view of a pool's book."""
        return depth_snapshot(self.get_book(key), max_levels=max_levels)

    def quote(self, key: PoolKey, request: SwapRequest) -> MatchResult:
        """Match a request against a copy of the book without mutating it."""
        return self.engine.match(self.get_book(key).copy(), request)


# =============================================================================
# Helpers
# =============================================================================


def swap_request_from_params(params: SwapParams) -> SwapRequest:
    """Translate pool swap parameters into a book request.

    zero_for_one pays base into the pool, i.e. the taker sells base and
    matches bids. The specified currency is base exactly when zero_for_one
    agrees with exact-input.
    """
    direction = Side.SELL if params.zero_for_one else Side.BUY
    price_limit: int | None = None
    if params.has_price_limit:
        price_limit = sqrt_price_x96_to_price(params.sqrt_price_limit_x96)
    return SwapRequest(
        direction=direction,
        amount_specified=params.amount_specified,
        price_limit=price_limit,
        specifies_quote=params.zero_for_one != params.is_exact_input,
    )


def specified_amount(params: SwapParams, delta: BalanceDelta) -> int:
    """Pick the specified currency's leg out of a BalanceDelta."""
    specified_is_token0 = params.zero_for_one == params.is_exact_input
    return delta.amount0 if specified_is_token0 else delta.amount1


def _check_swap_delta(params: SwapParams, delta: BeforeSwapDelta) -> None:
    """Enforce size and sign invariants of a beforeSwap delta."""
    requested = params.amount_specified
    if abs(delta.specified) > abs(requested):
        raise DeltaInvariantViolation(
            f"Delta {delta.specified} exceeds swap amount {requested}"
        )
    if delta.specified != 0 and (delta.specified > 0) != (requested > 0):
        raise DeltaInvariantViolation(
            f"Specified delta {delta.specified} inverts swap direction {requested}"
        )
    if delta.unspecified != 0 and (delta.unspecified > 0) == (requested > 0):
        raise DeltaInvariantViolation(
            f"Unspecified delta {delta.unspecified} has the same sign as swap {requested}"
        )


def _crosses(order: Order, opposite: Order) -> bool:
    if order.is_bid:
        return order.limit_price >= opposite.limit_price
    return order.limit_price <= opposite.limit_price


def _ranks_before(order: Order, resting: Order) -> bool:
    """Whether order has strictly better priority than a resting order.

    A new order loses ties on price because its insertion sequence is later.
    """
    if order.is_bid:
        return order.limit_price > resting.limit_price
    return order.limit_price < resting.limit_price


def _log_abort(operation: str, key: PoolKey, exc: BaseException) -> None:
    if isinstance(exc, HookError) and not exc.is_fatal:
        logger.info(
            "call_rejected",
            operation=operation,
            pool_id=key.pool_id[:10],
            error=type(exc).__name__,
            detail=str(exc),
        )
        return
    logger.error(
        "call_aborted",
        operation=operation,
        pool_id=key.pool_id[:10],
        error=type(exc).__name__,
        kind=exc.kind.value if isinstance(exc, HookError) else "unexpected",
        detail=str(exc),
    )


__all__ = [
    "HookController",
    "PendingSwap",
    "PlacementResult",
    "swap_request_from_params",
    "specified_amount",
]
