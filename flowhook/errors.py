"""Error taxonomy for the order-book hook.

Three kinds of failure are distinguished:

- INVARIANT: the engine or book reached a state that correct code can never
  produce (crossed book after matching, consuming more than rests, a delta
  whose sign or size disagrees with the swap). Fatal; the enclosing call is
  rolled back and the error propagates.
- BOUNDARY: the pool manager and the hook disagree about what happened
  (post-swap reconciliation). Fatal as well, but reported as a separate kind
  so integration faults can be told apart from engine faults.
- USER: the caller asked for something invalid (unknown order, someone
  else's order, zero quantity, double initialization). Only the offending
  call fails; book state is untouched.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Classification of hook failures."""

    INVARIANT = "invariant"
    BOUNDARY = "boundary"
    USER = "user"


class HookError(Exception):
    """Base class for all hook errors."""

    kind: ErrorKind = ErrorKind.USER

    @property
    def is_fatal(self) -> bool:
        """True for failures that must abort the whole transaction."""
        return self.kind is not ErrorKind.USER


# =============================================================================
# Invariant violations
# =============================================================================


class InvariantViolation(HookError):
    """An internal invariant was broken; indicates a logic defect."""

    kind = ErrorKind.INVARIANT


class InsufficientQuantity(InvariantViolation):
    """Attempt to consume more than an order's remaining quantity."""

    def __init__(self, order_id: int, requested: int, remaining: int) -> None:
        super().__init__(
            f"Order {order_id}: cannot consume {requested}, only {remaining} remaining"
        )
        self.order_id = order_id
        self.requested = requested
        self.remaining = remaining


class CrossedBook(InvariantViolation):
    """Best bid is at or above best ask after a matching pass."""

    def __init__(self, best_bid: int, best_ask: int) -> None:
        super().__init__(f"Crossed book: best bid {best_bid} >= best ask {best_ask}")
        self.best_bid = best_bid
        self.best_ask = best_ask


class DeltaInvariantViolation(InvariantViolation):
    """Returned delta exceeds the swap amount or inverts its direction."""

    pass


class ReentrantCall(InvariantViolation):
    """A swap callback was entered while another swap on the pool is pending."""

    pass


# =============================================================================
# Boundary mismatches
# =============================================================================


class BoundaryMismatch(HookError):
    """The pool manager's view of a call disagrees with the hook's."""

    kind = ErrorKind.BOUNDARY


class DeltaMismatch(BoundaryMismatch):
    """AMM leg plus hook leg does not add up to the requested swap amount."""

    def __init__(self, requested: int, amm_amount: int, hook_amount: int) -> None:
        super().__init__(
            f"Delta mismatch: requested {requested}, AMM executed {amm_amount}, "
            f"hook matched {hook_amount}"
        )
        self.requested = requested
        self.amm_amount = amm_amount
        self.hook_amount = hook_amount


class LiquidityAccountingMismatch(BoundaryMismatch):
    """Resting-order totals changed across a liquidity modification."""

    pass


# =============================================================================
# User errors
# =============================================================================


class UserError(HookError):
    """Recoverable caller error; aborts only the requesting call."""

    kind = ErrorKind.USER


class OrderNotFound(UserError):
    """No resting order with the given id."""

    def __init__(self, order_id: int) -> None:
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class Unauthorized(UserError):
    """Caller does not own the order."""

    def __init__(self, order_id: int, caller: str) -> None:
        super().__init__(f"{caller} is not the owner of order {order_id}")
        self.order_id = order_id
        self.caller = caller


class InvalidQuantity(UserError):
    """Zero or negative quantity."""

    pass


class InvalidPrice(UserError):
    """Zero or negative limit price."""

    pass


class AlreadyInitialized(UserError):
    """Pool already has an order book."""

    pass


class PoolNotInitialized(UserError):
    """Pool has no order book, or it has not been activated yet."""

    pass


class HookAddressMismatch(UserError):
    """Pool key names a different hook than this one."""

    pass


class BookFull(UserError):
    """Side is at capacity and the order cannot be rested."""

    pass


class InvalidLiquidityParams(UserError):
    """Tick range of a liquidity change is empty or inverted."""

    pass


__all__ = [
    "ErrorKind",
    "HookError",
    "InvariantViolation",
    "InsufficientQuantity",
    "CrossedBook",
    "DeltaInvariantViolation",
    "ReentrantCall",
    "BoundaryMismatch",
    "DeltaMismatch",
    "LiquidityAccountingMismatch",
    "UserError",
    "OrderNotFound",
    "Unauthorized",
    "InvalidQuantity",
    "InvalidPrice",
    "AlreadyInitialized",
    "PoolNotInitialized",
    "HookAddressMismatch",
    "BookFull",
    "InvalidLiquidityParams",
]
