"""Tests for the error taxonomy."""

import pytest

from flowhook import errors
from flowhook.errors import ErrorKind, HookError

INVARIANT = [
    errors.InsufficientQuantity(1, 2, 1),
    errors.CrossedBook(2, 1),
    errors.DeltaInvariantViolation("x"),
    errors.ReentrantCall("x"),
]
BOUNDARY = [errors.DeltaMismatch(3, 1, 1), errors.LiquidityAccountingMismatch("x")]
USER = [
    errors.OrderNotFound(1),
    errors.Unauthorized(1, "0xabc"),
    errors.InvalidQuantity("x"),
    errors.InvalidPrice("x"),
    errors.AlreadyInitialized("x"),
    errors.PoolNotInitialized("x"),
    errors.HookAddressMismatch("x"),
    errors.BookFull("x"),
    errors.InvalidLiquidityParams("x"),
]


@pytest.mark.parametrize("exc", INVARIANT)
def test_invariant_errors_are_fatal(exc):
    assert exc.kind is ErrorKind.INVARIANT
    assert exc.is_fatal


@pytest.mark.parametrize("exc", BOUNDARY)
def test_boundary_errors_are_fatal(exc):
    assert exc.kind is ErrorKind.BOUNDARY
    assert exc.is_fatal


@pytest.mark.parametrize("exc", USER)
def test_user_errors_are_recoverable(exc):
    assert exc.kind is ErrorKind.USER
    assert not exc.is_fatal


def test_all_derive_from_hook_error():
    for exc in INVARIANT + BOUNDARY + USER:
        assert isinstance(exc, HookError)


def test_messages_carry_context():
    assert "7" in str(errors.OrderNotFound(7))
    assert errors.DeltaMismatch(10, 4, 5).amm_amount == 4
