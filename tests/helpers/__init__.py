"""Test helpers module for shared test utilities.

- constants: Token and actor addresses, common amounts
- factories: Pool keys, resting orders, initialized controllers
- fuzz: Seeded random inputs for property tests
"""

from tests.helpers.constants import (
    ALICE,
    BASE_TOKEN,
    BOB,
    CAROL,
    HOOK,
    ONE,
    OTHER_HOOK,
    QUOTE_TOKEN,
    ROUTER,
)
from tests.helpers.factories import amm_delta, make_active_hook, make_key, rest_order

__all__ = [
    # Constants
    "BASE_TOKEN",
    "QUOTE_TOKEN",
    "ALICE",
    "BOB",
    "CAROL",
    "ROUTER",
    "HOOK",
    "OTHER_HOOK",
    "ONE",
    # Factories
    "make_key",
    "rest_order",
    "make_active_hook",
    "amm_delta",
]
