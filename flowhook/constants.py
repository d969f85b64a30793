"""Protocol constants for the flowhook limit-order hook.

Centralizes fixed-point scales, delta bounds and default limits.
"""

from flowhook.models.types import is_valid_address

# Prices are expressed as quote (token1) per base (token0), scaled by 1e18
PRICE_SCALE = 10**18

# Average price reported when nothing was filled
NO_FILL_PRICE = 0

# Q64.96 fixed point used by the pool manager for sqrt prices
Q96 = 2**96

# Pool manager sqrt price bounds (TickMath.MIN_SQRT_PRICE / MAX_SQRT_PRICE)
MIN_SQRT_PRICE = 4295128739
MAX_SQRT_PRICE = 1461446703485210103287273052203988822378723970342

# Balance deltas are packed as two int128 values
INT128_MIN = -(2**127)
INT128_MAX = 2**127 - 1

# LP fee override flag returned from beforeSwap (LPFeeLibrary.OVERRIDE_FEE_FLAG)
OVERRIDE_FEE_FLAG = 0x400000
MAX_LP_FEE = 1_000_000

# Default bound on distinct price levels consumed by one matching pass
DEFAULT_MAX_MATCH_LEVELS = 32


def _validate_address(name: str, address: str) -> str:
    """Validate and return a well-known address.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# Native currency sentinel and the default hook deployment address
ADDRESS_ZERO = _validate_address("ADDRESS_ZERO", "0x0000000000000000000000000000000000000000")
DEFAULT_HOOK_ADDRESS = _validate_address(
    "DEFAULT_HOOK_ADDRESS", "0x00000000000000000000000000000000000010c8"
)
