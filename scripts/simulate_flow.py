#!/usr/bin/env python3
"""Drive random order flow and swaps through one hooked pool.

Places limit orders around a reference price, routes swaps through
before_swap/after_swap with a simulated AMM leg for the unmatched part,
and prints the final depth ladder.

Usage:
    python scripts/simulate_flow.py --orders 200 --swaps 50 --seed 7
    python scripts/simulate_flow.py --max-orders-per-side 20 --policy evict_worst -v
"""

import argparse
import logging
import random
import sys
from pathlib import Path

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from flowhook.book.depth import DepthSnapshot  # noqa: E402
from flowhook.book.order import Side  # noqa: E402
from flowhook.config import DepthPolicy, HookConfig  # noqa: E402
from flowhook.constants import PRICE_SCALE  # noqa: E402
from flowhook.errors import HookError  # noqa: E402
from flowhook.hooks.controller import HookController, specified_amount  # noqa: E402
from flowhook.math.price import price_to_sqrt_price_x96  # noqa: E402
from flowhook.models.pool import BalanceDelta, PoolKey, SwapParams  # noqa: E402

logger = structlog.get_logger()

BASE_TOKEN = "0x1000000000000000000000000000000000000001"
QUOTE_TOKEN = "0x2000000000000000000000000000000000000002"
SENDER = "0x00000000000000000000000000000000000000aa"


def random_owner(rng: random.Random) -> str:
    return "0x" + "".join(rng.choice("0123456789abcdef") for _ in range(40))


def amm_leg(params: SwapParams, hook_specified: int) -> BalanceDelta:
    """Balance delta of an AMM that fills exactly the unmatched part.

    Only the specified currency is populated; reconciliation reads nothing
    else.
    """
    remainder = params.amount_specified - hook_specified
    if params.zero_for_one == params.is_exact_input:
        return BalanceDelta(amount0=-remainder, amount1=0)
    return BalanceDelta(amount0=0, amount1=-remainder)


def simulate(
    hook: HookController,
    key: PoolKey,
    rng: random.Random,
    order_count: int,
    swap_count: int,
    mid_price: int,
) -> dict[str, int]:
    """Interleave order placement and swaps; return counters."""
    stats = {"placed": 0, "rejected": 0, "swaps": 0, "book_filled": 0}
    actions = ["order"] * order_count + ["swap"] * swap_count
    rng.shuffle(actions)

    for action in actions:
        if action == "order":
            side = rng.choice([Side.BUY, Side.SELL])
            # Spread orders +-5% around mid; some cross and fill immediately
            price = mid_price * rng.randint(950, 1050) // 1000
            quantity = rng.randint(1, 100) * PRICE_SCALE // 10
            try:
                hook.place_order(key, random_owner(rng), side, price, quantity)
                stats["placed"] += 1
            except HookError as exc:
                stats["rejected"] += 1
                logger.debug("order_rejected", error=type(exc).__name__)
            continue

        zero_for_one = rng.random() < 0.5
        amount = rng.randint(1, 50) * PRICE_SCALE // 10
        params = SwapParams(
            zero_for_one=zero_for_one,
            amount_specified=amount if rng.random() < 0.5 else -amount,
        )
        _, delta, _ = hook.before_swap(SENDER, key, params)
        hook.after_swap(SENDER, key, params, amm_leg(params, delta.specified))
        stats["swaps"] += 1
        if delta.specified != 0:
            stats["book_filled"] += 1
            logger.debug(
                "swap_simulated",
                zero_for_one=zero_for_one,
                amount_specified=params.amount_specified,
                book_specified=delta.specified,
                amm_specified=specified_amount(params, amm_leg(params, delta.specified)),
            )

    return stats


def print_depth(snapshot: DepthSnapshot) -> None:
    def fmt(value: int) -> str:
        return f"{value / PRICE_SCALE:>14.4f}"

    print(f"{'price':>14} {'quantity':>14} {'orders':>7} {'cumulative':>14}")
    for level in reversed(snapshot.asks):
        print(f"{fmt(level.price)} {fmt(level.quantity)} {level.order_count:>7} {fmt(level.total)}")
    print("-" * 52 + f"  spread {snapshot.spread / PRICE_SCALE:.4f}")
    for level in snapshot.bids:
        print(f"{fmt(level.price)} {fmt(level.quantity)} {level.order_count:>7} {fmt(level.total)}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Simulate limit-order flow and swaps against one hooked pool"
    )
    parser.add_argument("--orders", type=int, default=100, help="Limit orders to place")
    parser.add_argument("--swaps", type=int, default=30, help="Swaps to route")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument(
        "--price", type=float, default=2000.0, help="Reference price (quote per base)"
    )
    parser.add_argument("--levels", type=int, default=10, help="Depth levels to print per side")
    parser.add_argument("--max-match-levels", type=int, default=32)
    parser.add_argument("--max-orders-per-side", type=int, default=None)
    parser.add_argument(
        "--policy",
        choices=[p.value for p in DepthPolicy],
        default=DepthPolicy.REJECT.value,
        help="Behaviour when a side is full",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every event")

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )

    config = HookConfig(
        max_match_levels=args.max_match_levels,
        max_orders_per_side=args.max_orders_per_side,
        depth_policy=DepthPolicy(args.policy),
    )
    hook = HookController(config=config)
    key = PoolKey(currency0=BASE_TOKEN, currency1=QUOTE_TOKEN, fee=3000, hooks=hook.address)

    mid_price = int(args.price * PRICE_SCALE)
    sqrt_price = price_to_sqrt_price_x96(mid_price)
    hook.before_initialize(SENDER, key, sqrt_price)
    hook.after_initialize(SENDER, key, sqrt_price, 0)

    stats = simulate(hook, key, random.Random(args.seed), args.orders, args.swaps, mid_price)

    print("Order Flow Simulation")
    print("=" * 52)
    print(f"Pool: {key.pool_id[:18]}...")
    for name, value in stats.items():
        print(f"  {name:<12} {value}")
    print()
    print_depth(hook.depth(key, max_levels=args.levels))
    return 0


if __name__ == "__main__":
    sys.exit(main())
