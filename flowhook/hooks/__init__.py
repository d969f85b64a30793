"""Pool-manager callbacks and the order-book hook controller."""

from .base import HookPermissions, Hooks, HookSelector
from .controller import HookController, PlacementResult, swap_request_from_params
from .registry import PoolBookRegistry, PoolEntry, PoolState

__all__ = [
    "Hooks",
    "HookSelector",
    "HookPermissions",
    "HookController",
    "PlacementResult",
    "swap_request_from_params",
    "PoolBookRegistry",
    "PoolEntry",
    "PoolState",
]
