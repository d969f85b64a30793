"""Shared model types.

Pool-manager boundary types live in `flowhook.models.pool` and the HTTP
wire models in `flowhook.models.api`; they are imported from there directly
because both depend on `flowhook.constants`, which itself depends on this
package.
"""

from flowhook.models.types import (
    UINT256_MAX,
    Address,
    Int256,
    Uint256,
    is_valid_address,
    normalize_address,
)

__all__ = [
    "UINT256_MAX",
    "Address",
    "Int256",
    "Uint256",
    "is_valid_address",
    "normalize_address",
]
