"""Transaction receipts returned by the HTTP surface.

Every state-changing API call produces a receipt. Calls that complete are
CONFIRMED; calls that raise are FAILED, with the failure classified only
coarsely so internal detail never reaches the client.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field

from flowhook.errors import ErrorKind, HookError


class TxStatus(str, Enum):
    """Lifecycle status of a submitted call."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class TransactionReceipt(BaseModel):
    """Record of one state-changing call."""

    identifier: str = Field(description="Opaque receipt identifier (0x-prefixed hex)")
    timestamp: datetime
    status: TxStatus
    network: str
    failure: str | None = Field(
        default=None, description="Coarse failure class for FAILED receipts."
    )

    model_config = {"populate_by_name": True}

    def export(self) -> dict[str, object]:
        """Flat JSON-ready dict with a millisecond Unix timestamp."""
        data: dict[str, object] = {
            "identifier": self.identifier,
            "timestamp": int(self.timestamp.timestamp() * 1000),
            "status": self.status.value,
            "network": self.network,
        }
        if self.failure is not None:
            data["failure"] = self.failure
        return data


def new_identifier() -> str:
    """32-byte random identifier in the shape of a transaction hash."""
    return "0x" + uuid.uuid4().hex + uuid.uuid4().hex


def classify_failure(exc: BaseException) -> str:
    """Map an exception to the failure class exposed to clients.

    User errors keep their kind ("user"); invariant and boundary failures
    and anything unexpected collapse into "internal".
    """
    if isinstance(exc, HookError) and exc.kind is ErrorKind.USER:
        return ErrorKind.USER.value
    return "internal"


def user_message(exc: BaseException) -> str:
    """Generic message safe to return to clients."""
    if classify_failure(exc) == ErrorKind.USER.value:
        return f"Request rejected: {type(exc).__name__}"
    return "Internal error; the call was rolled back"


def make_receipt(network: str, exc: BaseException | None = None) -> TransactionReceipt:
    """Build a CONFIRMED receipt, or a FAILED one when exc is given."""
    return TransactionReceipt(
        identifier=new_identifier(),
        timestamp=datetime.now(UTC),
        status=TxStatus.CONFIRMED if exc is None else TxStatus.FAILED,
        network=network,
        failure=None if exc is None else classify_failure(exc),
    )


__all__ = [
    "TxStatus",
    "TransactionReceipt",
    "new_identifier",
    "classify_failure",
    "user_message",
    "make_receipt",
]
