"""Domain error taxonomy.

Not-found outcomes are return values, not exceptions. The errors below are
either hard failures (merging unknown identities) or typed, per-signal
degradations the caller is expected to absorb.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID

    from .enums import MatchStatus, Signal


class IdentityResolutionError(RuntimeError):
    """Base class for identity resolution failures."""


class IdentityNotFoundError(IdentityResolutionError):
    def __init__(self, identity_id: UUID) -> None:
        super().__init__(f"Customer identity {identity_id} does not exist")
        self.identity_id = identity_id


class InvalidMergeError(IdentityResolutionError):
    """Raised when two identities cannot be merged as requested."""


class MatchReviewError(IdentityResolutionError):
    def __init__(self, match_id: UUID, status: MatchStatus | None) -> None:
        detail = "does not exist" if status is None else f"is already {status}"
        super().__init__(f"Identity match {match_id} {detail}")
        self.match_id = match_id
        self.status = status


class OrderNotFoundError(LookupError):
    def __init__(self, order_id: UUID) -> None:
        super().__init__(f"Order {order_id} does not exist")
        self.order_id = order_id


class SignalUnavailableError(RuntimeError):
    """A behavioural signal source could not produce statistics."""

    def __init__(self, signal: Signal, message: str) -> None:
        super().__init__(f"{signal} signal unavailable: {message}")
        self.signal = signal
