"""Cooperative cancellation handle shared between a caller and the portal client."""

from __future__ import annotations

from typing import Optional

from patentradar.core.errors import Cancelled


class CancellationToken:
    """Flag a caller flips when it no longer wants the result (e.g. navigated away)."""

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: Optional[str] = None) -> None:
        self._cancelled = True
        self._reason = reason

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise Cancelled(self._reason or "Operation cancelled by caller")


def check_cancelled(token: Optional[CancellationToken]) -> None:
    """Raise ``Cancelled`` if ``token`` has been cancelled; ``None`` never cancels."""

    if token is not None:
        token.raise_if_cancelled()
