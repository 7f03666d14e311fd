"""Typed failures raised while talking to the technology-transfer portal."""

from __future__ import annotations

from typing import Optional


class PortalError(Exception):
    """Base class for every error surfaced by the portal client."""


class EmptyQuery(PortalError):
    """The caller passed a blank search string."""


class InvalidURL(PortalError):
    """A request URL could not be constructed from the given inputs."""


class NetworkError(PortalError):
    """Transport-level failure: timeout, DNS, refused or reset connection."""


class UpstreamHTTPError(PortalError):
    """The portal answered with a non-200 status."""

    def __init__(self, status: int, url: Optional[str] = None) -> None:
        self.status = status
        self.url = url
        message = f"Portal returned HTTP {status}"
        if url:
            message = f"{message} for {url}"
        super().__init__(message)


class MalformedUpstreamResponse(PortalError):
    """The payload did not match the envelope shape the adapters expect."""


class Cancelled(PortalError):
    """Cooperative cancellation was observed before the operation finished."""
