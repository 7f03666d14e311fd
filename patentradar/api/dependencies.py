"""Shared API dependencies for FastAPI routes."""

from typing import Annotated

from fastapi import Depends, Request

from patentradar.services.portal import PatentPortalClient


def get_portal_client(request: Request) -> PatentPortalClient:
    """Return the portal client wired up in ``create_app``."""

    return request.app.state.portal_client


PortalClient = Annotated[PatentPortalClient, Depends(get_portal_client)]
