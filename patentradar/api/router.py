"""Aggregate API router for the FastAPI application."""

from fastapi import APIRouter

from patentradar.api.routes import patents

api_router = APIRouter()
api_router.include_router(patents.router)
