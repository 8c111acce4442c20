"""
API router configuration.
"""
from fastapi import APIRouter

from oauthflow.api.endpoints import oauth


def build_api_router(url_segment: str) -> APIRouter:
    """Router with the login flow mounted under ``url_segment``."""
    api_router = APIRouter()
    api_router.include_router(oauth.router, prefix=f"/{url_segment}", tags=["oauth"])
    return api_router
