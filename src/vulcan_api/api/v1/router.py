"""Aggregate the v1 API routers."""

from __future__ import annotations

from fastapi import APIRouter

from vulcan_api.features.memberships.router import router as memberships_router
from vulcan_api.features.rules.router import router as rules_router


def create_api_router() -> APIRouter:
    api_router = APIRouter(prefix="/v1")
    api_router.include_router(memberships_router)
    api_router.include_router(rules_router)
    return api_router


__all__ = ["create_api_router"]
