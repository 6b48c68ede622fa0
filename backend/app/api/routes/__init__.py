"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .lp import router as lp_router
from .portfolio import router as portfolio_router

api_router = APIRouter()
api_router.include_router(portfolio_router, tags=["portfolio"])
api_router.include_router(lp_router, prefix="/lp", tags=["liquidity"])

__all__ = ["api_router"]
