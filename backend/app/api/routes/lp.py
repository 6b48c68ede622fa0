"""Concentrated-liquidity position simulation."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from app.schemas import LPSimulationRequest, LPSimulationResponse
from crypto_ledger import LedgerError
from crypto_ledger.clmath import impermanent_loss, position_delta, required_amounts

router = APIRouter()


@router.post("/simulate", response_model=LPSimulationResponse)
async def simulate_position(request: LPSimulationRequest) -> LPSimulationResponse:
    """Split a deposit across a price range and project it to a target price."""

    try:
        split = required_amounts(
            request.current_price, request.lower_price, request.upper_price, request.deposit_value
        )
        response = LPSimulationResponse(
            amount0=split.amount0,
            amount1=split.amount1,
            liquidity=split.liquidity,
            split0=split.split0,
            split1=split.split1,
            delta=position_delta(
                request.current_price, request.lower_price, request.upper_price, split.liquidity
            ),
        )
        if request.target_price is not None:
            loss = impermanent_loss(
                request.current_price,
                request.target_price,
                request.lower_price,
                request.upper_price,
                request.deposit_value,
            )
            response.lp_value = loss.lp_value
            response.held_value = loss.held_value
            response.il_percentage = loss.il_percentage
            response.il_quote = loss.il_quote
    except LedgerError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return response


__all__ = ["router", "simulate_position"]
