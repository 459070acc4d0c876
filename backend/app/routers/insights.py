"""Insights router — budget model and booking advisories without generation."""

from fastapi import APIRouter, HTTPException

from app.schemas.trip import AdviseRequest, AdvisoryResponse, BudgetRequest
from app.services.booking_advisor import advise
from app.services.budget_engine import compute_budget

router = APIRouter()


@router.post("/budget")
async def budget(req: BudgetRequest):
    """Per-category budget; a zero total is replaced by an estimate."""
    return compute_budget(
        req.total, req.days, req.style, req.travelers, req.destination, req.purpose
    ).to_dict()


@router.post("/advise", response_model=AdvisoryResponse)
async def booking_advice(req: AdviseRequest):
    try:
        advisory = advise(req.destination, req.activity_type, req.date, req.time_slot, req.group_size)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return advisory.to_dict()
