"""Plans router — preview/full generation, retrieval and exports."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from app.schemas.trip import PlanResponse, TripRequest
from app.services.export_service import export_service
from app.services.plan_store import PlanStore, plan_store
from app.services.planner_service import PlannerService, planner_service

logger = logging.getLogger(__name__)

router = APIRouter()


def get_planner() -> PlannerService:
    return planner_service


def get_plan_store() -> PlanStore:
    return plan_store


async def _load(plan_id: str, store: PlanStore) -> dict:
    record = await store.get(plan_id)
    if not record:
        raise HTTPException(status_code=404, detail="Plan not found")
    return record


@router.post("/preview", response_model=PlanResponse)
async def create_preview(trip: TripRequest, planner: PlannerService = Depends(get_planner)):
    """Short plan (first days only). Always answers: model output or the offline plan."""
    plan = await planner.generate_preview(trip)
    return plan.to_record()


@router.post("/plan", response_model=PlanResponse)
async def create_plan(trip: TripRequest, planner: PlannerService = Depends(get_planner)):
    """Full plan covering every trip day."""
    plan = await planner.generate_full_plan(trip)
    return plan.to_record()


@router.get("/plan/latest", response_model=PlanResponse)
async def get_latest_plan(store: PlanStore = Depends(get_plan_store)):
    record = await store.latest()
    if not record:
        raise HTTPException(status_code=404, detail="No plans yet")
    return record


@router.get("/plan/{plan_id}", response_model=PlanResponse)
async def get_plan(plan_id: str, store: PlanStore = Depends(get_plan_store)):
    return await _load(plan_id, store)


@router.get("/plan/{plan_id}/pdf")
async def get_plan_pdf(plan_id: str, store: PlanStore = Depends(get_plan_store)):
    record = await _load(plan_id, store)
    pdf = export_service.plan_pdf(record)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="plan-{plan_id}.pdf"'},
    )


@router.get("/plan/{plan_id}/ics")
async def get_plan_ics(plan_id: str, store: PlanStore = Depends(get_plan_store)):
    record = await _load(plan_id, store)
    return Response(
        content=export_service.plan_ics(record),
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="plan-{plan_id}.ics"'},
    )
