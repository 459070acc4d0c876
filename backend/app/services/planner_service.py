"""Planner service — request → context → LLM or offline plan → rendered document."""

import logging
import time
from dataclasses import dataclass

from app.schemas.trip import TripRequest
from app.services.content.pipeline import PipelineResult, run_pipeline
from app.services.fallback_synthesizer import PREVIEW_DAYS, synthesize_plan
from app.services.generation_orchestrator import (
    FailureClass,
    GenerationOrchestrator,
    GenerationResult,
    generation_orchestrator,
)
from app.services.plan_store import PlanStore, plan_store
from app.services.trip_context import TripContext, assemble_context, system_prompt, user_prompt

logger = logging.getLogger(__name__)

MODES = ("preview", "full")


@dataclass
class GeneratedPlan:
    result: GenerationResult
    context: TripContext
    plan_id: str | None = None

    def to_record(self) -> dict:
        trip = self.context.trip
        return {
            "id": self.plan_id,
            "request": trip.model_dump(mode="json"),
            "destination": trip.destination,
            "mode": self.result.mode,
            "provenance": self.result.provenance,
            "failure": self.result.failure,
            "generic_matches": list(self.result.generic_matches),
            "html": self.result.document,
            "markdown": self.result.markdown,
            "elapsed_ms": self.result.elapsed_ms,
            "attempts": self.result.attempts,
            "budget": self.context.budget.to_dict(),
            "advisories": list(self.context.advisories),
            "weather": self.context.weather,
            "created_at": self.result.timestamp.isoformat(),
        }


class PlannerService:
    def __init__(
        self,
        orchestrator: GenerationOrchestrator | None = None,
        store: PlanStore | None = None,
        include_weather: bool = True,
    ):
        self._orchestrator = orchestrator or generation_orchestrator
        self._store = store or plan_store
        self._include_weather = include_weather

    async def generate_preview(self, trip: TripRequest) -> GeneratedPlan:
        return await self.generate(trip, "preview")

    async def generate_full_plan(self, trip: TripRequest) -> GeneratedPlan:
        return await self.generate(trip, "full")

    async def generate(self, trip: TripRequest, mode: str) -> GeneratedPlan:
        if mode not in MODES:
            raise ValueError(f"Unknown generation mode: {mode}")
        started = time.monotonic()
        ctx = await assemble_context(trip, include_weather=self._include_weather)

        outcome = await self._orchestrator.submit(mode, system_prompt(), user_prompt(ctx, mode))
        failure = outcome.failure.value if outcome.failure else None
        rendered: PipelineResult | None = None
        generic_matches: list[str] = []

        if outcome.ok:
            days = min(trip.days, PREVIEW_DAYS) if mode == "preview" else trip.days
            try:
                candidate = run_pipeline(outcome.text, trip.destination, days=days, start=trip.start_date)
            except Exception as e:
                logger.error(f"Could not render {mode} model output for {trip.destination}: {e}")
                failure = FailureClass.RENDER_ERROR.value
            else:
                if candidate.is_generic:
                    failure = FailureClass.GENERIC_CONTENT.value
                    generic_matches = candidate.generic_matches
                else:
                    rendered = candidate

        provenance = "ai"
        if rendered is None:
            provenance = "fallback"
            markdown = synthesize_plan(
                trip, mode, budget=ctx.budget, advisories=ctx.advisories, weather=ctx.weather,
            )
            rendered = run_pipeline(markdown, trip.destination, validate=False)

        result = GenerationResult(
            document=rendered.html,
            markdown=rendered.markdown,
            provenance=provenance,
            mode=mode,
            failure=failure,
            elapsed_ms=int((time.monotonic() - started) * 1000),
            attempts=outcome.attempts,
            generic_matches=generic_matches,
        )
        logger.info(
            f"{mode.capitalize()} plan for {trip.destination}: provenance={provenance} "
            f"failure={failure or '-'} attempts={result.attempts} elapsed={result.elapsed_ms}ms"
        )

        plan = GeneratedPlan(result=result, context=ctx)
        plan.plan_id = await self._store.save(plan.to_record())
        return plan


# Singleton
planner_service = PlannerService()
