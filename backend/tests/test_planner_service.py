import time

import pytest

from app.services.generation_orchestrator import GenerationOrchestrator, ModeConfig
from app.services.llm_client import LLMNotConfiguredError
from app.services import planner_service as planner_module
from app.services.planner_service import PlannerService


@pytest.fixture
async def planner_for(fake_store):
    orchestrators = []

    def _make(llm, deadline=3.0):
        orchestrator = GenerationOrchestrator(
            llm,
            cooldown_s=0,
            retry_backoff_s=0.01,
            overhead_s=0.2,
            modes={"preview": ModeConfig(deadline, 200), "full": ModeConfig(deadline, 400)},
        )
        orchestrators.append(orchestrator)
        return PlannerService(orchestrator=orchestrator, store=fake_store, include_weather=False)

    yield _make
    for orchestrator in orchestrators:
        await orchestrator.shutdown()


async def test_clean_model_output_is_used(planner_for, make_llm, clean_plan, paris_trip):
    plan = await planner_for(make_llm(clean_plan)).generate_preview(paris_trip)
    assert plan.result.provenance == "ai"
    assert plan.result.failure is None
    assert plan.result.markdown == clean_plan
    assert 'id="hotel-widget"' in plan.result.document


async def test_full_plan_is_padded_to_trip_length(planner_for, make_llm, clean_plan, paris_trip):
    plan = await planner_for(make_llm(clean_plan)).generate_full_plan(paris_trip)
    assert plan.result.provenance == "ai"
    assert "Day 5 — Open Exploration (2025-07-16)" in plan.result.markdown


async def test_generic_output_falls_back(planner_for, make_llm, generic_plan, paris_trip):
    plan = await planner_for(make_llm(generic_plan)).generate_preview(paris_trip)
    assert plan.result.provenance == "fallback"
    assert plan.result.failure == "generic_content_detected"
    assert plan.result.generic_matches == ["Local Restaurant", "Main Square"]
    assert "Local Restaurant" not in plan.result.document
    assert "This is a preview" in plan.result.markdown


async def test_slow_model_falls_back_in_time(planner_for, make_llm, paris_trip):
    planner = planner_for(make_llm("## Plan", delay=5), deadline=0.3)
    started = time.monotonic()
    plan = await planner.generate_full_plan(paris_trip)
    assert time.monotonic() - started < 1.5
    assert plan.result.provenance == "fallback"
    assert plan.result.failure == "timeout"
    assert plan.result.markdown.count("### Day ") == 5


async def test_missing_provider_falls_back(planner_for, make_llm, unknown_trip):
    plan = await planner_for(make_llm(LLMNotConfiguredError("no keys"))).generate_preview(unknown_trip)
    assert plan.result.provenance == "fallback"
    assert plan.result.failure == "transport_error"
    assert "General suggestion" in plan.result.markdown


async def test_plan_record_is_stored(planner_for, make_llm, clean_plan, paris_trip, fake_store):
    plan = await planner_for(make_llm(clean_plan)).generate_preview(paris_trip)
    assert plan.plan_id == "plan1"
    stored = fake_store.records["plan1"]
    assert stored["provenance"] == "ai"
    assert stored["request"]["destination"] == "Paris, France"
    assert stored["request"]["days"] == 5
    assert stored["budget"]["derived"] is True
    assert stored["weather"] is None
    assert plan.to_record()["id"] == "plan1"


async def test_prompt_carries_trip_context(planner_for, make_llm, clean_plan, paris_trip):
    llm = make_llm(clean_plan)
    await planner_for(llm).generate_preview(paris_trip)
    system, user = llm.prompts[0]
    assert "## 🏨 Accommodation" in system
    assert "Paris, France" in user
    assert "PREVIEW" in user
    assert "Bastille Day" in user


async def test_unknown_mode(planner_for, make_llm, paris_trip):
    with pytest.raises(ValueError):
        await planner_for(make_llm("x")).generate(paris_trip, "draft")


async def test_malformed_link_in_model_output_is_kept(planner_for, make_llm, clean_plan, paris_trip):
    text = clean_plan + '\n<p><a href="http://[broken">odd link</a></p>\n'
    plan = await planner_for(make_llm(text)).generate_preview(paris_trip)
    assert plan.result.provenance == "ai"
    assert 'href="http://[broken"' in plan.result.document


async def test_render_failure_falls_back(planner_for, make_llm, clean_plan, paris_trip, monkeypatch):
    real_pipeline = planner_module.run_pipeline

    def failing_for_model_text(text, destination, **kwargs):
        if kwargs.get("validate", True):
            raise ValueError("Invalid IPv6 URL")
        return real_pipeline(text, destination, **kwargs)

    monkeypatch.setattr(planner_module, "run_pipeline", failing_for_model_text)
    plan = await planner_for(make_llm(clean_plan)).generate_preview(paris_trip)
    assert plan.result.provenance == "fallback"
    assert plan.result.failure == "render_error"
    assert 'id="hotel-widget"' in plan.result.document
