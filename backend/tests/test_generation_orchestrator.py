import asyncio
import time

import pytest

from app.services.generation_orchestrator import FailureClass, GenerationOrchestrator, ModeConfig
from app.services.llm_client import LLMNotConfiguredError, LLMTransportError


@pytest.fixture
async def make_orchestrator():
    created = []

    def _make(llm, deadline=3.0, *, preview_deadline=None, overhead=0.2, **kwargs):
        kwargs.setdefault("cooldown_s", 0)
        kwargs.setdefault("retry_backoff_s", 0.01)
        orchestrator = GenerationOrchestrator(
            llm,
            overhead_s=overhead,
            modes={"preview": ModeConfig(preview_deadline or deadline, 200), "full": ModeConfig(deadline, 400)},
            **kwargs,
        )
        created.append(orchestrator)
        return orchestrator

    yield _make
    for orchestrator in created:
        await orchestrator.shutdown()


async def test_successful_completion(make_orchestrator, make_llm):
    llm = make_llm("## Plan")
    outcome = await make_orchestrator(llm).submit("preview", "system", "user")
    assert outcome.ok
    assert outcome.text == "## Plan"
    assert outcome.attempts == 1
    assert llm.prompts == [("system", "user")]


async def test_slow_provider_times_out_within_bound(make_orchestrator, make_llm):
    orchestrator = make_orchestrator(make_llm("late", delay=5), deadline=0.3)
    started = time.monotonic()
    outcome = await orchestrator.submit("full", "s", "u")
    assert outcome.failure is FailureClass.TIMEOUT
    assert time.monotonic() - started < 0.3 + 0.2 + 0.3


async def test_queued_job_times_out_without_calling_provider(make_orchestrator, make_llm):
    llm = make_llm("late", delay=5)
    orchestrator = make_orchestrator(llm, deadline=0.4, preview_deadline=0.2, concurrency=1)
    first, second = await asyncio.gather(
        orchestrator.submit("full", "s", "u1"),
        orchestrator.submit("preview", "s", "u2"),
    )
    assert first.failure is FailureClass.TIMEOUT
    assert second.failure is FailureClass.TIMEOUT
    assert llm.calls == 1


async def test_transport_error_is_retried_once(make_orchestrator, make_llm):
    llm = make_llm(LLMTransportError("503"), "## Plan")
    outcome = await make_orchestrator(llm).submit("preview", "s", "u")
    assert outcome.ok
    assert outcome.attempts == 2


async def test_persistent_transport_error(make_orchestrator, make_llm):
    llm = make_llm(LLMTransportError("503"))
    outcome = await make_orchestrator(llm).submit("preview", "s", "u")
    assert outcome.failure is FailureClass.TRANSPORT_ERROR
    assert outcome.attempts == 2
    assert "503" in outcome.detail


async def test_no_retry_when_deadline_is_too_close(make_orchestrator, make_llm):
    llm = make_llm(LLMTransportError("503"), "## Plan")
    outcome = await make_orchestrator(llm, deadline=0.5).submit("preview", "s", "u")
    assert outcome.failure is FailureClass.TRANSPORT_ERROR
    assert llm.calls == 1


async def test_unconfigured_provider_is_not_retried(make_orchestrator, make_llm):
    llm = make_llm(LLMNotConfiguredError("no keys"))
    outcome = await make_orchestrator(llm).submit("full", "s", "u")
    assert outcome.failure is FailureClass.TRANSPORT_ERROR
    assert llm.calls == 1


async def test_blank_response_is_empty(make_orchestrator, make_llm):
    outcome = await make_orchestrator(make_llm("   \n")).submit("preview", "s", "u")
    assert outcome.failure is FailureClass.EMPTY_RESPONSE
    assert not outcome.ok


async def test_full_queue_is_rejected(make_orchestrator, make_llm):
    orchestrator = make_orchestrator(make_llm("ok", delay=0.3), deadline=2.0, concurrency=1, queue_size=1)
    running = asyncio.create_task(orchestrator.submit("preview", "s", "u1"))
    await asyncio.sleep(0.05)
    queued = asyncio.create_task(orchestrator.submit("preview", "s", "u2"))
    await asyncio.sleep(0)

    rejected = await orchestrator.submit("preview", "s", "u3")
    assert rejected.failure is FailureClass.TRANSPORT_ERROR
    assert rejected.detail == "queue full"

    first, second = await asyncio.gather(running, queued)
    assert first.ok and second.ok


async def test_status_counts_outcomes(make_orchestrator, make_llm):
    orchestrator = make_orchestrator(make_llm("## Plan", ""))
    await orchestrator.submit("preview", "s", "u")
    await orchestrator.submit("preview", "s", "u")
    status = orchestrator.status()
    assert status["counters"]["submitted"] == 2
    assert status["counters"]["ok"] == 1
    assert status["counters"]["empty_response"] == 1
    assert status["workers"] == 1
    assert status["queue_depth"] == 0


async def test_unknown_mode_is_rejected(make_orchestrator, make_llm):
    with pytest.raises(ValueError):
        await make_orchestrator(make_llm("x")).submit("draft", "s", "u")


async def test_restarts_after_shutdown(make_orchestrator, make_llm):
    orchestrator = make_orchestrator(make_llm("## Plan"))
    await orchestrator.submit("preview", "s", "u")
    await orchestrator.shutdown()
    assert orchestrator.status()["workers"] == 0

    outcome = await orchestrator.submit("preview", "s", "u")
    assert outcome.ok


async def test_shutdown_settles_running_and_queued_jobs(make_orchestrator, make_llm):
    orchestrator = make_orchestrator(make_llm("late", delay=5), deadline=3.0, concurrency=1)
    running = asyncio.create_task(orchestrator.submit("preview", "s", "u1"))
    await asyncio.sleep(0.05)
    queued = asyncio.create_task(orchestrator.submit("preview", "s", "u2"))
    await asyncio.sleep(0)

    started = time.monotonic()
    await orchestrator.shutdown()
    first, second = await asyncio.gather(running, queued)
    assert time.monotonic() - started < 1.0
    for outcome in (first, second):
        assert outcome.failure is FailureClass.TRANSPORT_ERROR
        assert outcome.detail == "shutdown"
