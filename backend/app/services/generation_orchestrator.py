"""Generation orchestrator — queued, deadline-bounded LLM calls.

All generation requests (preview and full) share one bounded queue drained by
a small pool of worker tasks (one by default) with a cooldown between jobs.
Every job carries an absolute deadline that covers both queue wait and the
provider call. The caller never waits longer than deadline + overhead; when
that passes it gets a timeout outcome and moves on to the offline plan.

Failures are classified, never raised:
    timeout              deadline passed (in queue or during the call)
    transport_error      provider error after at most one retry, or no provider
    empty_response       provider answered with nothing
    generic_content_detected  set by the caller after validating the text
    render_error         set by the caller when the text could not be rendered
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from app.config import settings
from app.services.llm_client import LLMClient, LLMError, LLMNotConfiguredError, llm_client

logger = logging.getLogger(__name__)

# No retry unless this much time is left after the backoff
MIN_RETRY_WINDOW_S = 1.0
MAX_ATTEMPTS = 2


class FailureClass(str, Enum):
    EMPTY_RESPONSE = "empty_response"
    GENERIC_CONTENT = "generic_content_detected"
    TRANSPORT_ERROR = "transport_error"
    TIMEOUT = "timeout"
    RENDER_ERROR = "render_error"


@dataclass(frozen=True)
class ModeConfig:
    deadline_s: float
    max_tokens: int


def default_modes() -> dict[str, ModeConfig]:
    return {
        "preview": ModeConfig(settings.preview_deadline_s, settings.preview_max_tokens),
        "full": ModeConfig(settings.full_deadline_s, settings.full_max_tokens),
    }


@dataclass
class CompletionOutcome:
    """What the LLM lane produced for one job."""
    job_id: str
    mode: str
    text: str | None = None
    failure: FailureClass | None = None
    attempts: int = 0
    queued_ms: int = 0
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None and bool(self.text)


@dataclass
class GenerationJob:
    id: str
    mode: str
    system: str
    user: str
    max_tokens: int
    deadline: float  # loop.time()
    enqueued_at: float
    future: asyncio.Future
    attempts: int = 0


@dataclass
class GenerationResult:
    """Final, rendered result handed to callers and the plan store."""
    document: str
    markdown: str
    provenance: str  # "ai" | "fallback"
    mode: str
    failure: str | None = None
    elapsed_ms: int = 0
    attempts: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    generic_matches: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "document": self.document,
            "markdown": self.markdown,
            "provenance": self.provenance,
            "mode": self.mode,
            "failure": self.failure,
            "elapsed_ms": self.elapsed_ms,
            "attempts": self.attempts,
            "timestamp": self.timestamp.isoformat(),
            "generic_matches": list(self.generic_matches),
        }


class GenerationOrchestrator:
    """Single-lane (by default) queue in front of the LLM client."""

    def __init__(
        self,
        llm: LLMClient | None = None,
        *,
        concurrency: int | None = None,
        cooldown_s: float | None = None,
        retry_backoff_s: float | None = None,
        overhead_s: float | None = None,
        queue_size: int | None = None,
        modes: dict[str, ModeConfig] | None = None,
    ):
        self._llm = llm if llm is not None else llm_client
        self.concurrency = max(1, concurrency or settings.generation_concurrency)
        self.cooldown_s = settings.generation_cooldown_s if cooldown_s is None else cooldown_s
        self.retry_backoff_s = settings.generation_retry_backoff_s if retry_backoff_s is None else retry_backoff_s
        self.overhead_s = settings.generation_overhead_s if overhead_s is None else overhead_s
        self.queue_size = queue_size or settings.generation_queue_size
        self.modes = modes or default_modes()

        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue | None = None
        self._workers: list[asyncio.Task] = []
        self._in_flight: dict[int, GenerationJob] = {}
        self._counters: dict[str, int] = {"submitted": 0, "ok": 0} | {f.value: 0 for f in FailureClass}

    # ─── Lifecycle ───

    def _ensure_workers(self):
        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            # first use, or a new event loop (tests, app restart)
            self._loop = loop
            self._queue = asyncio.Queue(maxsize=self.queue_size)
            self._workers = []
            self._in_flight = {}
        self._workers = [w for w in self._workers if not w.done()]
        while len(self._workers) < self.concurrency:
            index = len(self._workers)
            self._workers.append(loop.create_task(self._worker(index), name=f"generation-worker-{index}"))
            logger.info(f"Started generation worker {index}")

    async def shutdown(self):
        """Cancel workers and settle every pending job. Safe to call more than once.

        Queued and in-flight callers get a transport_error outcome right away
        instead of a cancellation or a wait until their deadline.
        """
        pending = list(self._in_flight.values())
        workers, self._workers = self._workers, []
        for task in workers:
            task.cancel()
        if workers:
            await asyncio.gather(*workers, return_exceptions=True)
        if self._queue is not None:
            while not self._queue.empty():
                pending.append(self._queue.get_nowait())
        for job in pending:
            if not job.future.done():
                job.future.set_result(CompletionOutcome(
                    job.id, job.mode, failure=FailureClass.TRANSPORT_ERROR,
                    attempts=job.attempts, detail="shutdown",
                ))
        self._loop = None
        self._queue = None
        self._in_flight = {}
        logger.info("Generation orchestrator stopped")

    def status(self) -> dict:
        return {
            "queue_depth": self._queue.qsize() if self._queue is not None else 0,
            "queue_size": self.queue_size,
            "workers": len([w for w in self._workers if not w.done()]),
            "concurrency": self.concurrency,
            "in_flight": [job.mode for job in self._in_flight.values()],
            "cooldown_s": self.cooldown_s,
            "counters": dict(self._counters),
        }

    # ─── Submission ───

    def mode_config(self, mode: str) -> ModeConfig:
        try:
            return self.modes[mode]
        except KeyError:
            raise ValueError(f"Unknown generation mode: {mode}")

    async def submit(self, mode: str, system: str, user: str) -> CompletionOutcome:
        """Queue one completion and wait for it, at most deadline + overhead."""
        cfg = self.mode_config(mode)
        self._ensure_workers()
        loop = asyncio.get_running_loop()
        now = loop.time()
        job = GenerationJob(
            id=uuid.uuid4().hex[:12],
            mode=mode,
            system=system,
            user=user,
            max_tokens=cfg.max_tokens,
            deadline=now + cfg.deadline_s,
            enqueued_at=now,
            future=loop.create_future(),
        )
        self._counters["submitted"] += 1

        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            outcome = CompletionOutcome(job.id, mode, failure=FailureClass.TRANSPORT_ERROR, detail="queue full")
            self._record(outcome)
            return outcome

        try:
            outcome = await asyncio.wait_for(job.future, timeout=cfg.deadline_s + self.overhead_s)
        except asyncio.TimeoutError:
            outcome = CompletionOutcome(
                job.id, mode, failure=FailureClass.TIMEOUT, attempts=job.attempts,
                detail="caller deadline passed",
            )
        self._record(outcome)
        return outcome

    def _record(self, outcome: CompletionOutcome):
        key = outcome.failure.value if outcome.failure else "ok"
        self._counters[key] = self._counters.get(key, 0) + 1
        if outcome.failure:
            logger.warning(
                f"Generation job {outcome.job_id} ({outcome.mode}) failed: {outcome.failure.value} "
                f"after {outcome.attempts} attempt(s), queued {outcome.queued_ms}ms {outcome.detail}".rstrip()
            )
        else:
            logger.info(
                f"Generation job {outcome.job_id} ({outcome.mode}) completed in {outcome.attempts} attempt(s), "
                f"queued {outcome.queued_ms}ms"
            )

    # ─── Worker ───

    async def _worker(self, index: int):
        queue = self._queue
        while True:
            job = await queue.get()
            try:
                if job.future.done():
                    # caller already gave up
                    continue
                self._in_flight[index] = job
                outcome = await self._run(job)
                if not job.future.done():
                    job.future.set_result(outcome)
            except Exception as e:
                logger.error(f"Generation worker {index} failed on job {job.id}: {e}")
                if not job.future.done():
                    job.future.set_result(CompletionOutcome(
                        job.id, job.mode, failure=FailureClass.TRANSPORT_ERROR,
                        attempts=job.attempts, detail=str(e),
                    ))
            finally:
                self._in_flight.pop(index, None)
                queue.task_done()
            if not queue.empty() and self.cooldown_s > 0:
                await asyncio.sleep(self.cooldown_s)

    async def _run(self, job: GenerationJob) -> CompletionOutcome:
        loop = asyncio.get_running_loop()
        queued_ms = int((loop.time() - job.enqueued_at) * 1000)

        def outcome(**kwargs) -> CompletionOutcome:
            return CompletionOutcome(job.id, job.mode, attempts=job.attempts, queued_ms=queued_ms, **kwargs)

        while True:
            remaining = job.deadline - loop.time()
            if remaining <= 0:
                return outcome(failure=FailureClass.TIMEOUT, detail="deadline passed before call")
            job.attempts += 1
            try:
                text = await asyncio.wait_for(
                    self._llm.generate(job.system, job.user, max_tokens=job.max_tokens, timeout=remaining),
                    timeout=remaining,
                )
            except asyncio.TimeoutError:
                return outcome(failure=FailureClass.TIMEOUT, detail="provider call exceeded deadline")
            except LLMNotConfiguredError as e:
                return outcome(failure=FailureClass.TRANSPORT_ERROR, detail=str(e))
            except LLMError as e:
                left = job.deadline - loop.time()
                if job.attempts < MAX_ATTEMPTS and left > self.retry_backoff_s + MIN_RETRY_WINDOW_S:
                    logger.info(f"Retrying job {job.id} in {self.retry_backoff_s}s: {e}")
                    await asyncio.sleep(self.retry_backoff_s)
                    continue
                return outcome(failure=FailureClass.TRANSPORT_ERROR, detail=str(e))
            except Exception as e:
                return outcome(failure=FailureClass.TRANSPORT_ERROR, detail=f"unexpected: {e}")

            if not text or not text.strip():
                return outcome(failure=FailureClass.EMPTY_RESPONSE)
            return outcome(text=text)


# Singleton
generation_orchestrator = GenerationOrchestrator()
