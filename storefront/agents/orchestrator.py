"""Runs an assistant request end to end.

plan (manager) -> confirmation gate -> level-parallel execution -> synthesis.
Every executed step is logged as an ``AITask`` and the request's tokens are
charged to the store's daily text-generation usage.
"""

import asyncio
import time
from typing import Any, Callable, Optional, Type

from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.agents import definitions  # noqa: F401  registers agent descriptors
from storefront.agents.analyst_agent import AnalystAgent
from storefront.agents.base import BaseAgent
from storefront.agents.bulk_agent import BatchEnqueuer, BulkDealsAgent
from storefront.agents.execution import with_retry
from storefront.agents.executor import execute_parallel_steps, resolve_parameter_references
from storefront.agents.manager import ManagerAgent
from storefront.agents.photographer_agent import PhotographerAgent
from storefront.agents.product_agent import ProductAgent
from storefront.agents.types import (
    AgentResult,
    AgentTaskSummary,
    ConfirmationRequest,
    ExecutionPlan,
    ExecutionStep,
    OrchestratorResult,
    StepResult,
    StepStatus,
    StepUpdate,
)
from storefront.core.config import settings
from storefront.core.logging import get_logger
from storefront.db.repositories.ai_repo import AITaskRepository
from storefront.models.ai import UsageOperation
from storefront.models.store import Store
from storefront.services.llm import LLMClient
from storefront.services.usage_limits import UsageLimitService

logger = get_logger(__name__)

ERROR_RESPONSE = (
    "I apologize, but I encountered an error while processing your request. Please try again."
)
IDLE_RESPONSE = "I'm here to help! What would you like me to do?"

# Token estimate checked against the daily text limit before planning
ESTIMATED_REQUEST_TOKENS = 2000

CONFIRMATION_REQUIRED_ACTIONS = {
    "delete_product",
    "delete_products_bulk",
    "update_prices_bulk",
    "publish_campaign",
    "send_notification",
    "publish_products_bulk",
}

ACTION_IMPACTS = {
    "delete_product": "This action cannot be undone",
    "delete_products_bulk": "This action cannot be undone and will remove all associated data",
    "update_prices_bulk": "This will change prices visible to customers",
    "publish_campaign": "This will send content to your audience",
    "send_notification": "This will send messages to customers",
    "publish_products_bulk": "Products will become visible in your store",
}
DEFAULT_IMPACT = "This action may have significant effects"

# Actions that receive the request's images when the plan gives none
IMAGE_ACTION_MARKERS = ("image", "batch", "bulk", "background", "lifestyle", "analyze")

AGENT_CLASSES: dict[str, Type[BaseAgent]] = {
    "product": ProductAgent,
    "analyst": AnalystAgent,
    "bulk_deals": BulkDealsAgent,
    "photographer": PhotographerAgent,
}


def _affected_items(step: ExecutionStep) -> Optional[int]:
    for key in ("product_ids", "ids", "image_urls"):
        value = step.params.get(key)
        if isinstance(value, list):
            return len(value)
    return None


def describe_step(step: ExecutionStep) -> str:
    count = _affected_items(step)
    amount = count if count is not None else "multiple"
    descriptions = {
        "delete_product": "Delete a product",
        "delete_products_bulk": f"Delete {amount} products",
        "update_prices_bulk": f"Update prices for {amount} products",
        "publish_campaign": "Publish a marketing campaign",
        "send_notification": "Send a notification to customers",
        "publish_products_bulk": f"Publish {amount} products",
    }
    return descriptions.get(step.action, step.action.replace("_", " "))


def check_confirmation_required(plan: ExecutionPlan) -> Optional[ConfirmationRequest]:
    """First step of the plan that needs the merchant's go-ahead, if any."""
    for step in plan.steps:
        if step.action in CONFIRMATION_REQUIRED_ACTIONS:
            return ConfirmationRequest(
                action=step.action,
                description=describe_step(step),
                impact=ACTION_IMPACTS.get(step.action, DEFAULT_IMPACT),
                affected_items=_affected_items(step),
            )

        images = step.params.get("image_urls")
        if isinstance(images, list) and len(images) > settings.confirmation_image_threshold:
            return ConfirmationRequest(
                action=step.action,
                description=f"Process {len(images)} images",
                impact=f"This will use {len(images)} image generation credits",
                affected_items=len(images),
            )
    return None


def _context_value(context: dict[str, Any], path: str) -> Any:
    current: Any = context
    for key in path.split("."):
        if isinstance(current, dict) and key in current:
            current = current[key]
        elif isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
        else:
            return None
    return current


def resolve_context_references(params: dict[str, Any], context: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Replace ``$context:<path>`` strings with page-context values."""

    def resolve(value: Any) -> Any:
        if isinstance(value, str) and value.startswith("$context:"):
            if context is None:
                return value
            resolved = _context_value(context, value[len("$context:"):])
            return value if resolved is None else resolved
        if isinstance(value, list):
            return [resolve(v) for v in value]
        if isinstance(value, dict):
            return {k: resolve(v) for k, v in value.items()}
        return value

    return {key: resolve(value) for key, value in params.items()}


def inject_image_urls(step: ExecutionStep, image_urls: Optional[list[str]]) -> None:
    """Give image actions the request's images unless the plan lists real URLs."""
    if not image_urls or not any(marker in step.action for marker in IMAGE_ACTION_MARKERS):
        return
    existing = step.params.get("image_urls")
    has_valid = (
        isinstance(existing, list)
        and existing
        and all(isinstance(url, str) and url.startswith("http") for url in existing)
    )
    if not has_valid:
        step.params["image_urls"] = list(image_urls)


class Orchestrator:
    def __init__(
        self,
        session: AsyncSession,
        store: Store,
        llm: LLMClient,
        enqueue_batch: Optional[BatchEnqueuer] = None,
    ):
        self.session = session
        self.store = store
        self.llm = llm
        self.enqueue_batch = enqueue_batch
        self.manager = ManagerAgent(llm)
        self.usage = UsageLimitService(session)
        # One request session; agent database work is serialized on it
        self._session_lock = asyncio.Lock()
        self._updates: list[StepUpdate] = []
        self._on_progress: Optional[Callable[[StepUpdate], None]] = None

    def _emit(self, update: StepUpdate) -> None:
        self._updates.append(update)
        if self._on_progress is not None:
            self._on_progress(update)

    def get_agent(self, agent_type: str) -> BaseAgent:
        agent_class = AGENT_CLASSES.get(agent_type)
        if agent_class is None:
            raise ValueError(f"Unknown agent type: {agent_type}")
        if agent_class is BulkDealsAgent:
            return BulkDealsAgent(self.session, self.store.id, enqueue=self.enqueue_batch)
        if agent_class is PhotographerAgent:
            return PhotographerAgent(self.session, self.store.id, llm=self.llm)
        return agent_class(self.session, self.store.id)

    async def execute_request(
        self,
        request: str,
        context: Optional[dict[str, Any]] = None,
        image_urls: Optional[list[str]] = None,
        confirmed: bool = False,
        on_progress: Optional[Callable[[StepUpdate], None]] = None,
        history: Optional[list[dict[str, str]]] = None,
    ) -> OrchestratorResult:
        started = time.monotonic()
        self._updates = []
        self._on_progress = on_progress
        tasks: list[AgentTaskSummary] = []
        total_tokens = 0

        def elapsed_ms() -> int:
            return int((time.monotonic() - started) * 1000)

        check = await self.usage.check_usage_limit(
            self.store, UsageOperation.TEXT_GENERATION, estimated_tokens=ESTIMATED_REQUEST_TOKENS
        )
        if not check.allowed:
            return OrchestratorResult(success=False, response=check.reason or "Daily limit reached")

        if not image_urls and context and context.get("available_images"):
            image_urls = list(context["available_images"])

        try:
            self._emit(StepUpdate(type="planning", message="Analyzing your request and creating execution plan..."))
            analysis = await self.manager.analyze_request(request, context, image_urls, history)
            total_tokens += analysis.tokens_used
            plan = analysis.plan

            if plan is None or not plan.steps:
                self._emit(StepUpdate(type="complete", message="✓ Response ready"))
                await self._record_usage(total_tokens)
                return OrchestratorResult(
                    success=True,
                    response=analysis.response or IDLE_RESPONSE,
                    total_tokens=total_tokens,
                    execution_time_ms=elapsed_ms(),
                    steps=list(self._updates),
                )

            for step in plan.steps:
                inject_image_urls(step, image_urls)

            if not confirmed:
                confirmation = check_confirmation_required(plan)
                if confirmation is not None:
                    await self._record_usage(total_tokens)
                    return OrchestratorResult(
                        success=True,
                        response=analysis.response,
                        total_tokens=total_tokens,
                        execution_time_ms=elapsed_ms(),
                        steps=list(self._updates),
                        confirmation_required=confirmation,
                        plan=plan,
                    )

            plan.status = "executing"
            results, step_tokens = await self._execute_plan(plan, context)
            total_tokens += step_tokens
            tasks = [
                AgentTaskSummary(
                    agent=step.agent,
                    action=step.action,
                    success=results[step.id].success,
                    result=results[step.id].data,
                    error=results[step.id].error,
                )
                for step in plan.steps
            ]
            plan.status = "completed" if all(t.success for t in tasks) else "failed"

            self._emit(StepUpdate(type="synthesizing", message="Preparing final response..."))
            summary, synth_tokens = await self.manager.synthesize_response(
                request, [jsonable_encoder(t) for t in tasks]
            )
            total_tokens += synth_tokens
            self._emit(StepUpdate(type="complete", message="✓ All tasks completed successfully"))
            await self._record_usage(total_tokens)

            return OrchestratorResult(
                success=True,
                response=summary or analysis.response or "Task completed successfully.",
                tasks=tasks,
                total_tokens=total_tokens,
                execution_time_ms=elapsed_ms(),
                steps=list(self._updates),
                plan=plan,
            )
        except Exception as exc:
            logger.exception("Orchestrator error", extra={"store_id": self.store.id})
            self._emit(StepUpdate(type="complete", message=f"✗ Error: {exc}"))
            if total_tokens:
                try:
                    await self._record_usage(total_tokens)
                except SQLAlchemyError:
                    logger.exception("Usage recording failed", extra={"store_id": self.store.id})
            return OrchestratorResult(
                success=False,
                response=ERROR_RESPONSE,
                tasks=tasks,
                total_tokens=total_tokens,
                execution_time_ms=elapsed_ms(),
                steps=list(self._updates),
            )

    async def _execute_plan(
        self, plan: ExecutionPlan, context: Optional[dict[str, Any]]
    ) -> tuple[dict[str, StepResult], int]:
        results: dict[str, StepResult] = {}
        durations: dict[str, int] = {}
        steps_by_id = {step.id: step for step in plan.steps}

        async def run_step(step: ExecutionStep) -> StepResult:
            params = resolve_context_references(step.params, context)
            params = resolve_parameter_references(params, results)
            agent = self.get_agent(step.agent)
            agent.set_progress_callback(self._emit)
            step.status = StepStatus.RUNNING
            started = time.monotonic()

            async def call() -> AgentResult:
                async with self._session_lock:
                    return await agent.execute(step.action, dict(params))

            try:
                outcome = await with_retry(call, step.agent)
            finally:
                agent.set_progress_callback(None)
                durations[step.id] = int((time.monotonic() - started) * 1000)

            result = StepResult(
                step_id=step.id,
                success=outcome.success,
                data=jsonable_encoder(outcome.data),
                error=outcome.error,
                tokens_used=outcome.tokens_used,
            )
            results[step.id] = result
            return result

        final = await execute_parallel_steps(plan.steps, run_step, on_progress=self._emit)

        task_repo = AITaskRepository(self.session)
        for step_id, result in final.items():
            step = steps_by_id[step_id]
            step.status = StepStatus.COMPLETED if result.success else StepStatus.FAILED
            step.result = result.data
            step.error = result.error
            await task_repo.create(
                {
                    "store_id": self.store.id,
                    "agent": step.agent,
                    "task_type": step.action,
                    "input_data": jsonable_encoder(step.params),
                    "output_data": {"result": result.data} if result.data is not None else None,
                    "success": result.success,
                    "error": result.error,
                    "tokens_used": result.tokens_used,
                    "duration_ms": durations.get(step_id),
                }
            )
        return final, sum(r.tokens_used for r in final.values())

    async def _record_usage(self, tokens: int) -> None:
        await self.usage.record_usage(
            self.store.id, UsageOperation.TEXT_GENERATION, tokens_used=tokens
        )
