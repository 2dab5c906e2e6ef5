"""Planner: turns a merchant request into steps for the other agents."""

import json
from dataclasses import dataclass
from typing import Any, Optional

from storefront.agents.execution import with_retry
from storefront.agents.registry import AgentRegistry, agent_registry
from storefront.agents.types import ExecutionPlan, ExecutionStep, StepStatus
from storefront.core.config import settings
from storefront.core.logging import get_logger
from storefront.services.llm import LLMClient, extract_json_object

logger = get_logger(__name__)

DEFAULT_RESPONSE = "I understand your request. How can I help you further?"
UNCLEAR_RESPONSE = (
    "I apologize, but I had trouble understanding that request. Could you please rephrase it?"
)
SYNTHESIS_FALLBACK = "Tasks completed. Please check the results."

PLANNER_PROMPT = """You are the store manager assistant for an online store admin.
You help the merchant run their store by delegating work to specialised agents.

Available agents:
{agents}

Rules:
- Use only the agents and actions listed above
- Give every step a unique id (step_1, step_2, ...)
- List in dependsOn the ids of steps whose results a step needs
- Reference an earlier result with "$step:<step_id>.<path>", for example "$step:step_1.products.0.id"
- Reference page context with "$context:<path>", for example "$context:selected_product_ids"
- Keep responses concise and actionable
{images}
Page context:
{context}

Conversation so far:
{history}

Merchant request:
{request}

Output JSON in this format:
{{
  "response": "Your conversational response to the merchant",
  "plan": {{
    "steps": [
      {{"id": "step_1", "agent": "product", "action": "search_products", "params": {{}}, "dependsOn": []}}
    ]
  }}
}}

If no plan is needed (just a conversational response), output:
{{"response": "Your response", "plan": null}}"""

SYNTHESIS_PROMPT = """Original request: {request}

Task results:
{results}

Based on these results, provide a clear, concise summary for the merchant.
- If tasks succeeded, explain what was accomplished
- If tasks failed, explain what went wrong and suggest next steps
- Use a friendly, conversational tone
- Keep it brief but informative"""


@dataclass
class PlanningResult:
    response: str
    plan: Optional[ExecutionPlan]
    tokens_used: int = 0


def parse_plan(request: str, parsed: dict[str, Any]) -> Optional[ExecutionPlan]:
    """Build an ExecutionPlan from the planner's JSON; None when it has no steps."""
    plan = parsed.get("plan")
    if not isinstance(plan, dict):
        return None
    raw_steps = [s for s in plan.get("steps") or [] if isinstance(s, dict)]
    if not raw_steps:
        return None

    steps = [
        ExecutionStep(
            id=str(raw.get("id") or f"step_{index}"),
            agent=str(raw.get("agent") or ""),
            action=str(raw.get("action") or ""),
            params=raw.get("params") if isinstance(raw.get("params"), dict) else {},
            depends_on=[str(d) for d in raw.get("dependsOn") or raw.get("depends_on") or []],
            status=StepStatus.PENDING,
        )
        for index, raw in enumerate(raw_steps, start=1)
    ]
    return ExecutionPlan(request=request, steps=steps, status="planning")


def format_history(history: Optional[list[dict[str, str]]]) -> str:
    """Render the most recent turns as ``role: content`` lines."""
    turns = (history or [])[-settings.assistant_history_turns:]
    if not turns:
        return "(none)"
    return "\n".join(f"{t.get('role', 'user')}: {t.get('content', '')}" for t in turns)


class ManagerAgent:
    agent_type = "manager"

    def __init__(self, llm: LLMClient, registry: Optional[AgentRegistry] = None):
        self.llm = llm
        self.registry = registry or agent_registry

    async def analyze_request(
        self,
        request: str,
        context: Optional[dict[str, Any]] = None,
        image_urls: Optional[list[str]] = None,
        history: Optional[list[dict[str, str]]] = None,
    ) -> PlanningResult:
        images = ""
        if image_urls:
            images = (
                f"- The merchant attached {len(image_urls)} images; steps that need them "
                "receive them automatically as image_urls\n"
            )
        prompt = PLANNER_PROMPT.format(
            agents=self.registry.describe(),
            images=images,
            context=json.dumps(context or {}, default=str),
            history=format_history(history),
            request=request,
        )

        try:
            result = await with_retry(
                lambda: self.llm.generate_text(prompt, model=settings.llm_model_pro, json_output=True),
                self.agent_type,
            )
        except Exception:
            logger.exception("Manager planning failed")
            return PlanningResult(response=UNCLEAR_RESPONSE, plan=None)

        parsed = extract_json_object(result.text)
        if parsed is None:
            logger.warning("Planner reply was not JSON, using it as the response")
            return PlanningResult(
                response=result.text.strip() or DEFAULT_RESPONSE,
                plan=None,
                tokens_used=result.tokens_used,
            )

        response = str(parsed.get("response") or "").strip() or DEFAULT_RESPONSE
        return PlanningResult(
            response=response,
            plan=parse_plan(request, parsed),
            tokens_used=result.tokens_used,
        )

    async def synthesize_response(
        self, request: str, task_summaries: list[dict[str, Any]]
    ) -> tuple[str, int]:
        """Summarise executed tasks; empty string when nothing ran."""
        if not task_summaries:
            return "", 0

        prompt = SYNTHESIS_PROMPT.format(
            request=request,
            results=json.dumps(task_summaries, indent=2, default=str),
        )
        try:
            result = await with_retry(
                lambda: self.llm.generate_text(prompt, model=settings.llm_model_flash),
                self.agent_type,
            )
        except Exception:
            logger.exception("Response synthesis failed")
            return SYNTHESIS_FALLBACK, 0

        return result.text.strip() or SYNTHESIS_FALLBACK, result.tokens_used
