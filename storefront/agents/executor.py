"""Dependency-level parallel execution of plan steps.

Steps are grouped into levels: a level holds every remaining step whose
dependencies all sit in earlier levels. Levels run in order; steps inside a
level run concurrently, at most ``max_parallel_agents`` at a time.
"""

import asyncio
import re
from typing import Any, Awaitable, Callable, Optional

from storefront.agents.types import ExecutionStep, StepResult, StepUpdate
from storefront.core.config import settings
from storefront.core.logging import get_logger

logger = get_logger(__name__)

StepRunner = Callable[[ExecutionStep], Awaitable[StepResult]]
ProgressCallback = Callable[[StepUpdate], None]

_STEP_REF = re.compile(r"^\$step:([^.]+)\.(.+)$")
_MISSING = object()


def group_by_dependency_level(steps: list[ExecutionStep]) -> list[list[ExecutionStep]]:
    """Split steps into ordered levels of mutually independent steps.

    Steps whose dependencies can never be satisfied (unknown ids or cycles)
    are left out; an error is logged when that happens.
    """
    levels: list[list[ExecutionStep]] = []
    completed: set[str] = set()
    remaining = list(steps)

    while remaining:
        ready = [s for s in remaining if all(dep in completed for dep in s.depends_on)]
        if not ready:
            logger.error(
                "Circular or unresolved step dependencies",
                extra={"unresolved_steps": [s.id for s in remaining]},
            )
            break

        levels.append(ready)
        ready_ids = {s.id for s in ready}
        completed.update(ready_ids)
        remaining = [s for s in remaining if s.id not in ready_ids]

    return levels


def _emit(on_progress: Optional[ProgressCallback], update: StepUpdate) -> None:
    if on_progress is not None:
        on_progress(update)


async def execute_parallel_steps(
    steps: list[ExecutionStep],
    execute_step: StepRunner,
    on_progress: Optional[ProgressCallback] = None,
    max_parallel: Optional[int] = None,
) -> dict[str, StepResult]:
    """Run all steps level by level and return their results keyed by step id.

    A step that raises is recorded as a failed result; it never aborts the
    rest of its level.
    """
    results: dict[str, StepResult] = {}
    levels = group_by_dependency_level(steps)
    total = len(steps)
    chunk_size = max_parallel or settings.max_parallel_agents
    counter = 0

    _emit(
        on_progress,
        StepUpdate(
            type="planning",
            message=f"Created execution plan with {total} steps across {len(levels)} levels",
            data={"total_steps": total, "levels": len(levels)},
        ),
    )

    async def run_one(step: ExecutionStep) -> StepResult:
        nonlocal counter
        counter += 1
        number = counter
        _emit(
            on_progress,
            StepUpdate(
                type="executing",
                step=number,
                total_steps=total,
                agent_name=step.agent,
                action=step.action,
                message=f"[{number}/{total}] Executing {step.agent}.{step.action}",
            ),
        )

        try:
            result = await execute_step(step)
        except Exception as exc:
            logger.exception("Step %s raised", step.id)
            result = StepResult(step_id=step.id, success=False, error=str(exc))

        if result.success:
            message = f"[{number}/{total}] ✓ {step.action} completed"
        else:
            message = f"[{number}/{total}] ✗ {step.action} failed: {result.error}"
        _emit(
            on_progress,
            StepUpdate(
                type="executing",
                step=number,
                total_steps=total,
                agent_name=step.agent,
                action=step.action,
                message=message,
                data={"success": result.success},
            ),
        )
        return result

    for level in levels:
        for start in range(0, len(level), chunk_size):
            chunk = level[start:start + chunk_size]
            chunk_results = await asyncio.gather(*(run_one(s) for s in chunk))
            for step, result in zip(chunk, chunk_results):
                results[step.id] = result

    for step in steps:
        if step.id not in results:
            results[step.id] = StepResult(
                step_id=step.id, success=False, error="unresolved dependencies"
            )

    success_count = sum(1 for r in results.values() if r.success)
    _emit(
        on_progress,
        StepUpdate(
            type="complete",
            message=f"Completed {success_count}/{total} steps",
            data={"total_steps": total, "success_count": success_count},
        ),
    )
    return results


def _walk(data: Any, path: str) -> Any:
    current = data
    for key in path.split("."):
        if isinstance(current, dict):
            current = current.get(key, _MISSING)
        elif isinstance(current, (list, tuple)) and key.lstrip("-").isdigit():
            index = int(key)
            current = current[index] if -len(current) <= index < len(current) else _MISSING
        else:
            current = getattr(current, key, _MISSING)
        if current is _MISSING:
            return _MISSING
    return current


def _resolve_value(value: Any, results: dict[str, StepResult]) -> Any:
    if isinstance(value, str):
        match = _STEP_REF.match(value)
        if not match:
            return value
        step_id, path = match.groups()
        result = results.get(step_id)
        if result is None or not result.success:
            logger.warning("Reference to missing or failed step: %s", value)
            return value
        resolved = _walk(result.data, path)
        if resolved is _MISSING:
            logger.warning("Reference path not found: %s", value)
            return value
        return resolved
    if isinstance(value, dict):
        return {k: _resolve_value(v, results) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_value(v, results) for v in value]
    return value


def resolve_parameter_references(
    params: dict[str, Any], results: dict[str, StepResult]
) -> dict[str, Any]:
    """Replace ``$step:<id>.<path>`` strings with values from earlier results.

    Unresolvable references are kept as the original string.
    """
    return {key: _resolve_value(value, results) for key, value in params.items()}
