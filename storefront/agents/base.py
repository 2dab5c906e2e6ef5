"""Base class for agents."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.agents.registry import AgentRegistry, agent_registry
from storefront.agents.types import AgentResult, StepUpdate
from storefront.core.logging import get_logger

logger = get_logger(__name__)


class BaseAgent(ABC):
    """An agent executes named actions for one store.

    Subclasses set ``agent_type`` and implement ``execute``.
    """

    agent_type: str = ""

    def __init__(
        self,
        session: AsyncSession,
        store_id: str,
        registry: Optional[AgentRegistry] = None,
    ):
        self.session = session
        self.store_id = store_id
        self.registry = registry or agent_registry
        self._progress: Optional[Callable[[StepUpdate], None]] = None

    def set_progress_callback(self, callback: Optional[Callable[[StepUpdate], None]]) -> None:
        self._progress = callback

    def report_progress(self, message: str, data: Optional[dict] = None) -> None:
        if self._progress is not None:
            self._progress(
                StepUpdate(
                    type="executing",
                    agent_name=self.agent_type,
                    message=message,
                    data=data,
                )
            )

    def validate_input(self, action: str, params: dict[str, Any]) -> dict[str, Any]:
        """Validate params against the registered input model for ``action``.

        Raises ``ValueError`` with the validation messages on failure.
        """
        descriptor = self.registry.get(self.agent_type)
        schema = descriptor.input_schemas.get(action) if descriptor else None
        if schema is None:
            return params
        try:
            return schema.model_validate(params).model_dump()
        except ValidationError as exc:
            raise ValueError(f"Invalid input for {action}: {exc.errors()}") from exc

    def format_success(self, data: Any = None, message: Optional[str] = None, tokens_used: int = 0) -> AgentResult:
        return AgentResult(success=True, data=data, message=message, tokens_used=tokens_used)

    def format_error(self, action: str, error: Any) -> AgentResult:
        logger.warning(
            "Agent action failed",
            extra={"agent": self.agent_type, "action": action, "error": str(error)},
        )
        return AgentResult(success=False, message=f"Failed to {action}", error=str(error))

    @abstractmethod
    async def execute(self, action: str, params: dict[str, Any]) -> AgentResult:
        """Run ``action`` with ``params``."""
