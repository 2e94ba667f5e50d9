"""Optional strategic-learning collaborators.

Each collaborator is duck-typed: any object exposing the named method works,
whether the method is a coroutine function or a plain function. Calls go
through ``call_collaborator`` so they share one timeout and one error path.
"""

import asyncio
import inspect
from typing import Any, Callable, Protocol


class MissionPredictor(Protocol):
    """Predicts complexity and risk for a mission."""

    def predict_mission_characteristics(self, mission_request: str) -> Any:
        """Return ``{estimatedComplexity, riskScore, confidenceInterval}``."""


class StrategySelector(Protocol):
    """Selects the problem domain a mission belongs to."""

    def select_optimal_strategy(self, mission_request: str) -> Any:
        """Return ``{domain, confidenceScore}``."""


class RiskAssessor(Protocol):
    """Assesses how novel a mission is."""

    def assess_risk(self, mission_request: str) -> Any:
        """Return ``{noveltyFactor}``."""


class KnowledgeGraph(Protocol):
    """Searches past missions for analogous problems."""

    def find_analogous_problems(self, mission_request: str, limit: int) -> Any:
        """Return a list of ``{similarity}`` mappings, best first."""


class CollaboratorError(Exception):
    """A collaborator call failed, timed out or returned an unusable payload."""

    def __init__(self, name: str, cause: BaseException):
        super().__init__(f"{name} failed: {cause!r}")
        self.name = name
        self.cause = cause


async def call_collaborator(
    name: str,
    collaborator: object,
    method_name: str,
    *args: Any,
    timeout: float,
) -> Any:
    """Call ``collaborator.method_name(*args)`` bounded by ``timeout`` seconds.

    Coroutine results are awaited directly; synchronous methods run in a
    worker thread so the same bound applies.

    Raises:
        CollaboratorError: On a missing method, a timeout, or any exception
            raised by the call.
    """
    try:
        method: Callable[..., Any] = getattr(collaborator, method_name)
        if inspect.iscoroutinefunction(method):
            return await asyncio.wait_for(method(*args), timeout=timeout)

        result = await asyncio.wait_for(asyncio.to_thread(method, *args), timeout=timeout)
        if inspect.isawaitable(result):
            result = await asyncio.wait_for(result, timeout=timeout)
        return result
    except Exception as e:
        raise CollaboratorError(name, e) from e
