"""Interchangeable router strategies.

Every strategy implements ``async route(context) -> RouteResult``:

- DeterministicRouter runs the rules engine directly.
- LLMRouter runs an OpenAI-compatible tool-calling loop. The model may
  call ``route_case`` (the rules engine) and must finish with
  ``submit_route``, whose arguments are validated against the closed
  decision/urgency sets.
- FallbackRouter races the LLM router against a hard timeout and uses
  the deterministic result on any failure. Only one result is ever used.
"""

import asyncio
import json
import logging
from typing import Any, Protocol

import httpx
from pydantic import BaseModel, ValidationError

from wildlife_triage.core.config import Settings
from wildlife_triage.routing.context import case_context_to_dict
from wildlife_triage.routing.engine import route_decision
from wildlife_triage.routing.models import CaseContext, Decision, RouteResult, Urgency
from wildlife_triage.schemas.triage import RouteResultPayload

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You route wildlife-rescue intake cases.

Call `route_case` to get the organization's rule-based routing for the case.
Then call `submit_route` exactly once with the final decision, urgency,
reasons and afterHoursNote. Never lower the urgency returned by
`route_case`. Do not answer in free text."""

ROUTE_CASE_TOOL = {
    "type": "function",
    "function": {
        "name": "route_case",
        "description": "Run the organization's deterministic triage rules for this case.",
        "parameters": {"type": "object", "properties": {}},
    },
}

SUBMIT_ROUTE_TOOL = {
    "type": "function",
    "function": {
        "name": "submit_route",
        "description": "Submit the final routing decision for this case.",
        "parameters": {
            "type": "object",
            "properties": {
                "decision": {"type": "string", "enum": [d.value for d in Decision]},
                "urgency": {"type": "string", "enum": [u.value for u in Urgency]},
                "reasons": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                "afterHoursNote": {"type": "string"},
            },
            "required": ["decision", "urgency", "reasons"],
        },
    },
}


class ToolFunction(BaseModel):
    name: str
    arguments: str | dict[str, Any] | None = None


class ToolCall(BaseModel):
    id: str | None = None
    type: str = "function"
    function: ToolFunction


class CompletionMessage(BaseModel):
    """Assistant message from a chat completion."""

    role: str = "assistant"
    content: str | None = None
    tool_calls: list[ToolCall] | None = None


class LLMRouterError(Exception):
    """Raised when the LLM path cannot produce a valid route result."""

    pass


class Router(Protocol):
    """A routing strategy."""

    name: str

    async def route(self, context: CaseContext) -> RouteResult: ...


class DeterministicRouter:
    """Rules-engine router."""

    name = "deterministic"

    async def route(self, context: CaseContext) -> RouteResult:
        return route_decision(context)


class LLMRouter:
    """Tool-calling router backed by an OpenAI-compatible chat endpoint."""

    name = "llm"

    def __init__(
        self,
        client: httpx.AsyncClient,
        model: str,
        max_tool_rounds: int = 3,
    ) -> None:
        """Initialize router.

        Args:
            client: HTTP client with base_url and auth headers configured
            model: Chat model identifier
            max_tool_rounds: Upper bound on request/tool-call round trips
        """
        self.client = client
        self.model = model
        self.max_tool_rounds = max_tool_rounds

    async def route(self, context: CaseContext) -> RouteResult:
        """Run the tool-calling loop until the model submits a route.

        Raises:
            LLMRouterError: On malformed output, unknown tools, an urgency
                            downgrade or too many rounds
            httpx.HTTPError: On transport or HTTP status failures
        """
        baseline = route_decision(context)
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": json.dumps(case_context_to_dict(context))},
        ]

        for _ in range(self.max_tool_rounds):
            message = await self._complete(messages)
            if not message.tool_calls:
                raise LLMRouterError("Model answered without calling a tool")

            messages.append(message.model_dump(exclude_none=True))
            for call in message.tool_calls:
                name = call.function.name

                if name == "submit_route":
                    result = self._parse_submission(call.function.arguments)
                    if result.urgency.rank < baseline.urgency.rank:
                        raise LLMRouterError(
                            f"Model lowered urgency from {baseline.urgency.value} "
                            f"to {result.urgency.value}"
                        )
                    return result

                if name == "route_case":
                    messages.append({
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": json.dumps(baseline.to_dict()),
                    })
                    continue

                raise LLMRouterError(f"Model called unknown tool: {name}")

        raise LLMRouterError(f"No route submitted after {self.max_tool_rounds} rounds")

    async def _complete(self, messages: list[dict[str, Any]]) -> CompletionMessage:
        response = await self.client.post(
            "/chat/completions",
            json={
                "model": self.model,
                "messages": messages,
                "tools": [ROUTE_CASE_TOOL, SUBMIT_ROUTE_TOOL],
                "tool_choice": "required",
                "temperature": 0,
            },
        )
        response.raise_for_status()
        try:
            return CompletionMessage.model_validate(response.json()["choices"][0]["message"])
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise LLMRouterError(f"Malformed completion response: {exc}") from exc

    @staticmethod
    def _parse_submission(arguments: Any) -> RouteResult:
        try:
            payload = json.loads(arguments) if isinstance(arguments, str) else arguments
            return RouteResultPayload.model_validate(payload).to_result()
        except (json.JSONDecodeError, ValidationError) as exc:
            raise LLMRouterError(f"Invalid submit_route arguments: {exc}") from exc


class FallbackRouter:
    """Primary router under a hard timeout, with a deterministic fallback."""

    def __init__(
        self,
        primary: Router,
        fallback: Router | None = None,
        timeout_seconds: float = 8.0,
    ) -> None:
        self.primary = primary
        self.fallback = fallback or DeterministicRouter()
        self.timeout_seconds = timeout_seconds
        self.name = primary.name

    async def route(self, context: CaseContext) -> RouteResult:
        result, _ = await self.route_with_strategy(context)
        return result

    async def route_with_strategy(self, context: CaseContext) -> tuple[RouteResult, str]:
        """Route and report which strategy produced the result."""
        try:
            result = await asyncio.wait_for(
                self.primary.route(context), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"{self.primary.name} router timed out after {self.timeout_seconds}s; "
                f"using {self.fallback.name}"
            )
        except (LLMRouterError, httpx.HTTPError) as exc:
            logger.warning(f"{self.primary.name} router failed ({exc}); using {self.fallback.name}")
        else:
            return result, self.primary.name

        return await self.fallback.route(context), self.fallback.name


def build_router(settings: Settings, client: httpx.AsyncClient | None = None) -> Router:
    """Select the router strategy from settings.

    The LLM strategy is only used when enabled and configured with an API
    key; it is always wrapped in a FallbackRouter.
    """
    if not settings.llm_enabled:
        return DeterministicRouter()

    if client is None:
        client = httpx.AsyncClient(
            base_url=settings.llm_api_base,
            headers={"Authorization": f"Bearer {settings.llm_api_key}"},
            timeout=settings.llm_timeout_seconds,
        )
    llm = LLMRouter(client, settings.llm_model, settings.llm_max_tool_rounds)
    return FallbackRouter(llm, DeterministicRouter(), settings.llm_timeout_seconds)
