import httpx
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

from ..config.settings import settings
from ..core.exceptions.routing_exceptions import IntegrationError


@dataclass
class ExecutionResult:
    success: bool
    result_payload: Dict[str, Any] = field(default_factory=dict)


class IntegrationConnector(Protocol):
    """Performs the physical side effect of a dispatched tool."""

    async def execute(self, action: str, params: Dict[str, Any]) -> ExecutionResult:
        ...


class HttpIntegrationConnector:
    """HTTP client for integration connectors (EHR, calendar, SMS, transfer)."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.base_url = base_url or settings.integration_base_url
        self.api_key = api_key or settings.integration_api_key
        self.timeout = timeout or settings.tool_timeout_seconds

        if not self.base_url:
            raise ValueError(
                "Integration URL not configured. Set FRONTDESK_INTEGRATION_BASE_URL "
                "or pass base_url explicitly."
            )

        self.headers = {"Content-Type": "application/json"}
        if self.api_key:
            self.headers["Authorization"] = f"Bearer {self.api_key}"

    async def execute(self, action: str, params: Dict[str, Any]) -> ExecutionResult:
        """POST the action parameters to ``{base_url}/actions/{action}``."""
        url = f"{self.base_url.rstrip('/')}/actions/{action}"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(url, headers=self.headers, json=params)
                response.raise_for_status()
                payload = response.json()

            except httpx.HTTPStatusError as e:
                raise IntegrationError(
                    message=f"Integration error: {e.response.text}",
                    status_code=e.response.status_code,
                    response_body=e.response.text
                ) from e

            except httpx.RequestError as e:
                raise IntegrationError(f"Request failed: {str(e)}") from e

            except ValueError as e:
                raise IntegrationError(f"Integration returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            return ExecutionResult(success=True, result_payload={"result": payload})

        return ExecutionResult(
            success=bool(payload.get("success", True)),
            result_payload=payload.get("result", payload)
        )


class ConnectorRegistry:
    """Connectors keyed by tool name (transfer, ivr, calendar, ehr, sms, fallback)."""

    def __init__(self, connectors: Optional[Dict[str, IntegrationConnector]] = None):
        self._connectors: Dict[str, IntegrationConnector] = {}
        for tool, connector in (connectors or {}).items():
            self.register(tool, connector)

    def register(self, tool: str, connector: IntegrationConnector):
        self._connectors[str(getattr(tool, "value", tool))] = connector

    def get(self, tool: str) -> Optional[IntegrationConnector]:
        return self._connectors.get(str(getattr(tool, "value", tool)))

    def __contains__(self, tool: str) -> bool:
        return self.get(tool) is not None

    def __len__(self) -> int:
        return len(self._connectors)
