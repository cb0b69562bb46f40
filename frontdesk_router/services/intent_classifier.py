import httpx
from dataclasses import dataclass
from typing import Optional, Protocol

from ..config.settings import settings
from ..core.exceptions.routing_exceptions import ClassifierError


@dataclass
class Classification:
    intent: Optional[str]
    confidence: float


class IntentClassifier(Protocol):
    """External intent classifier. Confidence is trusted as-is."""

    async def classify(self, text: str) -> Classification:
        ...


class HttpIntentClassifier:
    """HTTP client for a remote intent classifier.

    ``POST {url}`` with ``{"text": ...}`` must answer
    ``{"intent": str | null, "confidence": float}``.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.url = url or settings.classifier_url
        self.api_key = api_key or settings.classifier_api_key
        self.timeout = timeout or settings.classifier_timeout_seconds

        if not self.url:
            raise ValueError(
                "Classifier URL not configured. Set FRONTDESK_CLASSIFIER_URL "
                "or pass url explicitly."
            )

        self.headers = {"Content-Type": "application/json"}
        if self.api_key:
            self.headers["Authorization"] = f"Bearer {self.api_key}"

    async def classify(self, text: str) -> Classification:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(self.url, headers=self.headers, json={"text": text})
                response.raise_for_status()
                payload = response.json()
            except httpx.HTTPStatusError as e:
                raise ClassifierError(
                    f"Classifier error ({e.response.status_code}): {e.response.text}"
                ) from e
            except httpx.RequestError as e:
                raise ClassifierError(f"Classifier request failed: {str(e)}") from e
            except ValueError as e:
                raise ClassifierError(f"Classifier returned invalid JSON: {e}") from e

        try:
            confidence = float(payload.get("confidence", 0.0))
        except (AttributeError, TypeError, ValueError) as e:
            raise ClassifierError(f"Unexpected classifier response: {payload!r}") from e

        return Classification(
            intent=payload.get("intent"),
            confidence=min(max(confidence, 0.0), 1.0)
        )
