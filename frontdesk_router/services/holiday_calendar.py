import httpx
from datetime import date
from typing import Dict, Iterable, Optional, Protocol, Set, Tuple

from ..config.settings import settings
from ..core.exceptions.routing_exceptions import HolidayLookupError


class HolidayCalendar(Protocol):
    """Best-effort holiday lookup consulted by the schedule evaluator."""

    async def is_holiday(self, day: date, region: str) -> bool:
        ...


class StaticHolidayCalendar:
    """Holiday calendar backed by fixed date lists.

    Dates passed as ``holidays`` apply to every region; ``regions`` adds
    region-specific dates.
    """

    def __init__(
        self,
        holidays: Iterable[date] = (),
        regions: Optional[Dict[str, Iterable[date]]] = None
    ):
        self.holidays: Set[date] = set(holidays)
        self.regions: Dict[str, Set[date]] = {
            region.upper(): set(days) for region, days in (regions or {}).items()
        }

    async def is_holiday(self, day: date, region: str) -> bool:
        if day in self.holidays:
            return True
        return day in self.regions.get((region or "").upper(), set())


class HttpHolidayCalendar:
    """HTTP client for a remote holiday service.

    Expects ``GET {base_url}/holidays?date=YYYY-MM-DD&region=XX`` to answer
    ``{"holiday": true|false}``. Answers are cached per (date, region).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        self.base_url = base_url or settings.holiday_api_url
        self.api_key = api_key or settings.holiday_api_key
        self.timeout = timeout or settings.holiday_timeout_seconds
        self._cache: Dict[Tuple[date, str], bool] = {}

        if not self.base_url:
            raise ValueError(
                "Holiday service URL not configured. Set FRONTDESK_HOLIDAY_API_URL "
                "or pass base_url explicitly."
            )

        self.headers = {"Content-Type": "application/json"}
        if self.api_key:
            self.headers["Authorization"] = f"Bearer {self.api_key}"

    async def is_holiday(self, day: date, region: str) -> bool:
        key = (day, region)
        if key in self._cache:
            return self._cache[key]

        url = f"{self.base_url.rstrip('/')}/holidays"
        params = {"date": day.isoformat(), "region": region}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(url, headers=self.headers, params=params)
                response.raise_for_status()
                payload = response.json()
            except httpx.HTTPStatusError as e:
                raise HolidayLookupError(
                    f"Holiday service error ({e.response.status_code}): {e.response.text}"
                ) from e
            except httpx.RequestError as e:
                raise HolidayLookupError(f"Holiday lookup failed: {str(e)}") from e
            except ValueError as e:
                raise HolidayLookupError(f"Holiday service returned invalid JSON: {e}") from e

        if not isinstance(payload, dict) or "holiday" not in payload:
            raise HolidayLookupError(f"Unexpected holiday service response: {payload!r}")

        result = bool(payload["holiday"])
        self._cache[key] = result
        return result
