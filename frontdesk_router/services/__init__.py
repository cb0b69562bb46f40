from .holiday_calendar import HolidayCalendar, StaticHolidayCalendar, HttpHolidayCalendar
from .intent_classifier import IntentClassifier, HttpIntentClassifier, Classification
from .integration_client import (
    IntegrationConnector,
    HttpIntegrationConnector,
    ConnectorRegistry,
    ExecutionResult
)

__all__ = [
    "HolidayCalendar",
    "StaticHolidayCalendar",
    "HttpHolidayCalendar",
    "IntentClassifier",
    "HttpIntentClassifier",
    "Classification",
    "IntegrationConnector",
    "HttpIntegrationConnector",
    "ConnectorRegistry",
    "ExecutionResult"
]
