from typing import List, Optional


class RoutingException(Exception):
    """Base exception for routing engine errors."""
    pass


class CatalogueValidationError(RoutingException):
    """Exception raised when a skill catalogue fails validation at load time."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        if not self.errors:
            return super().__str__()
        details = "\n".join(f"  - {error}" for error in self.errors)
        return f"{super().__str__()}\n{details}"


class CatalogueNotFoundError(RoutingException):
    """Exception raised when a catalogue file cannot be found."""
    pass


class HolidayLookupError(RoutingException):
    """Exception raised when the holiday calendar cannot answer."""
    pass


class ClassifierError(RoutingException):
    """Exception raised when the intent classifier fails."""
    pass


class IntegrationError(RoutingException):
    """Exception raised for integration connector errors."""

    def __init__(self, message: str, status_code: int = None, response_body: str = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
