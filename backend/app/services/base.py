"""
Base Service Interface

Computation services inherit from BaseService; every failure the service
layer reports is a ServiceError subclass.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Base class for computation services.

    Each service:
    - Has a defined input type
    - Has a defined output type
    - Can check its health
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name for logging."""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Execute the service's main function.

        Args:
            input_data: Input conforming to InputT

        Returns:
            Output conforming to OutputT

        Raises:
            ServiceError: If execution fails
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if service is healthy and can process requests."""
        pass


class ServiceError(Exception):
    """Base exception for service errors."""

    code = "service_error"
    status_code = 500

    def __init__(self, service_name: str, message: str, details: dict = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class IngestionError(ServiceError):
    """Source file missing or malformed while building the candle store."""

    code = "ingestion_failed"
    status_code = 500


class EmptyRangeError(ServiceError):
    """Range query selects no candles (start after end, or nothing in between)."""

    code = "empty_range"
    status_code = 400


class DateParseError(ServiceError):
    """Date parameter does not match the accepted format."""

    code = "invalid_date"
    status_code = 400


class StoreUnavailableError(ServiceError):
    """Durable store could not be read."""

    code = "store_unavailable"
    status_code = 503


class LimitExceededError(ServiceError):
    """Requested candle count is above the configured maximum."""

    code = "limit_exceeded"
    status_code = 400
