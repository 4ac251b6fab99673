"""
Base extractor with error classification and structured logging.

Every catalog call is made exactly once: a timeout, transport error or
error status is reported to the caller as a failed ExtractionResult and
never retried automatically.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, Field

from gamevault.config import get_settings
from gamevault.logger import get_logger

# Type variable for response models
T = TypeVar("T", bound=BaseModel)


class ExtractionError(Exception):
    """Base exception for extraction errors."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        endpoint: str | None = None,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.endpoint = endpoint
        self.status_code = status_code
        self.original_error = original_error
        self.timestamp = datetime.now(timezone.utc)


class RateLimitError(ExtractionError):
    """Raised when the API answers 429."""

    pass


class APIError(ExtractionError):
    """Raised when API returns an error response."""

    pass


class ValidationError(ExtractionError):
    """Raised when response validation fails."""

    pass


class ExtractionResult(BaseModel, Generic[T]):
    """
    Wrapper for extraction results with metadata.

    Provides consistent structure for all extraction outputs,
    including timing, source tracking, and error information.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    data: T | None = None
    error_message: str | None = None
    extracted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source: str
    endpoint: str
    duration_ms: float | None = None
    status_code: int | None = None


class BaseExtractor(ABC, Generic[T]):
    """
    Abstract base class for all data extractors.

    Provides common functionality including:
    - HTTP client management (owned or injected)
    - Error status classification
    - Structured logging

    Subclasses must implement:
    - source_name: Identifier for the data source
    - extract(): Main extraction logic
    - _parse_response(): Response parsing and validation
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize the extractor.

        Args:
            client: Shared HTTP client; the extractor never closes a client it did not create
            timeout: HTTP request timeout in seconds
        """
        settings = get_settings()
        self._timeout = timeout or settings.steam.timeout_seconds
        self._user_agent = settings.steam.user_agent
        self._logger = get_logger(
            self.__class__.__name__,
            component="extractor",
            source=self.source_name,
        )
        self._client = client
        self._owns_client = client is None

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Return identifier for this data source."""
        ...

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                headers={
                    "User-Agent": self._user_agent,
                    "Accept": "application/json",
                },
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close HTTP client and release resources."""
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BaseExtractor[T]":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _make_request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Make a single HTTP request.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Request URL
            **kwargs: Additional arguments passed to httpx

        Returns:
            httpx.Response: Successful response

        Raises:
            RateLimitError: If the API answered 429
            APIError: If API returns error response
            ExtractionError: For timeouts and transport failures
        """
        self._logger.debug("Making request", method=method, url=url)

        try:
            response = await self.client.request(
                method, url, timeout=httpx.Timeout(self._timeout), **kwargs
            )
        except httpx.TimeoutException as e:
            raise ExtractionError(
                f"Request timed out after {self._timeout}s",
                source=self.source_name,
                endpoint=url,
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            raise ExtractionError(
                f"Request failed: {e}",
                source=self.source_name,
                endpoint=url,
                original_error=e,
            ) from e

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After", "unknown")
            raise RateLimitError(
                f"Rate limit exceeded. Retry after {retry_after}s",
                source=self.source_name,
                endpoint=url,
                status_code=429,
            )

        if response.status_code >= 400:
            raise APIError(
                f"API error: {response.status_code}",
                source=self.source_name,
                endpoint=url,
                status_code=response.status_code,
            )

        return response

    def _decode_json(self, response: httpx.Response, endpoint: str) -> Any:
        """Decode a response body, raising ValidationError on malformed JSON."""
        try:
            return response.json()
        except ValueError as e:
            raise ValidationError(
                f"Response is not valid JSON: {e}",
                source=self.source_name,
                endpoint=endpoint,
                status_code=response.status_code,
            ) from e

    def _failure(
        self,
        endpoint: str,
        message: str,
        duration_ms: float,
        status_code: int | None = None,
    ) -> ExtractionResult[T]:
        """Build an unsuccessful result."""
        return ExtractionResult(
            success=False,
            error_message=message,
            source=self.source_name,
            endpoint=endpoint,
            duration_ms=duration_ms,
            status_code=status_code,
        )

    @abstractmethod
    async def extract(self, *args: Any, **kwargs: Any) -> ExtractionResult[T]:
        """
        Execute extraction logic.

        Implementations never raise for remote failures; they return
        an unsuccessful ExtractionResult instead.
        """
        ...

    @abstractmethod
    def _parse_response(self, raw_data: Any) -> T:
        """
        Parse and validate raw API response.

        Raises:
            ValidationError: If response doesn't match expected schema
        """
        ...
