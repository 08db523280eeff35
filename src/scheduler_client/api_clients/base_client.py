"""Base Scheduler API Client.

Owns the HTTP session and redirect policy shared by every scheduler operation,
and defines the API-level error types.
"""

import logging
import time
from typing import Optional, Type, TypeVar

import httpx
from pydantic import BaseModel

from ..config import ClientConfig, JSON_CONTENT_TYPE
from .network_error_handler import NetworkErrorHandler
from .redirect_policy import DEFAULT_USER_AGENT, RedirectPolicy, send_with_redirects

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class APIClientError(Exception):
    """Base exception for API client errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class JobNotFoundError(APIClientError):
    """Exception raised when a job lookup does not return 200."""

    def __init__(self, status_code: Optional[int] = None):
        super().__init__("Job not found", status_code)


class JobCreationError(APIClientError):
    """Exception raised when job creation does not return 201."""

    def __init__(self, status_code: Optional[int] = None):
        super().__init__("Error creating job", status_code)


class GenericRequestError(APIClientError):
    """Exception raised when a listing or stats endpoint returns an unexpected status."""

    def __init__(self, status_code: Optional[int] = None):
        super().__init__("An error occurred performing your request", status_code)


class DeleteFailedError(APIClientError):
    """Exception raised when job deletion does not return 204."""

    def __init__(self, status_code: int):
        super().__init__(
            f"Delete failed with a status code of {status_code}", status_code
        )


class SchedulerAPIClient:
    """Base API client bound to one scheduler endpoint."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize base API client.

        Args:
            endpoint: Base URL of the scheduler; overrides config.endpoint
            config: Client configuration (defaults used if omitted)
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        if config is None:
            config = ClientConfig()
        if endpoint is not None:
            config = config.model_copy(
                update={"endpoint": ClientConfig(endpoint=endpoint).endpoint}
            )
        self.config = config
        self.api_base_url = config.api_base_url

        user_agent = config.user_agent or DEFAULT_USER_AGENT
        self.redirect_policy = RedirectPolicy(
            max_redirects=config.max_redirects, user_agent=user_agent
        )
        self._network_error_handler = NetworkErrorHandler()

        timeouts = httpx.Timeout(
            connect=config.timeouts.connect,
            read=config.timeouts.read,
            write=config.timeouts.write,
            pool=config.timeouts.pool,
        )
        self.session = httpx.Client(
            timeout=timeouts,
            headers={"Content-Type": JSON_CONTENT_TYPE, "User-Agent": user_agent},
            follow_redirects=False,  # redirects go through self.redirect_policy
            transport=transport,
        )
        logger.debug(
            f"Scheduler client created for {self.api_base_url} "
            f"(max_redirects={config.max_redirects})"
        )

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    def url_for(self, path: str) -> str:
        """Resolve an API path against the versioned API base."""
        return f"{self.api_base_url}{path}"

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Issue one logical request, following approved redirects.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: API path relative to the API base
            **kwargs: Additional arguments for httpx request building

        Returns:
            The final (non-redirect) HTTP response

        Raises:
            TransportError: Network, DNS, TLS, timeout or redirect-limit failure
        """
        deadline = None
        if self.config.total_timeout is not None:
            deadline = time.monotonic() + self.config.total_timeout

        request = self.session.build_request(method, self.url_for(path), **kwargs)
        logger.debug(f"{method} {request.url}")

        try:
            return send_with_redirects(
                self.session, request, self.redirect_policy, deadline=deadline
            )
        except httpx.TransportError as e:
            self._network_error_handler.classify_network_error(e)
            raise

    def _decode(self, response: httpx.Response, model: Type[ModelT]) -> ModelT:
        """Decode a JSON response body into ``model``."""
        try:
            return model.model_validate(response.json())
        except ValueError as e:
            raise APIClientError(
                f"Invalid {model.__name__} payload: {e}", response.status_code
            ) from e

    def close(self) -> None:
        """Close HTTP session and release connections."""
        if not self.session.is_closed:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
