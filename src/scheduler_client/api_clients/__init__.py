"""API Client Abstractions for the scheduler service.

Provides HTTP client abstractions with no raw HTTP calls in calling code.
All HTTP functionality is contained within dedicated API client classes.
"""

from .base_client import (
    SchedulerAPIClient,
    APIClientError,
    JobNotFoundError,
    JobCreationError,
    GenericRequestError,
    DeleteFailedError,
)
from .jobs_client import SchedulerClient, create_client
from .network_error_handler import (
    TransportError,
    NetworkConnectionError,
    NetworkTimeoutError,
    DNSResolutionError,
    SSLCertificateError,
)
from .redirect_policy import (
    RedirectPolicy,
    RedirectContext,
    RedirectDecision,
    RedirectError,
    TooManyRedirectsError,
    decide,
    send_with_redirects,
)

__all__ = [
    # Base client
    "SchedulerAPIClient",
    "APIClientError",
    "JobNotFoundError",
    "JobCreationError",
    "GenericRequestError",
    "DeleteFailedError",
    # Jobs client
    "SchedulerClient",
    "create_client",
    # Transport errors
    "TransportError",
    "NetworkConnectionError",
    "NetworkTimeoutError",
    "DNSResolutionError",
    "SSLCertificateError",
    # Redirect handling
    "RedirectPolicy",
    "RedirectContext",
    "RedirectDecision",
    "RedirectError",
    "TooManyRedirectsError",
    "decide",
    "send_with_redirects",
]
