"""Network Error Handler for the Scheduler API Client.

Provides network error classification and user guidance for transport-level
failures. Errors are surfaced to the caller as-is; nothing here retries.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass
class UserGuidance:
    """User guidance information for network errors."""

    error_type: str
    troubleshooting_steps: List[str]
    contact_info: Optional[str] = None
    additional_notes: List[str] = field(default_factory=list)

    def format_for_console(self) -> str:
        """Format guidance as plain text for terminal output."""
        content = [f"Error Type: {self.error_type}", "", "Troubleshooting Steps:"]

        for i, step in enumerate(self.troubleshooting_steps, 1):
            content.append(f"{i}. {step}")

        if self.additional_notes:
            content.append("")
            content.append("Additional Notes:")
            for note in self.additional_notes:
                content.append(f"- {note}")

        if self.contact_info:
            content.append("")
            content.append(f"Support: {self.contact_info}")

        return "\n".join(content)


class TransportError(Exception):
    """Base exception for failures below the HTTP status layer.

    Covers network, DNS, TLS and timeout failures as well as redirect chains
    rejected by the redirect policy.
    """

    def __init__(self, message: str, user_guidance: Optional[str] = None):
        super().__init__(message)
        self.user_guidance = user_guidance or ""


class NetworkConnectionError(TransportError):
    """Exception raised for connection-related network failures."""

    pass


class NetworkTimeoutError(TransportError):
    """Exception raised for timeout-related network failures."""

    pass


class DNSResolutionError(TransportError):
    """Exception raised for DNS resolution failures."""

    pass


class SSLCertificateError(TransportError):
    """Exception raised for SSL certificate verification failures."""

    pass


# Troubleshooting steps per error class; the most specific class wins
GUIDANCE = {
    DNSResolutionError: UserGuidance(
        error_type="DNS Resolution Error",
        troubleshooting_steps=[
            "Verify the scheduler hostname in the endpoint",
            "Try the service IP address instead",
        ],
    ),
    SSLCertificateError: UserGuidance(
        error_type="SSL Certificate Error",
        troubleshooting_steps=[
            "Check that the scheduler certificate is valid for its hostname",
            "Update the local certificate store if it is outdated",
        ],
    ),
    NetworkTimeoutError: UserGuidance(
        error_type="Network Timeout Error",
        troubleshooting_steps=[
            "Check whether the scheduler is under heavy load",
            "Raise timeouts or total_timeout in the client config",
        ],
    ),
    NetworkConnectionError: UserGuidance(
        error_type="Network Connection Error",
        troubleshooting_steps=[
            "Check that the scheduler is running at the configured endpoint",
            "Check firewall rules between this host and the service",
        ],
        contact_info="Contact your system administrator if the problem persists",
    ),
    TransportError: UserGuidance(
        error_type="Transport Error",
        troubleshooting_steps=["Verify the scheduler endpoint is reachable"],
    ),
}


def guidance_for(error: Exception) -> UserGuidance:
    """Return the guidance registered for the closest class of ``error``."""
    for cls in type(error).__mro__:
        if cls in GUIDANCE:
            return GUIDANCE[cls]
    return GUIDANCE[TransportError]


class NetworkErrorHandler:
    """Classifies httpx transport failures into TransportError subclasses."""

    def __init__(self):
        self._dns_error_patterns = [
            r"name.*resolution.*failed",
            r"name.*or.*service.*not.*known",
            r"nodename.*nor.*servname.*provided",
            r"temporary.*failure.*in.*name.*resolution",
        ]
        self._connection_error_patterns = [
            r"connection.*refused",
            r"connection.*reset",
            r"network.*is.*unreachable",
            r"no.*route.*to.*host",
        ]
        self._ssl_error_patterns = [
            r"ssl.*certificate.*verification.*failed",
            r"certificate.*verify.*failed",
            r"ssl.*handshake.*failed",
            r"bad.*certificate",
        ]

    def classify_network_error(self, error: Exception) -> None:
        """Classify network error and raise appropriate specific exception.

        Args:
            error: The original httpx exception

        Raises:
            TransportError: Specific subclass based on classification
        """
        error_message = str(error).lower()

        if isinstance(error, TransportError):
            raise error
        if isinstance(error, httpx.ConnectError):
            self._handle_connect_error(error, error_message)
        elif isinstance(error, httpx.TimeoutException):
            self._handle_timeout_error(error, error_message)
        elif isinstance(error, httpx.NetworkError):
            self._raise_with_guidance(NetworkConnectionError(f"Network error: {error}"))
        elif isinstance(error, httpx.TransportError):
            self._raise_with_guidance(
                NetworkConnectionError(f"Transport error: {error}")
            )
        else:
            self._raise_with_guidance(
                NetworkConnectionError(f"Unknown network error: {error}")
            )

    def _handle_connect_error(
        self, error: httpx.ConnectError, error_message: str
    ) -> None:
        """Handle connection errors with specific classification."""
        if any(
            re.search(pattern, error_message) for pattern in self._dns_error_patterns
        ):
            self._raise_with_guidance(
                DNSResolutionError(
                    "Cannot resolve service address. Check the endpoint URL."
                )
            )

        if any(
            re.search(pattern, error_message) for pattern in self._ssl_error_patterns
        ):
            self._raise_with_guidance(
                SSLCertificateError(
                    "SSL certificate verification failed. Service may be using invalid certificate."
                )
            )

        if any(
            re.search(pattern, error_message)
            for pattern in self._connection_error_patterns
        ):
            self._raise_with_guidance(
                NetworkConnectionError(
                    "Cannot connect to service. Check if it is running and accessible."
                )
            )

        self._raise_with_guidance(NetworkConnectionError(f"Connection failed: {error}"))

    def _handle_timeout_error(self, error: Exception, error_message: str) -> None:
        """Handle timeout errors."""
        if "connect" in error_message or isinstance(error, httpx.ConnectTimeout):
            timeout_error = NetworkTimeoutError(
                "Connection timed out. Check your network connection or try again later."
            )
        else:
            timeout_error = NetworkTimeoutError(
                "Request timed out. Check your network connection or try again later."
            )
        self._raise_with_guidance(timeout_error)

    def _raise_with_guidance(self, error: TransportError) -> None:
        guidance = guidance_for(error)
        error.user_guidance = guidance.format_for_console()
        logger.debug(f"Classified transport failure as {type(error).__name__}")
        raise error
