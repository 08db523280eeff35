"""Bounded, host-aware redirect handling for the Scheduler API Client.

The httpx session is created with auto-redirect disabled; every redirect hop is
followed here and approved by a RedirectPolicy.

Policy:
- **Hop limit**: a logical call may send at most ``max_redirects`` requests
  (original request included); the redirect that would exceed it fails with
  TooManyRedirectsError.
- **Method preservation**: the candidate request always reuses the method (and
  body) of the preceding request, even where httpx would downgrade to GET.
- **Host gating**: headers of the preceding request are forwarded only when the
  target has the same hostname (case-insensitive, port ignored). Any other
  target, including an unparsable one, receives a single User-Agent header.

Example:
    >>> policy = RedirectPolicy(max_redirects=5)
    >>> request = client.build_request("POST", url, json=body)
    >>> response = send_with_redirects(client, request, policy)
"""

import logging
import time
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Union
from urllib.parse import urlsplit

import httpx

from .. import __version__
from .network_error_handler import NetworkTimeoutError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_MAX_REDIRECTS = 10
DEFAULT_USER_AGENT = f"scheduler-client/{__version__}"
REDIRECT_STATUS_CODES = frozenset({301, 302, 303, 307, 308})

# Recomputed by httpx for every request, never copied between hops
TRANSPORT_MANAGED_HEADERS = frozenset({"host", "content-length", "transfer-encoding"})

HeadersLike = Union[httpx.Headers, Mapping[str, str]]


class RedirectError(TransportError):
    """Base exception for redirect handling errors."""

    pass


class TooManyRedirectsError(RedirectError):
    """Redirect chain reached the configured hop limit."""

    def __init__(self, max_redirects: int):
        self.max_redirects = max_redirects
        super().__init__(f"Stopped after {max_redirects} redirects")


@dataclass(frozen=True)
class RedirectContext:
    """Information about one proposed redirect hop.

    Attributes:
        candidate: Request httpx proposes for the redirect target
        previous: Request that received the redirect response
        chain_length: Requests already sent in this call, original included
    """

    candidate: httpx.Request
    previous: httpx.Request
    chain_length: int


@dataclass(frozen=True)
class RedirectDecision:
    """Method and headers to apply to an approved redirect request."""

    method: str
    headers: httpx.Headers
    forwarded: bool


def normalize_hostname(host: Optional[str]) -> Optional[str]:
    """Reduce ``host[:port]`` to a lower-cased hostname.

    Returns None for empty or malformed values (bad port, userinfo, path
    characters, unbalanced IPv6 brackets).
    """
    if not host:
        return None
    host = host.strip()
    if not host or any(char in host for char in "/?#@ \t"):
        return None
    try:
        parts = urlsplit(f"//{host}")
        hostname = parts.hostname
        parts.port
    except ValueError:
        return None
    if not hostname:
        return None
    return hostname.lower()


def same_host(first: Optional[str], second: Optional[str]) -> bool:
    """True when both values name the same hostname; malformed never matches."""
    first_hostname = normalize_hostname(first)
    if first_hostname is None:
        return False
    return first_hostname == normalize_hostname(second)


def decide(
    previous_host: Optional[str],
    previous_headers: HeadersLike,
    previous_method: str,
    candidate_host: Optional[str],
    candidate_headers: Optional[HeadersLike] = None,
    user_agent: str = DEFAULT_USER_AGENT,
) -> RedirectDecision:
    """Decide the method and headers for a redirect candidate.

    Args:
        previous_host: ``host[:port]`` of the request that was redirected
        previous_headers: Headers sent with that request
        previous_method: Method of that request
        candidate_host: ``host[:port]`` of the redirect target
        candidate_headers: Headers the transport put on the candidate by default
        user_agent: Client identifier sent to a different host

    Returns:
        RedirectDecision with the method to use and the complete header set
    """
    method = previous_method.upper()

    if not same_host(previous_host, candidate_host):
        return RedirectDecision(
            method=method,
            headers=httpx.Headers({"User-Agent": user_agent}),
            forwarded=False,
        )

    forwarded = [
        (name, value)
        for name, value in httpx.Headers(previous_headers).multi_items()
        if name.lower() not in TRANSPORT_MANAGED_HEADERS
    ]
    overwritten = {name.lower() for name, _ in forwarded}
    kept = [
        (name, value)
        for name, value in httpx.Headers(candidate_headers or {}).multi_items()
        if name.lower() not in overwritten
    ]
    return RedirectDecision(
        method=method, headers=httpx.Headers(kept + forwarded), forwarded=True
    )


def _host_of(request: httpx.Request) -> str:
    # netloc rather than url.host: decide() takes host[:port] strings, and a
    # bare IPv6 host without brackets would not normalize
    return request.url.netloc.decode("ascii")


class RedirectPolicy:
    """Hop-limited, host-gated approval of redirect candidates.

    Holds configuration only; hop counting belongs to the caller's chain, so a
    single instance can be shared across concurrent calls.
    """

    def __init__(
        self,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        if (
            isinstance(max_redirects, bool)
            or not isinstance(max_redirects, int)
            or max_redirects <= 0
        ):
            raise ValueError(
                f"max_redirects must be a positive integer, got {max_redirects!r}"
            )
        self.max_redirects = max_redirects
        self.user_agent = user_agent

    def check(self, context: RedirectContext) -> httpx.Request:
        """Approve a redirect hop.

        Args:
            context: The proposed hop

        Returns:
            The request to send to the redirect target

        Raises:
            TooManyRedirectsError: If the chain already holds max_redirects requests
        """
        if context.chain_length >= self.max_redirects:
            raise TooManyRedirectsError(self.max_redirects)

        previous = context.previous
        candidate = context.candidate
        decision = decide(
            _host_of(previous),
            previous.headers,
            previous.method,
            _host_of(candidate),
            candidate_headers=candidate.headers,
            user_agent=self.user_agent,
        )
        logger.debug(
            f"Redirect {previous.method} {previous.url} -> {candidate.url}: "
            f"{'forwarding headers' if decision.forwarded else 'cross-host, headers stripped'}"
        )

        return httpx.Request(
            decision.method,
            candidate.url,
            headers=decision.headers,
            content=previous.content or None,
            extensions=dict(candidate.extensions),
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(max_redirects={self.max_redirects})"


def _apply_deadline(request: httpx.Request, deadline: Optional[float]) -> None:
    """Cap every timeout of ``request`` to the time left before ``deadline``."""
    if deadline is None:
        return

    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise NetworkTimeoutError(
            f"Request deadline exceeded before {request.method} {request.url}"
        )

    timeouts: Dict[str, Optional[float]] = dict(
        request.extensions.get("timeout", {})
    )
    for phase in ("connect", "read", "write", "pool"):
        configured = timeouts.get(phase)
        timeouts[phase] = remaining if configured is None else min(configured, remaining)
    request.extensions = {**request.extensions, "timeout": timeouts}


def send_with_redirects(
    client: httpx.Client,
    request: httpx.Request,
    policy: RedirectPolicy,
    deadline: Optional[float] = None,
) -> httpx.Response:
    """Send ``request`` and follow redirects approved by ``policy``.

    Args:
        client: HTTPX Client used to send each hop
        request: Initial request
        policy: Redirect policy consulted for every redirect response
        deadline: Optional ``time.monotonic()`` value bounding the whole chain.
            Checked and applied as a timeout cap before each hop is sent; a
            response that keeps trickling data within the read timeout can
            still run past it.

    Returns:
        The first non-redirect response

    Raises:
        TooManyRedirectsError: If the policy rejects a hop
        NetworkTimeoutError: If the deadline passes mid-chain
        httpx.TransportError: If an underlying request fails
    """
    chain_length = 0
    current = request

    while True:
        _apply_deadline(current, deadline)
        response = client.send(current, follow_redirects=False)
        chain_length += 1

        candidate = response.next_request
        if response.status_code not in REDIRECT_STATUS_CODES or candidate is None:
            logger.debug(
                f"{current.method} {current.url} completed with {response.status_code} "
                f"after {chain_length - 1} redirect(s)"
            )
            return response

        response.close()
        current = policy.check(
            RedirectContext(
                candidate=candidate, previous=current, chain_length=chain_length
            )
        )
