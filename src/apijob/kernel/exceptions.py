"""Exception hierarchy for apijob.

Job outcomes are reported through error codes, never exceptions. The
exceptions below cover everything else: failures crossing the transport
port boundary, misuse of a job's life cycle, and configuration errors.

Categories:
- BusinessException: programming and contract errors at the call site
- InfrastructureException: transport and network failures
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class ApiJobException(Exception):
    """Base exception for all apijob errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "TRANSPORT_TIMEOUT").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Business Exceptions
# =============================================================================


class BusinessException(ApiJobException):
    """Contract violations by the caller or by a concrete job type."""


class JobStateException(BusinessException):
    """Operation is not allowed in the job's current state."""


class ConfigurationException(BusinessException):
    """Configuration could not be loaded or bound."""


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(ApiJobException):
    """Infrastructure failures: network, TLS, timeouts."""


class TransportException(InfrastructureException):
    """The transport provider could not deliver a reply."""


class TransportConnectionException(TransportException):
    """Connection refused, reset, or otherwise broken below HTTP."""


class TransportTlsException(TransportException):
    """TLS handshake or certificate validation failed."""


class TransportTimeoutException(TransportException):
    """The transport gave up waiting for the remote side."""
