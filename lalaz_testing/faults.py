"""
Lalaz Testing - Fault taxonomy.

Faults are typed exceptions carrying a stable machine-readable ``code``,
a human-readable ``message``, a ``domain`` and a ``severity``.  The
harness raises them where a test must fail loudly (a fallback container
lookup miss, an unreadable env file) and builds them, without raising,
where failures are tolerated (unloadable service providers).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class Severity(str, Enum):
    """Fault severity levels."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


class FaultDomain(str, Enum):
    """Functional area where a fault occurred."""
    DI = "di"
    CONFIG = "config"


class Fault(Exception):
    """
    Base fault class.

    Attributes:
        code: Stable identifier (e.g. ``"SERVICE_NOT_FOUND"``)
        message: Human-readable summary
        domain: Fault domain
        severity: Fault severity
        metadata: Additional context data
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        domain: FaultDomain,
        severity: Severity = Severity.ERROR,
        metadata: Optional[dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.domain = domain
        self.severity = severity
        self.metadata = metadata or {}
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(code={self.code!r}, "
            f"domain={self.domain.value}, severity={self.severity.value})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize fault to a dictionary (for logging)."""
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "metadata": self.metadata,
        }


# ============================================================================
# Container Faults
# ============================================================================

class ContainerFault(Fault):
    """Base class for container and provider faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.DI,
            severity=severity,
            metadata=metadata,
        )


class ServiceNotFoundFault(ContainerFault, LookupError):
    """Service identifier unknown to the fallback container."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(
            code="SERVICE_NOT_FOUND",
            message=f"Service not found: {identifier}",
            metadata={"identifier": identifier},
        )


class ProviderLoadFault(ContainerFault):
    """Service provider class could not be loaded."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(
            code="PROVIDER_LOAD_FAILED",
            message=f"Cannot load service provider '{provider}': {reason}",
            severity=Severity.WARN,
            metadata={"provider": provider, "reason": reason},
        )


# ============================================================================
# Config Faults
# ============================================================================

class ConfigFault(Fault):
    """Test configuration could not be loaded."""

    def __init__(self, key: str, reason: str):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Config '{key}' invalid: {reason}",
            domain=FaultDomain.CONFIG,
            metadata={"key": key, "reason": reason},
        )
