"""Typed domain errors for the waymark routing client.

All errors inherit from WaymarkError and can optionally wrap a root
cause exception for debugging.

A response dropped because a newer request was issued after it is not
an error: the gateway logs it as a suppressed race and moves on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class WaymarkError(Exception):
    """Base error for the routing client.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class NetworkError(WaymarkError):
    """Transport failure or non-success response from a backend.

    Attributes:
        status_code: HTTP status code, if a response was received
        url: The URL that was requested
    """

    status_code: Optional[int] = None
    url: str = ""


@dataclass
class CodecError(WaymarkError):
    """Malformed polyline string.

    Attributes:
        position: Character index where decoding failed
    """

    position: int = -1


@dataclass
class ValidationError(WaymarkError):
    """Request arguments are incomplete before anything is sent.

    Attributes:
        field_name: Name of the missing or invalid argument
    """

    field_name: str = ""


@dataclass
class ConfigurationError(WaymarkError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
    """

    setting_name: str = ""
