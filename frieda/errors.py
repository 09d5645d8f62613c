"""Error taxonomy for the sampling pipeline.

All errors carry a stable machine-readable ``code`` and an optional ``data``
mapping with structured context.

- InvalidInputError: malformed sizes, shapes or configuration (caller bug).
- VerificationFailedError: a proof did not verify where one was required.
- DecodingError: reconstruction lacks samples or found inconsistent ones.

Note that ``verify_proof`` itself never raises VerificationFailedError; it
returns False. The exception is used by callers (reconstruction) that
cannot continue without a valid proof.
"""

from typing import Any, Dict, Mapping, Optional


class FriedaError(Exception):
    """Base class for all errors raised by this package."""

    default_code = "frieda_error"

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        data: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.data: Dict[str, Any] = dict(data) if data else {}

    def __str__(self) -> str:
        if self.message:
            return f"{self.code}: {self.message}"
        return self.code


class InvalidInputError(FriedaError, ValueError):
    """Malformed size, shape or configuration."""

    default_code = "invalid_input"


class VerificationFailedError(FriedaError):
    """A proof failed verification."""

    default_code = "verification_failed"


class DecodingError(FriedaError, ValueError):
    """Not enough distinct samples, or samples that disagree."""

    default_code = "decoding_error"


__all__ = [
    "FriedaError",
    "InvalidInputError",
    "VerificationFailedError",
    "DecodingError",
]
