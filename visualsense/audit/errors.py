"""Terminal audit failures.

Each error carries a short, categorised message so callers can decide what to
do next ("try a different URL" vs "try again") without inspecting internals.
Per-candidate fetch failures are not represented here; they are dropped.
"""

from __future__ import annotations

TRY_DIFFERENT_URL = "try_different_url"
TRY_AGAIN = "try_again"


class AuditError(Exception):
    """Base class for errors that abort an audit invocation."""

    category: str = "audit"
    remediation: str = TRY_AGAIN
    default_message: str = "The audit failed."

    def __init__(self, message: str | None = None) -> None:
        self.user_message = message or self.default_message
        super().__init__(self.user_message)

    def to_dict(self) -> dict[str, str]:
        return {
            "category": self.category,
            "message": self.user_message,
            "remediation": self.remediation,
        }


class RetrievalBlocked(AuditError):
    """The target (or the proxy in front of it) refused or could not be reached."""

    category = "blocked"
    remediation = TRY_DIFFERENT_URL
    default_message = "Target site is unreachable or blocking the audit proxy."

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        unreachable: bool = False,
    ) -> None:
        self.status_code = status_code
        self.unreachable = unreachable
        if message is None:
            if unreachable:
                message = "The audit proxy could not be reached."
            elif status_code is not None:
                message = f"Status {status_code}: site is blocking the audit."
        super().__init__(message)
        # Proxy outages are transient; a blocking site is not.
        if unreachable:
            self.remediation = TRY_AGAIN


class NoCandidateAssets(AuditError):
    category = "no_assets"
    remediation = TRY_DIFFERENT_URL
    default_message = (
        "No compatible product images (JPEG/PNG/WebP) detected. "
        "The site might be using SVGs only or blocking access."
    )


class NoUsableAssets(AuditError):
    category = "no_assets"
    remediation = TRY_DIFFERENT_URL
    default_message = (
        "Could not extract supported image data. "
        "The detected images are incompatible with the audit engine."
    )


class AnalysisEngineFailure(AuditError):
    category = "analysis"
    remediation = TRY_AGAIN
    default_message = "The analysis engine failed to produce an audit."


class AnalysisContractViolation(AnalysisEngineFailure):
    """The analysis engine answered, but not with the declared JSON schema."""

    default_message = "The analysis engine returned a malformed audit."
