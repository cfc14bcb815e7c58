"""Error kinds raised by the advisory engine.

Load-time defects (``RuleConflict``) abort engine construction.  Per-call
defects (``InvalidConfiguration``, ``UnsupportedFeatureForVersion``) abort a
single call and are turned into structured :class:`AdvisoryIssue` entries by
the orchestrator.  ``IncompleteFacts`` never aborts anything; it only exists
so that defaulted fields are reported with the same shape as errors.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class AdvisoryIssue(BaseModel):
    """Structured form of an error or warning returned to the caller."""

    code: str = Field(..., description="Stable machine-readable error code")
    message: str = Field(..., description="Human-readable explanation")
    detail: dict[str, Any] = Field(default_factory=dict, description="Extra context")


class AdvisorError(Exception):
    """Base class for every advisory engine error."""

    code = "advisor-error"

    def __init__(self, message: str, **detail: Any) -> None:
        self.detail = detail
        super().__init__(message)

    def as_issue(self) -> AdvisoryIssue:
        return AdvisoryIssue(code=self.code, message=str(self), detail=dict(self.detail))


class RuleConflict(AdvisorError):
    """Raised at load time when the rule table is malformed."""

    code = "rule-conflict"


class InvalidConfiguration(AdvisorError):
    """Raised when caller-supplied options contradict each other."""

    code = "invalid-configuration"


class UnsupportedFeatureForVersion(AdvisorError):
    """Raised when a recommendation needs a feature the declared version lacks."""

    code = "unsupported-feature-for-version"

    def __init__(self, feature: str, version: str, minimum: str) -> None:
        self.feature = feature
        self.version = version
        self.minimum = minimum
        super().__init__(
            f"'{feature}' requires version >= {minimum} but the project declares {version}",
            feature=feature,
            version=version,
            minimum=minimum,
        )


class IncompleteFacts(AdvisorError):
    """Describes a fact the caller left out and which was defaulted."""

    code = "incomplete-facts"

    def __init__(self, field: str, default: Any) -> None:
        self.field = field
        self.default = default
        super().__init__(
            f"'{field}' was not supplied; assuming {default!r}",
            field=field,
            default=default,
        )
