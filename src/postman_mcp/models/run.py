"""Run request and metrics models.

RunRequest is validated before any network or cache work happens.
MetricsView is a derived projection of a cached run summary and is
never stored on its own.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from postman_mcp.errors import ValidationError

DEFAULT_TIMEOUT_MS = 60000
DEFAULT_ITERATION_COUNT = 1


class RunRequest(BaseModel):
    """Input of a single collection run."""

    model_config = {"extra": "forbid"}

    collection_id: str
    environment_id: str | None = None
    scope: str | None = None
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=1)
    iteration_count: int = Field(default=DEFAULT_ITERATION_COUNT, ge=1)

    @field_validator("collection_id")
    @classmethod
    def _collection_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("collectionId is required")
        return value

    @field_validator("environment_id", "scope")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @classmethod
    def build(cls, **fields: Any) -> RunRequest:
        """Validate fields into a RunRequest, dropping None values.

        None means "use the default" for timeout and iteration count.

        Raises:
            ValidationError: If a field is missing or invalid.
        """
        if not fields.get("collection_id"):
            raise ValidationError("collectionId is required")
        present = {k: v for k, v in fields.items() if v is not None}
        try:
            return cls.model_validate(present)
        except PydanticValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            )
            raise ValidationError(f"Invalid run arguments: {details}") from exc


class MetricsView(BaseModel):
    """Compact metrics derived from a run summary.

    Counter blocks are the engine's own aggregate counters, passed
    through unchanged (Newman reports ``total``, ``pending`` and
    ``failed`` for each).
    """

    assertions: dict[str, Any] = Field(default_factory=dict)
    iterations: dict[str, Any] = Field(default_factory=dict)
    requests: dict[str, Any] = Field(default_factory=dict)
    test_scripts: dict[str, Any] = Field(default_factory=dict)
    prerequest_scripts: dict[str, Any] = Field(default_factory=dict)
    transfers: dict[str, Any] = Field(default_factory=dict)
    started: int | float | str | None = None
    completed: int | float | str | None = None
    response_average: float | None = None
    failures: int = 0
