"""Error taxonomy for the brand pipeline.

Every failure a route can report is a BrandPipelineError subclass. The
application-level exception handler turns them into JSON error bodies:
{"error": str, "details": Any, "code": str, "request_id": str}.
"""

from typing import Any

from fastapi import status


class BrandPipelineError(Exception):
    """Base exception for brand pipeline errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class MissingInputError(BrandPipelineError):
    """Raised when a required request field is absent or empty."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "MISSING_INPUT"

    def __init__(self, fields: list[str]) -> None:
        super().__init__("Missing required fields", details=fields)
        self.fields = fields


class UpstreamError(BrandPipelineError):
    """Raised when an external API (completion, image, storage) fails or returns nothing."""

    code = "UPSTREAM_ERROR"

    def __init__(
        self,
        message: str,
        service: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, details={"service": service, "status_code": status_code})
        self.service = service
        self.upstream_status = status_code


class ParseError(BrandPipelineError):
    """Raised when model output cannot be parsed as JSON."""

    code = "PARSE_ERROR"

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message, details=message)
        self.raw_text = raw_text


class ExtractionValidationError(BrandPipelineError):
    """Raised when parsed model output lacks required keys."""

    code = "VALIDATION_ERROR"

    def __init__(self, missing_keys: list[str]) -> None:
        super().__init__(
            f"Missing required keys: {', '.join(missing_keys)}",
            details={"missing_keys": missing_keys},
        )
        self.missing_keys = missing_keys


class MatchError(BrandPipelineError):
    """Raised when a model-picked archetype is not in the loaded catalog."""

    code = "ARCHETYPE_MATCH_ERROR"

    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(
            f"Archetype not found in catalog: {name!r}",
            details={"archetype": name, "available": available},
        )
        self.name = name
        self.available = available


class NotFoundError(BrandPipelineError):
    """Raised when a referenced brand or brain does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class PersistenceError(BrandPipelineError):
    """Raised when the datastore rejects an insert or update."""

    code = "PERSISTENCE_ERROR"

    def __init__(self, message: str, table: str | None = None) -> None:
        super().__init__(message, details={"table": table})
        self.table = table
