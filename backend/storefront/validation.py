from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError


SchemaT = TypeVar("SchemaT", bound=BaseModel)


class ValidationError(ValueError):
    """400-level input problem."""

    def __init__(self, message: str, details: list[dict] | None = None):
        super().__init__(message)
        self.details = details or []


class ServiceError(Exception):
    """
    Base class for business-rule failures raised by the service layer.

    status_code is the HTTP status the route should answer with.
    """
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


def _format_errors(exc: SchemaValidationError) -> list[dict]:
    details = []
    for err in exc.errors(include_url=False):
        details.append({
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", "Invalid value"),
        })
    return details


def parse_payload(schema: type[SchemaT], payload: Any, *, message: str = "Invalid data") -> SchemaT:
    """
    Validate a JSON body or query-string dict against a pydantic schema.

    Raises ValidationError (400) with per-field details on failure.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    try:
        return schema.model_validate(payload)
    except SchemaValidationError as exc:
        raise ValidationError(message, _format_errors(exc)) from exc


def parse_query(schema: type[SchemaT], args: Any, *, message: str = "Invalid query parameters") -> SchemaT:
    """Like parse_payload for query strings; blank parameters count as absent."""
    payload = {key: value for key, value in args.items() if str(value).strip() != ""}
    return parse_payload(schema, payload, message=message)
