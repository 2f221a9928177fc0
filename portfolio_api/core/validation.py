"""
Turns pydantic validation failures into the API's ordered (field, message) list.

Both store-level validation (raw mappings passed to a store) and FastAPI's
request validation (body, query and path parameters) end up here, so every
400 response has the same shape.
"""

from typing import Any, Iterable, List, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError

from portfolio_api.core.errors import FieldError, ValidationFailed

ModelT = TypeVar("ModelT", bound=BaseModel)

# Leading loc entries FastAPI adds for request validation
REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def _field_name(loc: Iterable[Any]) -> str:
    parts = list(loc)
    if len(parts) > 1 and parts[0] in REQUEST_LOCATIONS:
        parts = parts[1:]
    if not parts:
        return "body"
    return ".".join(str(p) for p in parts)


def field_errors_from(errors: Iterable[Mapping[str, Any]]) -> List[FieldError]:
    """
    Convert pydantic error dicts to FieldErrors, keeping their order and
    reporting at most one message per field.
    """
    result: List[FieldError] = []
    seen = set()
    for error in errors:
        if error.get("type") == "json_invalid":
            # loc is ("body", <char offset>)
            field = "body"
        else:
            field = _field_name(error.get("loc", ()))
        if field in seen:
            continue
        seen.add(field)
        result.append(FieldError(field=field, message=str(error.get("msg", "Invalid value"))))
    return result


def validate_payload(model: Type[ModelT], payload: Any) -> ModelT:
    """
    Validate an untyped payload against a schema.

    Returns the normalized model, or raises ValidationFailed listing every
    violation. Already-validated models pass straight through.
    """
    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    if not isinstance(payload, Mapping):
        raise ValidationFailed([FieldError("body", "Request body must be a JSON object")])

    try:
        return model.model_validate(dict(payload))
    except ValidationError as exc:
        raise ValidationFailed(field_errors_from(exc.errors())) from None
