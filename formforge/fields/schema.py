"""Generate submission validators from a form's field list.

The generated pydantic model is the single source of truth for both sides:
the server validates submissions with it, and its JSON Schema is published
so the client can apply the same rules before posting.
"""

from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, create_model
from pydantic_core import PydanticCustomError

from formforge.fields.types import BaseField


class SubmissionValidationError(ValueError):
    """Raised when submitted data fails a form's rules.

    ``errors`` maps each failing field id to its first error message.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("Submission data is invalid")


def _blank_to_none(value: Any) -> Any:
    if value is None or value == "" or value == []:
        return None
    return value


def _require(message: str):
    def check(value: Any) -> Any:
        if value is None:
            raise PydanticCustomError("required", message)
        return value

    return check


def _attribute_names(fields: list[BaseField]) -> list[str]:
    """Model attribute names, one per field, never equal to any field id."""
    ids = {field.id for field in fields}
    prefix = "field_"
    while any(f"{prefix}{i}" in ids for i in range(len(fields))):
        prefix += "_"
    return [f"{prefix}{i}" for i in range(len(fields))]


def _answer_type(field: BaseField) -> Any:
    validators: list[Any] = [BeforeValidator(_blank_to_none)]
    if field.required:
        validators.append(AfterValidator(_require(field.required_message)))
    return Annotated[(Optional[field.value_type()], *validators)]


def build_submission_model(fields: list[BaseField], model_name: str = "Submission") -> type[BaseModel]:
    """Build a pydantic model with one optional attribute per field.

    Attributes are addressed by field id through aliases, so ids that are not
    Python identifiers ("field-1", "q.2") work unchanged.
    """
    definitions: dict[str, Any] = {}
    for name, field in zip(_attribute_names(fields), fields):
        definitions[name] = (
            _answer_type(field),
            Field(
                default=None,
                validate_default=True,
                alias=field.id,
                title=field.label or field.id,
                description=field.description,
            ),
        )
    return create_model(model_name, __config__=ConfigDict(extra="ignore"), **definitions)


def _format_number(value: Any) -> str:
    number = float(value)
    return str(int(number)) if number.is_integer() else str(number)


def _message(err: dict[str, Any]) -> str:
    """Translate a pydantic error into the message shown next to a field."""
    kind = err["type"]
    ctx = err.get("ctx") or {}

    if kind == "string_too_short":
        return f"Must be at least {ctx['min_length']} characters"
    if kind == "string_too_long":
        return f"Must be at most {ctx['max_length']} characters"
    if kind == "string_type":
        return "Must be text"
    if kind in ("float_parsing", "float_type", "finite_number"):
        return "Must be a number"
    if kind == "greater_than_equal":
        return f"Must be at least {_format_number(ctx['ge'])}"
    if kind == "less_than_equal":
        return f"Must be at most {_format_number(ctx['le'])}"
    if kind == "literal_error":
        return "Invalid option"
    if kind == "too_short":
        return f"Select at least {ctx['min_length']} options"
    if kind == "too_long":
        return f"Select at most {ctx['max_length']} options"
    if kind == "list_type":
        return "Must be a list of options"
    if kind == "value_error":
        # EmailStr reports malformed addresses as value errors
        return "Please enter a valid email address"
    return err["msg"]


def collect_errors(exc: ValidationError, names: dict[str, str] | None = None) -> dict[str, str]:
    """Map a ValidationError to ``{field_id: message}``, first error per field.

    Missing keys are reported under the attribute name rather than the alias,
    so ``names`` maps attribute names back to field ids.
    """
    names = names or {}
    errors: dict[str, str] = {}
    for err in exc.errors():
        key = str(err["loc"][0]) if err["loc"] else "__all__"
        key = names.get(key, key)
        if key not in errors:
            errors[key] = _message(err)
    return errors


def validate_submission(fields: list[BaseField], data: dict[str, Any]) -> dict[str, Any]:
    """Validate and normalize submitted data against a field list.

    Returns the cleaned payload keyed by field id. Unknown keys are dropped,
    as are optional fields left blank.

    Raises:
        SubmissionValidationError: If any field fails its rules.
    """
    model = build_submission_model(fields)
    try:
        instance = model.model_validate(data)
    except ValidationError as e:
        names = dict(zip(_attribute_names(fields), (field.id for field in fields)))
        raise SubmissionValidationError(collect_errors(e, names)) from e
    return instance.model_dump(mode="json", by_alias=True, exclude_none=True)


def default_values(fields: list[BaseField]) -> dict[str, Any]:
    """Initial values for an empty form: "" for scalar fields, [] for checkboxes."""
    return {field.id: field.default_value() for field in fields}


def submission_json_schema(fields: list[BaseField]) -> dict[str, Any]:
    """JSON Schema of the submission model, with properties keyed by field id."""
    return build_submission_model(fields).model_json_schema(by_alias=True)
