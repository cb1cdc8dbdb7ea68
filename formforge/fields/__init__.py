"""Typed form fields and the submission validators generated from them."""

from formforge.fields.schema import (
    SubmissionValidationError,
    build_submission_model,
    default_values,
    submission_json_schema,
    validate_submission,
)
from formforge.fields.types import (
    DEFAULT_CHOICE_OPTIONS,
    FIELD_TYPES,
    BaseField,
    CheckboxField,
    EmailField,
    FieldDefinition,
    FieldDefinitionError,
    NumberField,
    RadioField,
    TextareaField,
    TextField,
    dump_fields,
    parse_fields,
)

__all__ = [
    "BaseField",
    "CheckboxField",
    "DEFAULT_CHOICE_OPTIONS",
    "EmailField",
    "FIELD_TYPES",
    "FieldDefinition",
    "FieldDefinitionError",
    "NumberField",
    "RadioField",
    "SubmissionValidationError",
    "TextField",
    "TextareaField",
    "build_submission_model",
    "default_values",
    "dump_fields",
    "parse_fields",
    "submission_json_schema",
    "validate_submission",
]
