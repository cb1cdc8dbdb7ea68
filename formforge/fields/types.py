"""Field definitions as a pydantic tagged union.

Each field type is its own model carrying only the settings that apply to
it. ``FieldDefinition`` discriminates on ``type``:

    fields = parse_fields([
        {"id": "name", "type": "text", "label": "Name", "required": True},
        {"id": "age", "type": "number", "label": "Age", "settings": {"min": 0}},
    ])

Wire format is camelCase (``minLength``, ``allowedDomains``) to match what
the builder UI stores; attributes are snake_case.
"""

import re
from copy import copy
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

FIELD_TYPES = ("text", "number", "email", "textarea", "checkbox", "radio")

DEFAULT_CHOICE_OPTIONS = ["Option 1", "Option 2", "Option 3"]


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# -- Settings payloads --


class FieldSettings(_WireModel):
    placeholder: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _drop_blank(cls, data: Any) -> Any:
        # The builder sends "" for cleared numeric inputs
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None and v != ""}
        return data


class _LengthSettings(FieldSettings):
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_length_bounds(self):
        if self.min_length is not None and self.max_length is not None and self.min_length > self.max_length:
            raise ValueError("minLength cannot be greater than maxLength")
        return self


class TextSettings(_LengthSettings):
    pattern: str | None = None

    @field_validator("pattern")
    @classmethod
    def _check_pattern(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"Invalid pattern: {e}") from e
        return value


class TextareaSettings(_LengthSettings):
    rows: int | None = Field(default=None, ge=1)


class NumberSettings(FieldSettings):
    min: float | None = None
    max: float | None = None
    step: float | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _check_range(self):
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("min cannot be greater than max")
        return self


class EmailSettings(FieldSettings):
    allowed_domains: list[str] | None = None

    @field_validator("allowed_domains")
    @classmethod
    def _normalize_domains(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        domains = [d.strip().lstrip("@").lower() for d in value if d.strip()]
        return domains or None


class CheckboxSettings(FieldSettings):
    min_selections: int | None = Field(default=None, ge=0)
    max_selections: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_selection_bounds(self):
        if (
            self.min_selections is not None
            and self.max_selections is not None
            and self.min_selections > self.max_selections
        ):
            raise ValueError("minSelections cannot be greater than maxSelections")
        return self


class RadioSettings(FieldSettings):
    pass


# -- Field variants --


def _check_pattern_match(pattern: str):
    compiled = re.compile(pattern)

    def check(value: str) -> str:
        if not compiled.search(value):
            raise PydanticCustomError("pattern_mismatch", "Does not match the required format")
        return value

    return check


def _check_email_domain(domains: list[str]):
    def check(value: str) -> str:
        domain = value.rsplit("@", 1)[-1].lower()
        if domain not in domains:
            raise PydanticCustomError(
                "email_domain",
                "Email domain must be one of: {domains}",
                {"domains": ", ".join(domains)},
            )
        return value

    return check


def _promote_to_list(value: Any) -> Any:
    # A single checked box posts as a bare string
    if isinstance(value, str):
        return [value]
    return value


class BaseField(_WireModel):
    """Attributes shared by every field type.

    Subclasses supply ``value_type()``: the pydantic type a present,
    non-blank answer must satisfy.
    """

    id: str = Field(min_length=1)
    label: str = ""
    description: str | None = None
    required: bool = False

    empty_value: ClassVar[Any] = ""
    required_message: ClassVar[str] = "This field is required"

    def value_type(self) -> Any:
        raise NotImplementedError

    def default_value(self) -> Any:
        return copy(self.empty_value)

    @model_validator(mode="before")
    @classmethod
    def _null_settings(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("settings") is None:
            return {k: v for k, v in data.items() if k != "settings"}
        return data

    @property
    def is_choice(self) -> bool:
        return False


def _length_type(settings: _LengthSettings) -> Any:
    return Annotated[
        str,
        StringConstraints(min_length=settings.min_length, max_length=settings.max_length),
    ]


class TextField(BaseField):
    type: Literal["text"] = "text"
    settings: TextSettings = Field(default_factory=TextSettings)

    def value_type(self) -> Any:
        base = _length_type(self.settings)
        if self.settings.pattern:
            return Annotated[base, AfterValidator(_check_pattern_match(self.settings.pattern))]
        return base


class TextareaField(BaseField):
    type: Literal["textarea"] = "textarea"
    settings: TextareaSettings = Field(default_factory=TextareaSettings)

    def value_type(self) -> Any:
        return _length_type(self.settings)


class NumberField(BaseField):
    type: Literal["number"] = "number"
    settings: NumberSettings = Field(default_factory=NumberSettings)

    def value_type(self) -> Any:
        # Numeric strings are coerced; step is only a UI hint
        return Annotated[float, Field(ge=self.settings.min, le=self.settings.max, allow_inf_nan=False)]


class EmailField(BaseField):
    type: Literal["email"] = "email"
    settings: EmailSettings = Field(default_factory=EmailSettings)

    def value_type(self) -> Any:
        if self.settings.allowed_domains:
            return Annotated[EmailStr, AfterValidator(_check_email_domain(self.settings.allowed_domains))]
        return EmailStr


class _ChoiceField(BaseField):
    options: list[str] = Field(default_factory=lambda: list(DEFAULT_CHOICE_OPTIONS))

    @field_validator("options", mode="before")
    @classmethod
    def _default_options(cls, value: Any) -> Any:
        if not value:
            return list(DEFAULT_CHOICE_OPTIONS)
        return value

    @property
    def is_choice(self) -> bool:
        return True

    def option_type(self) -> Any:
        return Literal[tuple(self.options)]


class CheckboxField(_ChoiceField):
    type: Literal["checkbox"] = "checkbox"
    settings: CheckboxSettings = Field(default_factory=CheckboxSettings)

    empty_value: ClassVar[Any] = []
    required_message: ClassVar[str] = "Please select at least one option"

    def value_type(self) -> Any:
        return Annotated[
            list[self.option_type()],
            Field(min_length=self.settings.min_selections, max_length=self.settings.max_selections),
            BeforeValidator(_promote_to_list),
        ]


class RadioField(_ChoiceField):
    type: Literal["radio"] = "radio"
    settings: RadioSettings = Field(default_factory=RadioSettings)

    def value_type(self) -> Any:
        return self.option_type()


FieldDefinition = Annotated[
    Union[TextField, TextareaField, NumberField, EmailField, CheckboxField, RadioField],
    Field(discriminator="type"),
]

_field_list_adapter = TypeAdapter(list[FieldDefinition])


class FieldDefinitionError(ValueError):
    """Raised when a field list fails to parse.

    ``errors`` maps a location like ``"fields.2.settings"`` to a message.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("Invalid field definitions")


def parse_fields(raw: list[Any]) -> list[BaseField]:
    """Parse and check a list of field dicts, raising FieldDefinitionError."""
    try:
        fields = _field_list_adapter.validate_python(raw)
    except ValidationError as e:
        errors: dict[str, str] = {}
        for err in e.errors():
            # loc is (index, discriminator tag, attr, ...); skip the tag
            parts = [str(p) for p in err["loc"] if p not in FIELD_TYPES]
            key = ".".join(["fields", *parts]) if parts else "fields"
            errors.setdefault(key, err["msg"])
        raise FieldDefinitionError(errors) from e

    seen: set[str] = set()
    errors = {}
    for index, field in enumerate(fields):
        if field.id in seen:
            errors[f"fields.{index}.id"] = f"Duplicate field id '{field.id}'"
        seen.add(field.id)
        if field.is_choice and len(set(field.options)) != len(field.options):
            errors[f"fields.{index}.options"] = "Options must be unique"
    if errors:
        raise FieldDefinitionError(errors)

    return fields


def dump_fields(fields: list[BaseField]) -> list[dict[str, Any]]:
    """Serialize parsed fields back to their camelCase storage form."""
    return [field.to_wire() for field in fields]
