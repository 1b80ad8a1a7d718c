"""
Declarative validation engine for the signup form.

A schema is an ordered list of fields, each with an ordered list of rules,
plus a list of cross-field refinements. A rule is a plain function that takes
the current value and returns the (possibly transformed) value, or raises
RuleViolation. Rules of one field stop at the first violation; different
fields never affect each other, so one pass reports every field error.
Refinements run afterwards, only when all the fields they read are valid.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union
import logging
import math
import re

from .models import AvatarFile, NormalizedRecord, ValidationSettings

logger = logging.getLogger(__name__)

PathSegment = Union[str, int]
Rule = Callable[[Any], Any]

# Same pattern the browser-side form used for e-mail syntax
EMAIL_PATTERN = re.compile(
    r"^(?!\.)(?!.*\.\.)([A-Z0-9_'+\-\.]*)[A-Z0-9_+-]@([A-Z0-9][A-Z0-9\-]*\.)+[A-Z]{2,}$",
    re.IGNORECASE,
)


class ErrorCode(str, Enum):
    """Error taxonomy; every code is recoverable by correcting the input."""
    REQUIRED = "Required"
    TOO_LARGE = "TooLarge"
    INVALID_FORMAT = "InvalidFormat"
    POLICY_VIOLATION = "PolicyViolation"
    TOO_SHORT = "TooShort"
    OUT_OF_RANGE = "OutOfRange"
    TOO_FEW = "TooFew"
    MISMATCH = "Mismatch"


class RuleViolation(Exception):
    """Raised by a rule when the value breaks its constraint."""

    def __init__(self, code: ErrorCode, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class FieldError:
    """A single validation error located by its field path."""
    path: Tuple[PathSegment, ...]
    code: ErrorCode
    message: str

    @property
    def dotted_path(self) -> str:
        return ".".join(str(segment) for segment in self.path)

    def to_dict(self) -> Dict[str, Any]:
        return {'path': list(self.path), 'code': self.code.value, 'message': self.message}


@dataclass(frozen=True)
class FieldSchema:
    """A scalar field and its ordered rules."""
    name: str
    rules: Tuple[Rule, ...]

    def run(self, value: Any) -> Any:
        """Apply rules in order; the first RuleViolation propagates."""
        for rule in self.rules:
            value = rule(value)
        return value


@dataclass(frozen=True)
class ArraySchema:
    """
    A list of sub-records. The array-level length check and every item
    field are evaluated independently.
    """
    name: str
    items: Tuple[FieldSchema, ...]
    min_items: int = 0
    min_items_message: str = ""


@dataclass(frozen=True)
class Refinement:
    """
    Cross-field check.

    Attributes:
        path: Where the error is reported
        depends_on: Fields that must be valid before the check runs
        check: Pure function of the transformed values, returning a
            RuleViolation or None
    """
    path: Tuple[PathSegment, ...]
    depends_on: Tuple[str, ...]
    check: Callable[[Dict[str, Any]], Optional[RuleViolation]]


@dataclass
class ValidationResult:
    """
    Outcome of one validation pass.

    Attributes:
        errors: Field errors in declaration order, refinements last
        values: Transformed values of the fields that passed
        record: Normalized record, only when there are no errors
    """
    errors: List[FieldError] = field(default_factory=list)
    values: Dict[str, Any] = field(default_factory=dict)
    record: Optional[NormalizedRecord] = None

    @property
    def is_valid(self) -> bool:
        return not self.errors and self.record is not None

    def error_codes(self) -> List[Tuple[str, ErrorCode]]:
        return [(error.dotted_path, error.code) for error in self.errors]


class RecordSchema:
    """Ordered field schemas plus refinements for a whole record."""

    def __init__(self, fields: Sequence[Union[FieldSchema, ArraySchema]],
                 refinements: Sequence[Refinement] = (),
                 output_model=NormalizedRecord):
        self.fields = tuple(fields)
        self.refinements = tuple(refinements)
        self.output_model = output_model

    def validate(self, raw: Any) -> ValidationResult:
        """
        Validate and transform a raw candidate record.

        Never raises for input data: everything wrong with the input is
        returned as FieldError entries.
        """
        if not isinstance(raw, Mapping):
            logger.warning(f"Raw record is not a mapping ({type(raw).__name__}), treating as empty")
            raw = {}

        result = ValidationResult()
        logger.debug(f"Validating record with fields: {list(raw.keys())}")

        for schema_field in self.fields:
            if isinstance(schema_field, ArraySchema):
                self._validate_array(schema_field, raw.get(schema_field.name), result)
            else:
                self._validate_field(schema_field, raw.get(schema_field.name), result)

        for refinement in self.refinements:
            if not all(name in result.values for name in refinement.depends_on):
                continue
            violation = refinement.check(result.values)
            if violation is not None:
                result.errors.append(FieldError(refinement.path, violation.code, violation.message))

        if result.errors:
            logger.info(f"Validation failed with {len(result.errors)} errors")
        else:
            result.record = self.output_model(**result.values)
            logger.info("Validation passed")
        return result

    @staticmethod
    def _validate_field(schema_field: FieldSchema, value: Any, result: ValidationResult) -> None:
        try:
            result.values[schema_field.name] = schema_field.run(value)
        except RuleViolation as violation:
            result.errors.append(FieldError((schema_field.name,), violation.code, violation.message))

    @staticmethod
    def _validate_array(schema_field: ArraySchema, value: Any, result: ValidationResult) -> None:
        entries = _as_entry_list(value)
        failed = False

        if len(entries) < schema_field.min_items:
            failed = True
            result.errors.append(FieldError(
                (schema_field.name,), ErrorCode.TOO_FEW, schema_field.min_items_message
            ))

        transformed = []
        for index, entry in enumerate(entries):
            item = {}
            for item_field in schema_field.items:
                try:
                    item[item_field.name] = item_field.run(entry.get(item_field.name))
                except RuleViolation as violation:
                    failed = True
                    result.errors.append(FieldError(
                        (schema_field.name, index, item_field.name), violation.code, violation.message
                    ))
            transformed.append(item)

        if not failed:
            result.values[schema_field.name] = transformed


def _as_entry_list(value: Any) -> List[Mapping]:
    """Missing or malformed collections become an empty list."""
    if value is None or isinstance(value, (str, bytes, Mapping)):
        return []
    try:
        items = list(value)
    except TypeError:
        logger.warning(f"Collection value is not iterable ({type(value).__name__}), treating as empty")
        return []
    return [item if isinstance(item, Mapping) else {} for item in items]


# --- Rules -----------------------------------------------------------------

def single_file(message: str) -> Rule:
    """Resolve a file-list-like value to its first file handle."""
    def rule(value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        size = getattr(value, 'size', None)
        if value is None or not isinstance(size, int) or isinstance(size, bool):
            raise RuleViolation(ErrorCode.REQUIRED, message)
        return value
    return rule


def max_file_size(max_bytes: int, message: str) -> Rule:
    def rule(handle: Any) -> AvatarFile:
        if handle.size > max_bytes:
            raise RuleViolation(ErrorCode.TOO_LARGE, message)
        if isinstance(handle, AvatarFile):
            return handle
        return AvatarFile(
            name=getattr(handle, 'name', '') or '',
            size=handle.size,
            content_type=getattr(handle, 'type', None),
            handle=handle,
        )
    return rule


def required_text(message: str, strip: bool = True) -> Rule:
    """Fail unless the value is a non-empty string (after trimming when strip is set)."""
    def rule(value: Any) -> Any:
        if not isinstance(value, str):
            raise RuleViolation(ErrorCode.REQUIRED, message)
        if (value.strip() if strip else value) == "":
            raise RuleViolation(ErrorCode.REQUIRED, message)
        return value
    return rule


def strip_text(value: str) -> str:
    return value.strip()


def capitalize_words(value: str) -> str:
    """'  ana   silva ' -> 'Ana Silva'. Expects a non-blank string."""
    return " ".join(token[0].upper() + token[1:] for token in value.split())


def email_format(message: str) -> Rule:
    def rule(value: str) -> str:
        if not EMAIL_PATTERN.fullmatch(value):
            raise RuleViolation(ErrorCode.INVALID_FORMAT, message)
        return value
    return rule


def lowercase(value: str) -> str:
    return value.lower()


def ends_with(suffix: str, message: str) -> Rule:
    suffix = suffix.lower()

    def rule(value: str) -> str:
        if not value.endswith(suffix):
            raise RuleViolation(ErrorCode.POLICY_VIOLATION, message)
        return value
    return rule


def min_length(length: int, message: str) -> Rule:
    def rule(value: Any) -> str:
        if not isinstance(value, str) or len(value) < length:
            raise RuleViolation(ErrorCode.TOO_SHORT, message)
        return value
    return rule


def coerce_number(value: Any) -> float:
    """
    Loose numeric coercion of form values: blank and None become 0,
    anything unparsable becomes NaN.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def integer_between(minimum: int, maximum: int, message: str) -> Rule:
    def rule(value: float) -> int:
        if math.isnan(value) or not minimum <= value <= maximum or not value.is_integer():
            raise RuleViolation(ErrorCode.OUT_OF_RANGE, message)
        return int(value)
    return rule


def fields_equal(first: str, second: str, message: str) -> Callable[[Dict[str, Any]], Optional[RuleViolation]]:
    def check(values: Dict[str, Any]) -> Optional[RuleViolation]:
        if values[first] != values[second]:
            return RuleViolation(ErrorCode.MISMATCH, message)
        return None
    return check


# --- Signup schema ---------------------------------------------------------

def build_signup_schema(settings: Optional[ValidationSettings] = None) -> RecordSchema:
    """
    Create the schema for the user signup form.

    Args:
        settings: Validation constants (defaults when omitted)

    Returns:
        RecordSchema for avatar, name, email, passwords and techs
    """
    if settings is None:
        settings = ValidationSettings()

    password_message = f"The password need to be at least {settings.min_password_length} characters long"

    return RecordSchema(
        fields=[
            FieldSchema('avatar', (
                single_file("The avatar image is required."),
                max_file_size(settings.max_avatar_bytes,
                              f"The file must be a maximum of {settings.max_avatar_label}"),
            )),
            FieldSchema('name', (
                required_text("Name is required"),
                capitalize_words,
            )),
            FieldSchema('email', (
                required_text("E-mail is required", strip=False),
                email_format("Please insert a valid e-mail"),
                lowercase,
                ends_with(settings.email_domain, f"Must be a {_domain_label(settings.email_domain)} account"),
            )),
            FieldSchema('password', (min_length(settings.min_password_length, password_message),)),
            FieldSchema('confirmPassword', (min_length(settings.min_password_length, password_message),)),
            ArraySchema(
                'techs',
                items=(
                    FieldSchema('title', (required_text("Title is required"), strip_text)),
                    FieldSchema('knowledge', (
                        coerce_number,
                        integer_between(
                            settings.knowledge_min, settings.knowledge_max,
                            f"Knowledge must be a whole number between "
                            f"{settings.knowledge_min} and {settings.knowledge_max}",
                        ),
                    )),
                ),
                min_items=settings.min_techs,
                min_items_message=f"Add at least {settings.min_techs} techs",
            ),
        ],
        refinements=[
            Refinement(
                path=('confirmPassword',),
                depends_on=('password', 'confirmPassword'),
                check=fields_equal('password', 'confirmPassword', "Passwords don't match"),
            ),
        ],
    )


def _domain_label(suffix: str) -> str:
    """'@gmail.com' -> 'gmail'"""
    return suffix.lower().lstrip('@').split('.')[0] or suffix


def validate(raw: Any, settings: Optional[ValidationSettings] = None) -> ValidationResult:
    """Validate a raw record against the signup schema."""
    return build_signup_schema(settings).validate(raw)
