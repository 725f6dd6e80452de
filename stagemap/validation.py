"""
Default field validation for the stage edit form.

The editor treats validation as an opaque predicate; this module provides
the rules the stage form uses. Every field is validated, even after the
first failure, so each one can show its own message.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Protocol, runtime_checkable

from stagemap.dictionary import Dictionary

# Value a library selector holds when no content type has been chosen
NO_LIBRARY_SELECTED = "-"


@dataclass
class ValidationResult:
    """Outcome of validating an edit form."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.is_valid


@runtime_checkable
class FormField(Protocol):
    """A field of the edit form as provided by the host's form widgets."""

    kind: str  # 'library', 'number', 'text', 'select', ...
    name: str
    value: Any
    optional: bool

    def validate(self) -> bool:
        ...


@dataclass
class SimpleField:
    """
    Plain FormField implementation.

    `check` is the field's own validation; without one, a required field is
    valid when it holds a non-empty value.
    """
    name: str
    kind: str = "text"
    value: Any = None
    optional: bool = False
    check: Optional[Callable[[Any], bool]] = None

    def validate(self) -> bool:
        if self.check is not None:
            return bool(self.check(self.value))
        if self.kind == "library" and self.value == NO_LIBRARY_SELECTED:
            return False
        if self.optional:
            return True
        return self.value not in (None, "", [])


def _validate_field(child: FormField, dictionary: Dictionary, errors: List[str]) -> bool:
    if child.validate():
        return True

    if child.kind == "library":
        # Incomplete content is accepted, missing content is not
        if child.value == NO_LIBRARY_SELECTED or child.value is None:
            errors.append(f"{child.name}: {dictionary.get('l10n.contentRequired')}")
            return False
        return True

    if child.kind == "number" and child.value is None and child.optional:
        return True

    errors.append(f"{child.name}: invalid value")
    return False


def validate_form(children: Iterable[FormField], dictionary: Optional[Dictionary] = None) -> ValidationResult:
    """Validate all form fields and collect their error messages."""
    dictionary = dictionary or Dictionary()
    errors: List[str] = []
    results = [_validate_field(child, dictionary, errors) for child in children]
    return ValidationResult(is_valid=all(results), errors=errors)


class FormValidator:
    """Validator collaborator bound to a form's fields."""

    def __init__(self, children: Iterable[FormField], dictionary: Optional[Dictionary] = None):
        self.children = list(children)
        self.dictionary = dictionary

    def __call__(self) -> ValidationResult:
        return validate_form(self.children, self.dictionary)
