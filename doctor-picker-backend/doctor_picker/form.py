"""
form.py
=======
Form controller for the appointment picker:
 - applies one field change at a time to a selection snapshot
 - validates field presence and format
 - assembles the FormView the client renders
 - accepts or rejects a submission
"""

import logging
import re
from typing import Dict, Optional
from .birthday import normalize_birthday, try_age_in_years
from .eligibility import city_selector, doctor_selector, specialty_selector
from .models import Sex
from .schemas import FormView, SelectionState
from .store import ReferenceDataStore
from .synchronizer import synchronize_doctor_selection

logger = logging.getLogger(__name__)

REQUIRED = "Required"
CONTACT_REQUIRED = "At least one field is required"

_DIGIT = re.compile(r"\d")
_NOT_DATE_CHAR = re.compile(r"[^0-9\\/]")

# Form field name -> SelectionState attribute
FIELDS = {
    "name": "name",
    "birthday": "birthday_text",
    "sex": "sex",
    "city": "city_name",
    "specialty": "specialty_name",
    "doctor": "doctor_name",
    "email": "email",
    "mobile": "mobile",
}

DOCTOR_FILTER_FIELDS = ("birthday_text", "city_name", "specialty_name")


# ---------------------------------------------------------------------------
# ERRORS
# ---------------------------------------------------------------------------

class UnknownFieldError(ValueError):
    """Raised when a change names a field the form doesn't have."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Unknown form field: {field}")


class InvalidFieldValueError(ValueError):
    """Raised when a value can't be stored in its field at all."""

    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f"Invalid value for {field}: {value!r}")


class FormValidationError(Exception):
    """Raised on submit when the selection has field errors."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        super().__init__(f"Form has {len(errors)} invalid field(s)")


# ---------------------------------------------------------------------------
# STATE CHANGES
# ---------------------------------------------------------------------------

def empty_selection() -> SelectionState:
    return SelectionState()


def apply_change(state: SelectionState, field: str, value: Optional[str],
                 store: ReferenceDataStore) -> SelectionState:
    """
    Return the snapshot after the patient edits one field.
    A birthday is reshaped as typed; a doctor choice back-fills
    city and specialty.
    """
    attr = FIELDS.get(field)
    if attr is None:
        raise UnknownFieldError(field)

    value = "" if value is None else str(value)
    if attr == "birthday_text":
        value = normalize_birthday(value)
    elif attr == "sex":
        try:
            value = Sex(value) if value else None
        except ValueError:
            raise InvalidFieldValueError(field, value) from None

    next_state = state.model_copy(update={attr: value})
    if attr == "doctor_name":
        next_state = synchronize_doctor_selection(next_state, store)
    return next_state


def doctor_filter_changed(before: SelectionState, after: SelectionState) -> bool:
    """True when an input of the doctor filter differs between snapshots."""
    return any(getattr(before, f) != getattr(after, f) for f in DOCTOR_FILTER_FIELDS)


# ---------------------------------------------------------------------------
# VALIDATION
# ---------------------------------------------------------------------------

def validate_selection(state: SelectionState) -> Dict[str, str]:
    """Map of form field name -> error message; empty when valid."""
    errors: Dict[str, str] = {}

    if not state.name:
        errors["name"] = REQUIRED
    elif _DIGIT.search(state.name):
        errors["name"] = "Name should not contain numbers"

    if not state.birthday_text:
        errors["birthday"] = REQUIRED
    elif _NOT_DATE_CHAR.search(state.birthday_text):
        errors["birthday"] = "Birthday should not contain letters"

    if not state.sex:
        errors["sex"] = REQUIRED

    if not state.city_name:
        errors["city"] = REQUIRED

    if not state.email and not state.mobile:
        errors["email"] = CONTACT_REQUIRED
        errors["mobile"] = CONTACT_REQUIRED

    return errors


# ---------------------------------------------------------------------------
# VIEW & SUBMIT
# ---------------------------------------------------------------------------

def build_form_view(state: SelectionState, store: ReferenceDataStore,
                    previous: Optional[SelectionState] = None) -> FormView:
    errors = validate_selection(state)
    return FormView(
        state=state,
        errors=errors,
        is_valid=not errors,
        age=try_age_in_years(state.birthday_text),
        doctor_filter_changed=previous is not None and doctor_filter_changed(previous, state),
        cities=city_selector(store),
        specialties=specialty_selector(state, store),
        doctors=doctor_selector(state, store),
    )


def submit_selection(state: SelectionState) -> SelectionState:
    """
    Accept a finished selection and hand back the snapshot.
    The caller resets its form to empty_selection() afterwards.
    """
    errors = validate_selection(state)
    if errors:
        raise FormValidationError(errors)
    logger.info("Appointment request submitted: %s", state.model_dump(mode="json"))
    return state
