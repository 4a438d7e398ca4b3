"""
schemas.py
==========
Pydantic models for reference entities, the patient's selection snapshot,
and the form views returned by the API.
"""

import enum
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Any, Dict, List, Optional
from .models import Collection, Sex


# ---------------------------------------------------------------------------
# REFERENCE ENTITIES
# ---------------------------------------------------------------------------

class City(BaseModel):
    """A city as delivered by the reference source."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str


class Specialty(BaseModel):
    """
    A specialty as delivered by the reference source.
    Legacy payloads carry the restriction as {"params": {"gender": ...}}.
    """
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str
    gender_restriction: Optional[Sex] = Field(
        default=None,
        validation_alias=AliasChoices("genderRestriction", "gender_restriction"),
        serialization_alias="genderRestriction",
    )

    @model_validator(mode="before")
    @classmethod
    def lift_params_gender(cls, data: Any) -> Any:
        if isinstance(data, dict) and "genderRestriction" not in data and "gender_restriction" not in data:
            params = data.get("params")
            if isinstance(params, dict) and params.get("gender"):
                data = {**data, "genderRestriction": params["gender"]}
        return data


class Doctor(BaseModel):
    """A doctor as delivered by the reference source."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str
    surname: str
    city_id: int = Field(
        validation_alias=AliasChoices("cityId", "city_id"),
        serialization_alias="cityId",
    )
    specialty_id: int = Field(
        validation_alias=AliasChoices("specialtyId", "specialityId", "specialty_id"),
        serialization_alias="specialtyId",
    )
    is_pediatrician: bool = Field(
        default=False,
        validation_alias=AliasChoices("isPediatrician", "is_pediatrician"),
        serialization_alias="isPediatrician",
    )

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}"


# ---------------------------------------------------------------------------
# SELECTION SNAPSHOT
# ---------------------------------------------------------------------------

class SelectionState(BaseModel):
    """
    The patient's in-progress choice.
    Immutable: every change produces a new snapshot via model_copy().
    City, specialty and doctor hold display names, not ids.
    """
    model_config = ConfigDict(frozen=True)

    name: str = ""
    birthday_text: str = ""
    sex: Optional[Sex] = None
    city_name: str = ""
    specialty_name: str = ""
    doctor_name: str = ""
    email: str = ""
    mobile: str = ""

    @field_validator("sex", mode="before")
    @classmethod
    def blank_sex_is_unset(cls, value):
        return value or None

    @field_validator("city_name", "specialty_name", "doctor_name", "name", "birthday_text",
                     "email", "mobile", mode="before")
    @classmethod
    def none_is_blank(cls, value):
        return "" if value is None else value


# ---------------------------------------------------------------------------
# FETCH FAILURES & SELECTOR VIEWS
# ---------------------------------------------------------------------------

class FetchFailure(BaseModel):
    """A reference collection that could not be retrieved."""
    model_config = ConfigDict(frozen=True)

    collection: Collection
    detail: str


class SelectorStatus(str, enum.Enum):
    """Distinguishes "no data" from "data but nothing matches"."""
    ready = "ready"
    no_matches = "no_matches"
    fetch_failed = "fetch_failed"


class SelectorOption(BaseModel):
    value: str
    label: str


class SelectorView(BaseModel):
    """Options for one dropdown, or the disabled placeholder to show instead."""
    status: SelectorStatus
    options: List[SelectorOption] = []
    placeholder: Optional[str] = None


class FormView(BaseModel):
    """Everything the form needs to render after a change."""
    state: SelectionState
    errors: Dict[str, str] = {}
    is_valid: bool = False
    age: Optional[int] = None
    doctor_filter_changed: bool = False
    cities: SelectorView
    specialties: SelectorView
    doctors: SelectorView


# ---------------------------------------------------------------------------
# REQUESTS & RESPONSES
# ---------------------------------------------------------------------------

class FieldChangeRequest(BaseModel):
    """Request body for a single field change."""
    state: SelectionState = SelectionState()
    field: str
    value: Optional[str] = None


class SubmitResponse(BaseModel):
    """Response body for an accepted submission."""
    message: str
    appointment: SelectionState
    state: SelectionState


class CollectionStatus(BaseModel):
    count: int
    error: Optional[str] = None


class ReferenceStatusResponse(BaseModel):
    """Load state of each reference collection."""
    cities: CollectionStatus
    specialties: CollectionStatus
    doctors: CollectionStatus
