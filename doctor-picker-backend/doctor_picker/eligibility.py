"""
eligibility.py
==============
Decides which specialties and doctors the patient is offered.

Each predicate takes (entity, state, store) and returns a bool. The doctor
list is the doctors passing all three doctor predicates; the specialty list
is the specialties passing by_sex. Source order is kept in both.
"""

import datetime
import logging
from typing import List, Optional
from .birthday import try_age_in_years
from .models import Collection
from .schemas import (
    Doctor, SelectionState, SelectorOption, SelectorStatus, SelectorView, Specialty,
)
from .store import ReferenceDataStore

logger = logging.getLogger(__name__)

ADULT_AGE = 18
CITIES_NOT_FOUND = "Cities not found"
SPECIALTIES_NOT_FOUND = "Specialties not found"
DOCTORS_NOT_FOUND = "Doctors not found"

# ---------------------------------------------------------------------------
# PREDICATES
# ---------------------------------------------------------------------------

def by_sex(specialty: Specialty, state: SelectionState, store: ReferenceDataStore) -> bool:
    if not state.sex or specialty.gender_restriction is None:
        return True
    return specialty.gender_restriction == state.sex


def by_pediatric_eligibility(doctor: Doctor, state: SelectionState, store: ReferenceDataStore,
                             today: Optional[datetime.date] = None) -> bool:
    """
    Pediatricians see minors only; everyone else sees adults only.
    No birthday, or one that isn't complete yet, means no constraint.
    """
    if not state.birthday_text:
        return True

    age = try_age_in_years(state.birthday_text, today)
    if age is None:
        logger.debug("Ignoring incomplete birthday %r", state.birthday_text)
        return True

    is_adult = age >= ADULT_AGE
    return doctor.is_pediatrician != is_adult


def by_city(doctor: Doctor, state: SelectionState, store: ReferenceDataStore) -> bool:
    if not state.city_name:
        return True
    city = store.city_named(state.city_name)
    return city is not None and city.id == doctor.city_id


def by_specialty(doctor: Doctor, state: SelectionState, store: ReferenceDataStore) -> bool:
    if not state.specialty_name:
        return True
    specialty = store.specialty_named(state.specialty_name)
    return specialty is not None and specialty.id == doctor.specialty_id


DOCTOR_PREDICATES = (by_pediatric_eligibility, by_city, by_specialty)

# ---------------------------------------------------------------------------
# FILTERED LISTS
# ---------------------------------------------------------------------------

def eligible_specialties(state: SelectionState, store: ReferenceDataStore) -> List[Specialty]:
    return [s for s in store.specialties if by_sex(s, state, store)]


def eligible_doctors(state: SelectionState, store: ReferenceDataStore) -> List[Doctor]:
    return [
        d for d in store.doctors
        if all(predicate(d, state, store) for predicate in DOCTOR_PREDICATES)
    ]

# ---------------------------------------------------------------------------
# SELECTOR VIEWS
# ---------------------------------------------------------------------------

def _failed(store: ReferenceDataStore, collection: Collection):
    failure = store.failure(collection)
    if failure is None:
        return None
    return SelectorView(status=SelectorStatus.fetch_failed, placeholder=failure.detail)


def city_selector(store: ReferenceDataStore) -> SelectorView:
    failed = _failed(store, Collection.cities)
    if failed:
        return failed
    if not store.cities:
        return SelectorView(status=SelectorStatus.no_matches, placeholder=CITIES_NOT_FOUND)
    return SelectorView(
        status=SelectorStatus.ready,
        options=[SelectorOption(value=c.name, label=c.name) for c in store.cities],
    )


def specialty_selector(state: SelectionState, store: ReferenceDataStore) -> SelectorView:
    failed = _failed(store, Collection.specialties)
    if failed:
        return failed
    specialties = eligible_specialties(state, store)
    if not specialties:
        return SelectorView(status=SelectorStatus.no_matches, placeholder=SPECIALTIES_NOT_FOUND)
    return SelectorView(
        status=SelectorStatus.ready,
        options=[SelectorOption(value=s.name, label=s.name) for s in specialties],
    )


def doctor_selector(state: SelectionState, store: ReferenceDataStore) -> SelectorView:
    """Eligible doctors; else the fetch error; else "Doctors not found"."""
    doctors = eligible_doctors(state, store)
    if doctors:
        return SelectorView(
            status=SelectorStatus.ready,
            options=[SelectorOption(value=d.name, label=d.full_name) for d in doctors],
        )
    return _failed(store, Collection.doctors) or SelectorView(
        status=SelectorStatus.no_matches, placeholder=DOCTORS_NOT_FOUND,
    )
