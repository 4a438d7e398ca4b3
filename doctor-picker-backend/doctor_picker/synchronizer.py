"""
synchronizer.py
===============
Back-fills city and specialty from the chosen doctor.

Sync runs one way only: a doctor choice overwrites city and specialty, but
changing city or specialty never clears a doctor that no longer matches.
"""

import logging
from .schemas import SelectionState
from .store import ReferenceDataStore

logger = logging.getLogger(__name__)


def synchronize_doctor_selection(state: SelectionState, store: ReferenceDataStore) -> SelectionState:
    """
    Return the next snapshot after a doctor choice or a doctors reload.

    The doctor is looked up by first name. If found, its city and specialty
    names are written together in one update, with "" for ids the store can't
    resolve. If not found, the snapshot is returned untouched.
    """
    if not state.doctor_name:
        return state

    doctor = store.doctor_named(state.doctor_name)
    if doctor is None:
        return state

    city = store.city_by_id(doctor.city_id)
    specialty = store.specialty_by_id(doctor.specialty_id)
    patched = state.model_copy(update={
        "city_name": city.name if city else "",
        "specialty_name": specialty.name if specialty else "",
    })
    logger.debug(
        "Doctor %s %s -> city=%r specialty=%r",
        doctor.name, doctor.surname, patched.city_name, patched.specialty_name,
    )
    return patched
