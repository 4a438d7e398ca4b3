"""
test_synchronizer.py
====================
Tests for back-filling city and specialty from the chosen doctor.
"""

from doctor_picker.models import Collection
from doctor_picker.schemas import Doctor, FetchFailure, SelectionState
from doctor_picker.synchronizer import synchronize_doctor_selection


def test_doctor_choice_overwrites_city_and_specialty(store):
    """
    ✅ Choosing Ben replaces whatever city and specialty were set.
    """
    state = SelectionState(city_name="Shelbyville", specialty_name="Urology", doctor_name="Ben")
    synced = synchronize_doctor_selection(state, store)
    assert synced.city_name == "Springfield"
    assert synced.specialty_name == "Cardiology"
    assert synced.doctor_name == "Ben"
    # The prior snapshot is untouched
    assert state.city_name == "Shelbyville"


def test_unknown_doctor_leaves_state_alone(store):
    state = SelectionState(city_name="Shelbyville", doctor_name="Nobody")
    assert synchronize_doctor_selection(state, store) is state

    empty = SelectionState(city_name="Shelbyville")
    assert synchronize_doctor_selection(empty, store) is empty


def test_unresolved_references_become_empty_strings(store):
    """
    ✅ A doctor pointing at a missing city writes "" instead of failing.
    """
    store.settle(Collection.doctors, [
        Doctor(id=9, name="Ivo", surname="Park", cityId=999, specialtyId=100),
    ])
    state = SelectionState(city_name="Springfield", specialty_name="Urology", doctor_name="Ivo")
    synced = synchronize_doctor_selection(state, store)
    assert synced.city_name == ""
    assert synced.specialty_name == "Cardiology"


def test_failed_specialties_fetch_writes_empty_specialty(store):
    store.fail(FetchFailure(collection=Collection.specialties, detail="Specialties error: x"))
    synced = synchronize_doctor_selection(SelectionState(doctor_name="Cleo"), store)
    assert synced.city_name == "Shelbyville"
    assert synced.specialty_name == ""


def test_duplicate_first_names_pick_the_first_doctor(store):
    """
    ✅ Doctors are matched by first name only; the first one listed wins.
    """
    store.settle(Collection.doctors, store.doctors + [
        Doctor(id=4, name="Ann", surname="Other", cityId=20, specialtyId=200),
    ])
    synced = synchronize_doctor_selection(SelectionState(doctor_name="Ann"), store)
    assert synced.city_name == "Springfield"
