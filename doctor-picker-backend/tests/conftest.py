"""
conftest.py
===========
Shared test setup:
 - points the catalog at a temporary SQLite file before any app import
 - disables remote reference URLs so the local catalog is used
 - provides a small reference store for engine tests
"""

import sys, os
# Ensure the doctor_picker package is discoverable when running from /tests
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import tempfile

_db_fd, _db_path = tempfile.mkstemp(suffix=".db")
os.environ["PICKER_DB"] = _db_path
for _var in ("PICKER_CITIES_URL", "PICKER_SPECIALTIES_URL", "PICKER_DOCTORS_URL"):
    os.environ[_var] = ""

import datetime
import pytest

from doctor_picker.schemas import City, Doctor, SelectionState, Specialty
from doctor_picker.store import ReferenceDataStore


def pytest_sessionfinish(session, exitstatus):
    os.close(_db_fd)
    os.unlink(_db_path)


# --------------------------------------------------------------------------
# FIXTURES
# --------------------------------------------------------------------------

TODAY = datetime.date(2026, 10, 19)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def store():
    """
    Springfield/Cardiology store:
    Ann is a pediatrician, Ben is not; both in Springfield, Cardiology.
    Cleo practices Gynecology in Shelbyville.
    """
    return ReferenceDataStore(
        cities=[
            City(id=10, name="Springfield"),
            City(id=20, name="Shelbyville"),
        ],
        specialties=[
            Specialty(id=100, name="Cardiology"),
            Specialty(id=200, name="Gynecology", genderRestriction="Female"),
            Specialty(id=300, name="Urology", genderRestriction="Male"),
        ],
        doctors=[
            Doctor(id=1, name="Ann", surname="Reed", cityId=10, specialtyId=100, isPediatrician=True),
            Doctor(id=2, name="Ben", surname="Cole", cityId=10, specialtyId=100, isPediatrician=False),
            Doctor(id=3, name="Cleo", surname="Marsh", cityId=20, specialtyId=200, isPediatrician=False),
        ],
    )


@pytest.fixture
def empty_state():
    return SelectionState()
