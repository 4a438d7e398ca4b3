"""
test_reference_api.py
=====================
Tests for fetching reference collections:
 - remote payloads in current and legacy shapes
 - transport and payload failures
 - reading the local catalog
 - concurrent loading with isolated failures
"""

import asyncio
import pytest
import requests

from doctor_picker import reference_api
from doctor_picker.db import catalog_session, init_db
from doctor_picker.models import Base, Collection, Sex
from doctor_picker.reference_api import (
    ReferenceFetchError, fetch_cities, fetch_doctors, fetch_specialties, load_reference_data,
)
from doctor_picker.schemas import City
from doctor_picker.seed import seed_catalog
from doctor_picker.store import ReferenceDataStore


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        return self._payload


@pytest.fixture
def fake_get(monkeypatch):
    """Routes requests.get to canned responses keyed by URL."""
    responses = {}

    def get(url, timeout=None):
        response = responses[url]
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(reference_api.requests, "get", get)
    return responses


# --------------------------------------------------------------------------
# REMOTE SOURCES
# --------------------------------------------------------------------------

def test_remote_payloads_in_legacy_shape(fake_get):
    """
    ✅ params.gender and specialityId are accepted from older sources.
    """
    fake_get["http://ref/specialties"] = FakeResponse([
        {"id": 1, "name": "Gynecology", "params": {"gender": "Female"}},
        {"id": 2, "name": "Cardiology"},
    ])
    fake_get["http://ref/doctors"] = FakeResponse([
        {"id": 1, "name": "Ann", "surname": "Reed", "cityId": 10, "specialityId": 2, "isPediatrician": True},
    ])

    specialties = fetch_specialties("http://ref/specialties")
    assert specialties[0].gender_restriction is Sex.female
    assert specialties[1].gender_restriction is None

    doctor = fetch_doctors("http://ref/doctors")[0]
    assert (doctor.city_id, doctor.specialty_id, doctor.is_pediatrician) == (10, 2, True)


def test_transport_error_becomes_fetch_error(fake_get):
    fake_get["http://ref/cities"] = requests.ConnectionError("connection refused")
    with pytest.raises(ReferenceFetchError) as exc_info:
        fetch_cities("http://ref/cities")
    assert exc_info.value.collection is Collection.cities
    assert str(exc_info.value) == "Cities error: connection refused"


def test_http_status_and_bad_payload_become_fetch_errors(fake_get):
    fake_get["http://ref/cities"] = FakeResponse([], status_code=500)
    with pytest.raises(ReferenceFetchError):
        fetch_cities("http://ref/cities")

    fake_get["http://ref/doctors"] = FakeResponse({"not": "a list"})
    with pytest.raises(ReferenceFetchError) as exc_info:
        fetch_doctors("http://ref/doctors")
    assert exc_info.value.failure.detail.startswith("Doctors error: invalid payload")


# --------------------------------------------------------------------------
# LOCAL CATALOG
# --------------------------------------------------------------------------

def test_catalog_is_read_when_no_url_configured():
    """
    ✅ Without URLs the seeded catalog is the source, ordered by id.
    """
    init_db(Base)
    with catalog_session() as db:
        seed_catalog(db)

    cities = fetch_cities()
    assert [c.name for c in cities][:3] == ["Springfield", "Shelbyville", "Ogdenville"]
    specialties = {s.name: s for s in fetch_specialties()}
    assert specialties["Gynecology"].gender_restriction is Sex.female
    assert any(d.is_pediatrician for d in fetch_doctors())


# --------------------------------------------------------------------------
# CONCURRENT LOAD
# --------------------------------------------------------------------------

def test_one_failed_fetch_does_not_block_the_others():
    """
    ✅ Doctors fail; cities and specialties still load.
    """
    def failing():
        raise ReferenceFetchError(Collection.doctors, "timeout")

    store = ReferenceDataStore()
    asyncio.run(load_reference_data(store, {
        Collection.cities: lambda: [City(id=1, name="Springfield")],
        Collection.specialties: lambda: [],
        Collection.doctors: failing,
    }))

    assert [c.name for c in store.cities] == ["Springfield"]
    assert store.failure(Collection.cities) is None
    assert store.failure(Collection.specialties) is None
    assert store.failure(Collection.doctors).detail == "Doctors error: timeout"
    assert store.doctors_revision == 1


def test_successful_reload_clears_previous_failure():
    store = ReferenceDataStore()

    def failing():
        raise ReferenceFetchError(Collection.cities, "down")

    asyncio.run(load_reference_data(store, {Collection.cities: failing}))
    assert store.failure(Collection.cities) is not None

    asyncio.run(load_reference_data(store, {Collection.cities: lambda: [City(id=1, name="Springfield")]}))
    assert store.failure(Collection.cities) is None
    assert len(store.cities) == 1


def test_unexpected_fetcher_error_is_recorded_not_raised():
    """
    ✅ A fetcher crashing with a non-fetch error still only fails its own slot.
    """
    def crashing():
        raise RuntimeError("boom")

    store = ReferenceDataStore()
    asyncio.run(load_reference_data(store, {
        Collection.cities: lambda: [City(id=1, name="Springfield")],
        Collection.specialties: lambda: [],
        Collection.doctors: crashing,
    }))

    assert [c.name for c in store.cities] == ["Springfield"]
    assert store.failure(Collection.specialties) is None
    assert store.failure(Collection.doctors).detail == "Doctors error: boom"
    assert store.doctors == []
