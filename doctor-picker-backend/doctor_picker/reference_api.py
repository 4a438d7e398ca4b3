"""
reference_api.py
================
Retrieves the three reference collections (cities, specialties, doctors).

Each collection comes from its configured URL when one is set, or from the
local catalog database otherwise. load_reference_data() runs the three
retrievals concurrently and settles each into the store on its own, so one
failure never holds back the other two.
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Sequence, Type

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError

from . import models
from .config import CITIES_URL, DOCTORS_URL, FETCH_TIMEOUT, SPECIALTIES_URL
from .db import catalog_session
from .models import Collection
from .schemas import City, Doctor, FetchFailure, Specialty
from .store import ReferenceDataStore

logger = logging.getLogger(__name__)

LABELS = {
    Collection.cities: "Cities",
    Collection.specialties: "Specialties",
    Collection.doctors: "Doctors",
}


class ReferenceFetchError(Exception):
    """Raised when one reference collection can't be retrieved."""

    def __init__(self, collection: Collection, cause):
        self.collection = collection
        self.cause = cause
        super().__init__(f"{LABELS[collection]} error: {cause}")

    @property
    def failure(self) -> FetchFailure:
        return FetchFailure(collection=self.collection, detail=str(self))


# ---------------------------------------------------------------------------
# SOURCES
# ---------------------------------------------------------------------------

def fetch_remote(collection: Collection, url: str, schema: Type[BaseModel]) -> List[BaseModel]:
    """GET a JSON list from url and validate every record."""
    try:
        resp = requests.get(url, timeout=FETCH_TIMEOUT)
        resp.raise_for_status()
        payload = resp.json()
    except (requests.RequestException, ValueError) as e:
        raise ReferenceFetchError(collection, e) from e

    try:
        return TypeAdapter(List[schema]).validate_python(payload)
    except ValidationError as e:
        raise ReferenceFetchError(collection, f"invalid payload ({e.error_count()} errors)") from e


def read_catalog(collection: Collection, orm_model, schema: Type[BaseModel]) -> List[BaseModel]:
    """Read a collection from the local catalog, ordered by id."""
    try:
        with catalog_session() as db:
            rows = db.query(orm_model).order_by(orm_model.id).all()
            return [schema.model_validate(row) for row in rows]
    except SQLAlchemyError as e:
        raise ReferenceFetchError(collection, e) from e


def fetch_cities(url: Optional[str] = None) -> List[City]:
    url = url or CITIES_URL
    if url:
        return fetch_remote(Collection.cities, url, City)
    return read_catalog(Collection.cities, models.City, City)


def fetch_specialties(url: Optional[str] = None) -> List[Specialty]:
    url = url or SPECIALTIES_URL
    if url:
        return fetch_remote(Collection.specialties, url, Specialty)
    return read_catalog(Collection.specialties, models.Specialty, Specialty)


def fetch_doctors(url: Optional[str] = None) -> List[Doctor]:
    url = url or DOCTORS_URL
    if url:
        return fetch_remote(Collection.doctors, url, Doctor)
    return read_catalog(Collection.doctors, models.Doctor, Doctor)


DEFAULT_FETCHERS: Dict[Collection, Callable[[], Sequence]] = {
    Collection.cities: fetch_cities,
    Collection.specialties: fetch_specialties,
    Collection.doctors: fetch_doctors,
}

# ---------------------------------------------------------------------------
# CONCURRENT LOAD
# ---------------------------------------------------------------------------

async def _settle(store: ReferenceDataStore, collection: Collection, fetcher: Callable[[], Sequence]):
    try:
        records = await asyncio.to_thread(fetcher)
    except ReferenceFetchError as e:
        store.fail(e.failure)
        return
    except Exception as e:
        logger.exception("Unexpected error fetching %s", collection.value)
        store.fail(ReferenceFetchError(collection, e).failure)
        return
    store.settle(collection, records)


async def load_reference_data(store: ReferenceDataStore,
                              fetchers: Optional[Dict[Collection, Callable[[], Sequence]]] = None) -> ReferenceDataStore:
    """
    Fetch all collections at once into store.
    Completion order is not guaranteed; each result lands in its own slot.
    """
    fetchers = fetchers or DEFAULT_FETCHERS
    await asyncio.gather(*(_settle(store, c, f) for c, f in fetchers.items()))
    logger.info(
        "Reference data ready: %d cities, %d specialties, %d doctors (%d failed)",
        len(store.cities), len(store.specialties), len(store.doctors), len(store.failures),
    )
    return store
