"""
store.py
========
In-memory holder for the three reference collections and their fetch errors.
Every lookup tolerates a miss: a name or id that resolves to nothing gives None.
"""

import logging
from typing import Dict, List, Optional, Sequence
from .models import Collection
from .schemas import City, Doctor, FetchFailure, Specialty

logger = logging.getLogger(__name__)


class ReferenceDataStore:
    """
    Cities, specialties and doctors as last fetched, in source order.
    Each collection settles on its own; a failed one is empty and keeps a
    FetchFailure until a later fetch succeeds.
    """

    def __init__(
        self,
        cities: Sequence[City] = (),
        specialties: Sequence[Specialty] = (),
        doctors: Sequence[Doctor] = (),
    ):
        self.cities: List[City] = list(cities)
        self.specialties: List[Specialty] = list(specialties)
        self.doctors: List[Doctor] = list(doctors)
        self.failures: Dict[Collection, FetchFailure] = {}
        # Bumped whenever the doctors collection is replaced
        self.doctors_revision = 0

    # -----------------------------------------------------------------------
    # Settling fetch results
    # -----------------------------------------------------------------------

    def settle(self, collection: Collection, records: Sequence) -> None:
        """Replace a collection with freshly fetched records."""
        setattr(self, collection.value, list(records))
        self.failures.pop(collection, None)
        if collection is Collection.doctors:
            self.doctors_revision += 1
        logger.info("Loaded %d %s", len(records), collection.value)

    def fail(self, failure: FetchFailure) -> None:
        """Record a failed fetch; the collection becomes empty."""
        setattr(self, failure.collection.value, [])
        self.failures[failure.collection] = failure
        if failure.collection is Collection.doctors:
            self.doctors_revision += 1
        logger.warning("Reference fetch failed: %s", failure.detail)

    def failure(self, collection: Collection) -> Optional[FetchFailure]:
        return self.failures.get(collection)

    # -----------------------------------------------------------------------
    # Lookups
    # -----------------------------------------------------------------------

    def city_named(self, name: str) -> Optional[City]:
        return next((c for c in self.cities if c.name == name), None)

    def city_by_id(self, city_id: int) -> Optional[City]:
        return next((c for c in self.cities if c.id == city_id), None)

    def specialty_named(self, name: str) -> Optional[Specialty]:
        return next((s for s in self.specialties if s.name == name), None)

    def specialty_by_id(self, specialty_id: int) -> Optional[Specialty]:
        return next((s for s in self.specialties if s.id == specialty_id), None)

    def doctor_named(self, name: str) -> Optional[Doctor]:
        # First match on first name only; two doctors sharing a name are ambiguous.
        return next((d for d in self.doctors if d.name == name), None)
