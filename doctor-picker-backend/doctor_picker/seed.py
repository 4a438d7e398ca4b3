"""
seed.py
=======
Default reference catalog, written on first start when the database is empty.
"""

import logging
from .models import City, Doctor, Sex, Specialty

logger = logging.getLogger(__name__)

CITIES = [
    {"id": 1, "name": "Springfield"},
    {"id": 2, "name": "Shelbyville"},
    {"id": 3, "name": "Ogdenville"},
]

SPECIALTIES = [
    {"id": 1, "name": "General Practice"},
    {"id": 2, "name": "Cardiology"},
    {"id": 3, "name": "Gynecology", "gender_restriction": Sex.female},
    {"id": 4, "name": "Urology", "gender_restriction": Sex.male},
    {"id": 5, "name": "Dermatology"},
]

# (id, name, surname, city_id, specialty_id, is_pediatrician)
DOCTORS = [
    (1, "Alice", "Hart", 1, 1, False),
    (2, "Bob", "Stone", 1, 2, False),
    (3, "Clara", "Wells", 1, 1, True),
    (4, "Daniel", "Price", 2, 4, False),
    (5, "Emma", "Lane", 2, 3, False),
    (6, "Frank", "Moss", 2, 5, True),
    (7, "Grace", "Hill", 3, 2, True),
    (8, "Henry", "Ford", 3, 5, False),
]


def seed_catalog(db) -> bool:
    """
    Write the default catalog if there are no cities yet.
    Returns True when rows were added.
    """
    count = db.query(City).count()
    if count:
        logger.info("🩻 Catalog already holds %d cities.", count)
        return False

    logger.info("🩺 Empty catalog. Seeding default cities, specialties and doctors...")
    db.add_all([City(**row) for row in CITIES])
    db.add_all([Specialty(**row) for row in SPECIALTIES])
    db.flush()
    db.add_all([
        Doctor(id=i, name=n, surname=s, city_id=c, specialty_id=sp, is_pediatrician=p)
        for i, n, s, c, sp, p in DOCTORS
    ])
    db.commit()
    logger.info("✅ Default catalog has been seeded.")
    return True
