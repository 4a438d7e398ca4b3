"""
models.py
=========
SQLAlchemy ORM models for the reference catalog.
Contains tables for:
 - City
 - Specialty
 - Doctor
"""

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Enum
from sqlalchemy.orm import declarative_base, relationship
import enum

# SQLAlchemy Base class
Base = declarative_base()

# ---------------------------------------------------------------------------
# ENUM DEFINITIONS
# ---------------------------------------------------------------------------

class Sex(str, enum.Enum):
    """Patient sex, also used to restrict specialties."""
    male = "Male"
    female = "Female"


class Collection(str, enum.Enum):
    """The three reference collections the form depends on."""
    cities = "cities"
    specialties = "specialties"
    doctors = "doctors"


# ---------------------------------------------------------------------------
# TABLE DEFINITIONS
# ---------------------------------------------------------------------------

class City(Base):
    """A city where doctors practice."""
    __tablename__ = "cities"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)


class Specialty(Base):
    """A medical specialty, optionally limited to one sex."""
    __tablename__ = "specialties"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    gender_restriction = Column(Enum(Sex, values_callable=lambda e: [m.value for m in e]), nullable=True)


class Doctor(Base):
    """A doctor bound to one city and one specialty."""
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    surname = Column(String, nullable=False)
    city_id = Column(Integer, ForeignKey("cities.id"), nullable=False)
    specialty_id = Column(Integer, ForeignKey("specialties.id"), nullable=False)
    is_pediatrician = Column(Boolean, default=False, nullable=False)

    # Relationships
    city = relationship("City")
    specialty = relationship("Specialty")
