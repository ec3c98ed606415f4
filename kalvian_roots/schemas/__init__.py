"""Pydantic schemas for family records and networks."""

from kalvian_roots.schemas.family import Couple, Family, Person, year_of
from kalvian_roots.schemas.network import FamilyNetwork

__all__ = [
    "Person",
    "Couple",
    "Family",
    "FamilyNetwork",
    "year_of",
]
