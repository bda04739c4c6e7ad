"""Building categories shared by the store schema, entry form and filter UI."""

from enum import Enum


class Category(str, Enum):
    """Valid building categories."""
    BUILDING = "Building"
    CABIN = "Cabin"
    SECURITY_PILLAR = "Security Pillar"
    GATE = "Gate"
    OTHER = "Other"
    MAIN = "Main"


DEFAULT_CATEGORY = Category.BUILDING

# Filter pseudo-value meaning "no category filter"
ALL = "All"

FILTER_OPTIONS: list[str] = [ALL] + [category.value for category in Category]
