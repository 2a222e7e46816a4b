"""
farm/models.py -- Domain dataclasses for farms and their tasks.

These are pure data containers. Ownership checks and persistence live in
farm/service.py and farm/store.py.
"""

from dataclasses import dataclass, field
from typing import Optional

# Fields a caller may set on create and update. Anything else on a farm
# (id, owner, timestamps) is owned by the store.
FARM_FIELDS = ("name", "location", "size", "size_unit", "status", "soil")


@dataclass
class Farm:
    """A farm owned by exactly one account (farmer_id).

    location -- {"longitude": float, "latitude": float}, or None if unknown
    soil     -- {"soilpH": float, "soilType": str}

    id is None before the record is written to the database.
    """

    farmer_id: int
    name: str
    size: float
    size_unit: str  # "Plots" | "Acres" | "Hectares"
    status: str  # "Planting" | "Cultivation" | "Harvesting"
    soil: dict = field(default_factory=dict)
    location: Optional[dict] = None
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "farmerId": self.farmer_id,
            "name": self.name,
            "location": self.location,
            "size": self.size,
            "size_unit": self.size_unit,
            "status": self.status,
            "soil": self.soil,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class Task:
    """A unit of work scheduled on a farm. Deleted together with its farm."""

    farm_id: int
    description: str
    status: str = "pending"
    priority: str = "medium"
    due_date: Optional[str] = None  # YYYY-MM-DD
    id: Optional[int] = None
