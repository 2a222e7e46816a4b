"""
farm/service.py -- Ownership-checked CRUD over farms.

Every operation is scoped by the caller's user id. get/update/delete filter
on (farm_id, farmer_id) together, so acting on another account's farm
fails exactly like acting on a farm that does not exist.

Field validation (size_unit and status enums, numeric size, soil shape)
happens at the request-model boundary in api/models.py; this module trusts
its inputs.
"""

from __future__ import annotations

import logging

from auth.store import UserStore
from core.errors import InternalError, NotFoundError, ServiceError
from core.models import Envelope
from farm.models import FARM_FIELDS, Farm
from farm.store import FarmStore

logger = logging.getLogger("fieldbook.farm")


class FarmService:
    def __init__(self, store: FarmStore, user_store: UserStore) -> None:
        self.store = store
        self.user_store = user_store

    def create_farm(self, user_id: int, fields: dict) -> Envelope:
        """Create a farm owned by user_id.

        The owner is confirmed before the insert, so a farm can never be
        written for an account that does not exist.
        """
        try:
            if self.user_store.get_by_id(user_id) is None:
                raise InternalError("Farm could not be added.", reason="no_owner")
            farm = Farm(farmer_id=user_id, **{k: fields.get(k) for k in FARM_FIELDS})
            farm_id = self.store.create_farm(farm)
            created = self.store.get_farm(farm_id, user_id)
            if created is None:
                raise InternalError("Farm could not be added.")
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Farm creation failed for user %s", user_id)
            raise InternalError("Farm could not be added.") from exc

        logger.info("Farm %s created for user %s", farm_id, user_id)
        return Envelope(message="Farm created", status_code=201, data=created.to_dict())

    def list_farms(self, user_id: int) -> Envelope:
        try:
            farms = self.store.list_farms(user_id)
        except Exception as exc:
            logger.exception("Farm listing failed for user %s", user_id)
            raise InternalError("Farms could not be retrieved.") from exc
        return Envelope(message="Farms retrieved.", data=[f.to_dict() for f in farms])

    def get_farm(self, user_id: int, farm_id: int) -> Envelope:
        try:
            farm = self.store.get_farm(farm_id, user_id)
        except Exception as exc:
            logger.exception("Farm lookup failed for farm %s", farm_id)
            raise InternalError("Farm could not be retrieved") from exc
        if farm is None:
            raise NotFoundError("Farm not found.")
        return Envelope(message="Farm retrieved successfully", data=farm.to_dict())

    def update_farm(self, user_id: int, farm_id: int, fields: dict) -> Envelope:
        """Overwrite a farm's editable fields. Keys outside FARM_FIELDS are ignored."""
        changes = {k: v for k, v in fields.items() if k in FARM_FIELDS}
        try:
            updated = self.store.update_farm(farm_id, user_id, **changes)
            farm = self.store.get_farm(farm_id, user_id) if updated else None
        except Exception as exc:
            logger.exception("Farm update failed for farm %s", farm_id)
            raise InternalError("Farm could not be updated.") from exc
        if farm is None:
            raise NotFoundError("Farm not found.")
        return Envelope(message="Farm updated successfully", data=farm.to_dict())

    def delete_farm(self, user_id: int, farm_id: int) -> Envelope:
        """Delete a farm and its tasks.

        "Not found" and "not yours" fail with the same InternalError as a
        database fault; the ownership filter is the deletion predicate.
        """
        try:
            deleted = self.store.delete_farm(farm_id, user_id)
        except Exception as exc:
            logger.exception("Farm deletion failed for farm %s", farm_id)
            raise InternalError("Farm could not be deleted.") from exc
        if not deleted:
            raise InternalError("Farm could not be deleted.", reason="no_match")

        logger.info("Farm %s deleted by user %s", farm_id, user_id)
        return Envelope(message="Farm deleted successfully")
