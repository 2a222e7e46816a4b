"""
tests/test_farm_service.py -- Unit tests for farm/service.py.

Covers:
  - create_farm: envelope, owner check (unknown owner -> InternalError, no row)
  - list_farms: only the caller's farms
  - get/update/delete on another account's farm fail as if it did not exist
  - update_farm ignores keys outside the editable field set
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from auth.models import User
from core.errors import InternalError, NotFoundError
from farm.service import FarmService
from farm.store import FarmStore

_FIELDS = {
    "name": "North Field",
    "location": {"longitude": 36.8, "latitude": -1.3},
    "size": 10,
    "size_unit": "Acres",
    "status": "Planting",
    "soil": {"soilpH": 6.5, "soilType": "Loam"},
}


def _add_user(user_store, email: str, username: str) -> int:
    return user_store.create_user(
        User(email=email, username=username, firstname="F", lastname="L", hashed_password="x", verified=True)
    )


@pytest.fixture
def owners(user_store):
    return _add_user(user_store, "a@x.com", "alice"), _add_user(user_store, "b@x.com", "bob")


class TestCreateFarm:
    def test_returns_created_envelope(self, farm_service, owners) -> None:
        alice, _bob = owners
        env = farm_service.create_farm(alice, _FIELDS)
        assert env.message == "Farm created"
        assert env.status == "success"
        assert env.status_code == 201
        assert env.data["farmerId"] == alice
        assert env.data["name"] == "North Field"
        assert env.data["soil"] == {"soilpH": 6.5, "soilType": "Loam"}
        assert isinstance(env.data["id"], int)

    def test_unknown_owner_writes_nothing(self, farm_service, farm_store) -> None:
        with pytest.raises(InternalError) as exc_info:
            farm_service.create_farm(999, _FIELDS)
        assert exc_info.value.message == "Farm could not be added."
        assert farm_store.list_farms(999) == []

    def test_store_fault_is_internal(self, user_store, owners) -> None:
        alice, _bob = owners
        store = MagicMock(spec=FarmStore)
        store.create_farm.side_effect = RuntimeError("db locked")
        with pytest.raises(InternalError) as exc_info:
            FarmService(store, user_store).create_farm(alice, _FIELDS)
        assert exc_info.value.message == "Farm could not be added."


class TestScopedAccess:
    def test_list_farms_only_returns_own(self, farm_service, owners) -> None:
        alice, bob = owners
        farm_service.create_farm(alice, _FIELDS)
        farm_service.create_farm(bob, {**_FIELDS, "name": "Bob's Plot"})

        env = farm_service.list_farms(alice)

        assert env.message == "Farms retrieved."
        assert [f["name"] for f in env.data] == ["North Field"]

    def test_list_farms_empty(self, farm_service, owners) -> None:
        assert farm_service.list_farms(owners[0]).data == []

    def test_get_own_farm(self, farm_service, owners) -> None:
        alice, _bob = owners
        farm_id = farm_service.create_farm(alice, _FIELDS).data["id"]
        env = farm_service.get_farm(alice, farm_id)
        assert env.message == "Farm retrieved successfully"
        assert env.data["id"] == farm_id

    def test_get_other_users_farm_is_not_found(self, farm_service, owners) -> None:
        alice, bob = owners
        farm_id = farm_service.create_farm(alice, _FIELDS).data["id"]
        with pytest.raises(NotFoundError) as exc_info:
            farm_service.get_farm(bob, farm_id)
        assert exc_info.value.message == "Farm not found."

    def test_update_own_farm(self, farm_service, owners) -> None:
        alice, _bob = owners
        farm_id = farm_service.create_farm(alice, _FIELDS).data["id"]
        env = farm_service.update_farm(
            alice, farm_id, {**_FIELDS, "status": "Harvesting", "size": 12.5, "farmer_id": 12345}
        )
        assert env.message == "Farm updated successfully"
        assert env.data["status"] == "Harvesting"
        assert env.data["size"] == 12.5
        assert env.data["farmerId"] == alice

    def test_update_other_users_farm_is_not_found(self, farm_service, owners) -> None:
        alice, bob = owners
        farm_id = farm_service.create_farm(alice, _FIELDS).data["id"]
        with pytest.raises(NotFoundError):
            farm_service.update_farm(bob, farm_id, {**_FIELDS, "name": "Mine now"})
        assert farm_service.get_farm(alice, farm_id).data["name"] == "North Field"

    def test_delete_own_farm(self, farm_service, owners) -> None:
        alice, _bob = owners
        farm_id = farm_service.create_farm(alice, _FIELDS).data["id"]
        env = farm_service.delete_farm(alice, farm_id)
        assert env.to_dict() == {
            "message": "Farm deleted successfully",
            "status": "success",
            "statusCode": 200,
            "data": None,
        }
        with pytest.raises(NotFoundError):
            farm_service.get_farm(alice, farm_id)

    def test_delete_other_users_farm_fails_like_missing(self, farm_service, owners) -> None:
        alice, bob = owners
        farm_id = farm_service.create_farm(alice, _FIELDS).data["id"]

        with pytest.raises(InternalError) as not_owned:
            farm_service.delete_farm(bob, farm_id)
        with pytest.raises(InternalError) as missing:
            farm_service.delete_farm(bob, farm_id + 1000)

        assert not_owned.value.message == missing.value.message == "Farm could not be deleted."
        assert farm_service.get_farm(alice, farm_id).data["id"] == farm_id
