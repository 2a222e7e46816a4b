"""
api/routes/v1/farms.py -- Farm CRUD routes for the FieldBook REST API.

Routes:
  POST   /farms              -- create a farm owned by the caller
  GET    /farms              -- list the caller's farms
  GET    /farms/{farm_id}    -- one farm (404 unless the caller owns it)
  PATCH  /farms/{farm_id}    -- overwrite a farm's editable fields
  DELETE /farms/{farm_id}    -- delete a farm and its tasks

Every route is scoped by the authenticated user's id. FarmService filters
on (farm_id, owner) together, so another account's farm is reported exactly
as if it did not exist.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import EnvelopeResponse, FarmCreate, FarmUpdate
from auth.dependencies import get_current_user
from auth.models import User
from core.models import Envelope
from farm.service import FarmService

# All farm routes require authentication. The handlers need the User object
# itself (for scoping), so each declares Depends(get_current_user) directly.
router = APIRouter()


def _respond(envelope: Envelope) -> JSONResponse:
    return JSONResponse(status_code=envelope.status_code, content=envelope.to_dict())


@limiter.limit("30/minute")
@router.post("/farms", response_model=EnvelopeResponse, status_code=201)
def create_farm(
    request: Request,
    body: FarmCreate,
    current_user: User = Depends(get_current_user),
) -> JSONResponse:
    farms: FarmService = request.app.state.farm_service
    return _respond(farms.create_farm(current_user.id, body.to_fields()))


@router.get("/farms", response_model=EnvelopeResponse)
def list_farms(request: Request, current_user: User = Depends(get_current_user)) -> JSONResponse:
    """Return every farm the caller owns (possibly an empty list)."""
    farms: FarmService = request.app.state.farm_service
    return _respond(farms.list_farms(current_user.id))


@router.get("/farms/{farm_id}", response_model=EnvelopeResponse)
def get_farm(
    request: Request,
    farm_id: int,
    current_user: User = Depends(get_current_user),
) -> JSONResponse:
    farms: FarmService = request.app.state.farm_service
    return _respond(farms.get_farm(current_user.id, farm_id))


@router.patch("/farms/{farm_id}", response_model=EnvelopeResponse)
def update_farm(
    request: Request,
    farm_id: int,
    body: FarmUpdate,
    current_user: User = Depends(get_current_user),
) -> JSONResponse:
    farms: FarmService = request.app.state.farm_service
    return _respond(farms.update_farm(current_user.id, farm_id, body.to_fields()))


@router.delete("/farms/{farm_id}", response_model=EnvelopeResponse)
def delete_farm(
    request: Request,
    farm_id: int,
    current_user: User = Depends(get_current_user),
) -> JSONResponse:
    farms: FarmService = request.app.state.farm_service
    return _respond(farms.delete_farm(current_user.id, farm_id))
