"""
api/routes/v1/stores.py -- Store REST endpoints.

Routes:
  GET    /api/v1/stores              -- list stores
  POST   /api/v1/stores              -- provision store (ADMIN, MANAGER)
  GET    /api/v1/stores/{store_id}   -- store detail
  PUT    /api/v1/stores/{store_id}   -- update description/address (ADMIN, MANAGER)
  DELETE /api/v1/stores/{store_id}   -- delete store (ADMIN)

Role rules live in StoreService; its AuthorizationError becomes a 403 in
api/main.py. The router-level dependency only establishes who is calling.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.models import StoreCreate, StoreResponse, StoreUpdate
from auth.dependencies import get_current_user
from core.models import User
from services.stores import StoreService

# All store routes require authentication.
router = APIRouter(dependencies=[Depends(get_current_user)])


def _service(request: Request) -> StoreService:
    return request.app.state.store_service


def _not_found(store_id: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "not_found", "message": f"Store {store_id} not found."},
    )


@router.get("/stores", response_model=list[StoreResponse])
def list_stores(request: Request) -> list[StoreResponse]:
    return [StoreResponse.from_store(s) for s in _service(request).list_stores()]


@router.post("/stores", response_model=StoreResponse, status_code=201)
def provision_store(
    request: Request,
    body: StoreCreate,
    current_user: User = Depends(get_current_user),
) -> StoreResponse:
    store = _service(request).provision_store(
        current_user,
        body.store_id,
        body.name,
        body.address,
        body.description,
    )
    return StoreResponse.from_store(store)


@router.get("/stores/{store_id}", response_model=StoreResponse)
def show_store(request: Request, store_id: str) -> StoreResponse:
    store = _service(request).show_store(store_id)
    if store is None:
        raise _not_found(store_id)
    return StoreResponse.from_store(store)


@router.put("/stores/{store_id}", response_model=StoreResponse)
def update_store(
    request: Request,
    store_id: str,
    body: StoreUpdate,
    current_user: User = Depends(get_current_user),
) -> StoreResponse:
    store = _service(request).update_store(current_user, store_id, body.description, body.address)
    if store is None:
        raise _not_found(store_id)
    return StoreResponse.from_store(store)


@router.delete("/stores/{store_id}", status_code=204)
def delete_store(
    request: Request,
    store_id: str,
    current_user: User = Depends(get_current_user),
) -> Response:
    if not _service(request).delete_store(current_user, store_id):
        raise _not_found(store_id)
    return Response(status_code=204)
