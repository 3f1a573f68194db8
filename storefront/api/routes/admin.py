# storefront/api/routes/admin.py
import enum
import logging
from typing import Any

from fastapi import APIRouter, Body, Request, status

from storefront.core.dependencies import (
    GetAdminSessionDep,
    GetBackendClientDep,
    GetCSRFTokenDep,
    GetReviewReconcilerDep,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


class AdminResource(str, enum.Enum):
    PRODUCTS = "products"
    CATEGORIES = "categories"
    USERS = "users"
    REVIEWS = "reviews"


def _envelope(data: Any) -> dict:
    return {"success": True, "data": data}


def _without_csrf(data: dict) -> dict:
    # the token travels as a header to the backend, never inside the entity
    return {key: value for key, value in data.items() if key != "csrfToken"}


@router.get("/{resource}")
async def list_entities(
        resource: AdminResource,
        request: Request,
        session: GetAdminSessionDep,
        backend: GetBackendClientDep,
):
    """Query parameters (search, page, limit...) are forwarded as they are"""
    params = {key: value for key, value in request.query_params.items() if key != "lang"}
    data = await backend.admin_list(resource.value, session.token, params)
    return _envelope({resource.value: data})


@router.get("/{resource}/{entity_id}")
async def get_entity(
        resource: AdminResource,
        entity_id: str,
        session: GetAdminSessionDep,
        backend: GetBackendClientDep,
):
    return _envelope(await backend.admin_get(resource.value, entity_id, session.token))


@router.post("/{resource}", status_code=status.HTTP_201_CREATED)
async def create_entity(
        resource: AdminResource,
        session: GetAdminSessionDep,
        backend: GetBackendClientDep,
        csrf_token: GetCSRFTokenDep,
        data: dict = Body(...),
):
    entity = await backend.admin_create(resource.value, session.token, csrf_token, _without_csrf(data))
    logger.info(f"🛠️ Admin {session.user_id} created a {resource.value} entry")
    return _envelope(entity)


@router.patch("/{resource}/{entity_id}")
async def update_entity(
        resource: AdminResource,
        entity_id: str,
        session: GetAdminSessionDep,
        backend: GetBackendClientDep,
        csrf_token: GetCSRFTokenDep,
        reconciler: GetReviewReconcilerDep,
        data: dict = Body(...),
):
    entity = await backend.admin_update(resource.value, entity_id, session.token, csrf_token, _without_csrf(data))
    if resource == AdminResource.REVIEWS:
        reconciler.discard(entity_id)
    return _envelope(entity)


@router.delete("/{resource}/{entity_id}")
async def delete_entity(
        resource: AdminResource,
        entity_id: str,
        session: GetAdminSessionDep,
        backend: GetBackendClientDep,
        csrf_token: GetCSRFTokenDep,
        reconciler: GetReviewReconcilerDep,
        force: bool = False,
):
    result = await backend.admin_delete(resource.value, entity_id, session.token, csrf_token, force=force)
    if resource == AdminResource.REVIEWS:
        # the author's pending copy goes too
        reconciler.discard(entity_id)
    logger.info(f"🗑️ Admin {session.user_id} deleted {resource.value}/{entity_id}")
    return _envelope(result)
