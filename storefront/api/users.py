"""
Users API Endpoints
Sync the signed-in identity into the users table
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from storefront.api.deps import get_user_service
from storefront.api.responses import action_response
from storefront.core.auth import Identity, get_current_identity
from storefront.services.user_service import UserService

router = APIRouter()


class SyncUserRequest(BaseModel):
    name: Optional[str] = None


@router.post("/sync")
def sync_user(
    request: SyncUserRequest,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: UserService = Depends(get_user_service)
):
    return action_response(service.sync_user(identity, request.name))
