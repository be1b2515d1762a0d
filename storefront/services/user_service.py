"""
User Service
Mirrors the signed-in identity into the users table
"""
import logging
from typing import Optional

import httpx
from postgrest.exceptions import APIError

from storefront.core.auth import Identity
from storefront.core.errors import StoreError
from storefront.domain.results import ActionResult
from storefront.repositories.user_repository import UserRepository
from storefront.services.boundary import require_identity

logger = logging.getLogger(__name__)


class UserService:

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    def sync_user(self, identity: Optional[Identity], name: Optional[str] = None) -> ActionResult:
        """Upsert the caller into users; the token's name is used when none is given"""
        try:
            clerk_id = require_identity(identity)
            self.user_repository.upsert(clerk_id, name or identity.name)
            return ActionResult.ok("User synced.")

        except StoreError as e:
            return ActionResult.from_error(e)
        except (APIError, httpx.HTTPError) as e:
            logger.error(f"User sync failed: {e}")
            return ActionResult.from_error(StoreError("Failed to sync the user."))
