"""
Action results returned to API callers

Cart and order operations never raise to their caller; they report a result
with a human-readable message and, on failure, a machine-readable code.
"""
from typing import Optional

from pydantic import BaseModel

from storefront.core.errors import StoreError


class ActionResult(BaseModel):
    success: bool
    message: str
    code: Optional[str] = None

    @classmethod
    def ok(cls, message: str, **kwargs):
        return cls(success=True, message=message, **kwargs)

    @classmethod
    def from_error(cls, error: StoreError):
        return cls(success=False, message=error.message, code=error.code)


class CreateOrderResult(ActionResult):
    order_id: Optional[str] = None
