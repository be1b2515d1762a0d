"""
Response helpers for action endpoints
"""
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from storefront.core.errors import http_status_for
from storefront.domain.results import ActionResult


def action_response(result: ActionResult, success_status: int = 200) -> JSONResponse:
    """
    Serialize an ActionResult, using the error code's HTTP status on failure

    The body is always {success, message, code, ...}.
    """
    status_code = success_status if result.success else http_status_for(result.code)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(result))
