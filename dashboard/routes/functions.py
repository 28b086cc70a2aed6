"""
Function-style endpoint for the client fan-out update.

POST /functions/update-client-data keeps the wire format the dashboard's
detail editor already speaks:

    request:  {"clientId": "<uuid>", "updatedData": {...flat projection...}}
    response: {"data": <clients row>}            on success
              {"error": "<message>"}              with 400/401/403/404/500

Unlike the /clients routes, errors are flat {"error": ...} bodies rather than
HTTPException details, and a dashboard_users row is not required: clients
and assigned advisors may save their own records too.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from dashboard.auth.dependencies import decode_access_token, extract_bearer_token
from dashboard.schemas.clients import UpdateClientDataRequest
from dashboard.services.client_update_service import (
    ClientNotFoundError,
    ClientUpdateError,
    ClientUpdatePermissionError,
    apply_client_update,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["functions"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post(
    "/update-client-data",
    summary="Update client data (function wire format)",
    description="""
    Fan a flat client projection out over clients and its child tables.

    Body: {"clientId": ..., "updatedData": {...}}. Returns {"data": row} or
    {"error": message}.
    """
)
async def update_client_data_function(
    request: Request,
    authorization: Optional[str] = Header(None)
) -> JSONResponse:
    """Function endpoint for the detail editor's save action."""
    try:
        body: Dict[str, Any] = await request.json()
        payload = UpdateClientDataRequest.model_validate(body)
    except (ValueError, ValidationError) as e:
        logger.warning(f"Malformed update-client-data body: {e}")
        return _error(status.HTTP_400_BAD_REQUEST, "Missing clientId or updatedData")

    if not payload.client_id or payload.updated_data is None:
        return _error(status.HTTP_400_BAD_REQUEST, "Missing clientId or updatedData")

    if not authorization:
        return _error(status.HTTP_401_UNAUTHORIZED, "No authorization header")

    try:
        token = extract_bearer_token(authorization)
        claims = decode_access_token(token)
    except HTTPException:
        return _error(status.HTTP_401_UNAUTHORIZED, "Invalid authentication")

    user_id = claims.get("sub")
    if not user_id:
        return _error(status.HTTP_401_UNAUTHORIZED, "Invalid authentication")

    email = claims.get("email")
    logger.info(f"Authenticated user {user_id} invoking update-client-data")

    try:
        outcome = await apply_client_update(
            client_id=payload.client_id,
            updated_data=payload.updated_data,
            user_id=str(user_id),
            email=str(email) if email is not None else None,
        )
    except ClientNotFoundError:
        return _error(status.HTTP_404_NOT_FOUND, "Client not found")
    except ClientUpdatePermissionError as e:
        return _error(status.HTTP_403_FORBIDDEN, str(e))
    except ClientUpdateError as e:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
    except RuntimeError as e:
        logger.error(f"update-client-data misconfigured: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server configuration error")
    except Exception as e:
        logger.error(f"Unexpected error in update-client-data: {e}", exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    return JSONResponse(status_code=status.HTTP_200_OK, content={"data": outcome.client})
