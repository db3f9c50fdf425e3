"""Mock authentication endpoint:
    POST  /autenticacao/login
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from invest_api.models.schemas import LoginRequest, LoginResponse
from invest_api.services.auth_service import login
from invest_api.store import JsonDocumentStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/autenticacao",
    tags=["Auth"],
)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Mock login returning a demo token and the client id",
)
def autenticacao_login(
    body: LoginRequest,
    store: JsonDocumentStore = Depends(get_store),
) -> LoginResponse:
    """Match e-mail and password against the stored users.

    400 when a field is missing, 401 when no user matches.
    """
    return LoginResponse(**login(store, body.email, body.senha))
