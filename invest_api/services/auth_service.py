"""Mock login for the demo front-end.

The token is ``"header." + base64(json({userId, email}))`` — readable by the
client to recover its id, and deliberately not a security mechanism.
"""

from __future__ import annotations

import base64
import json
import logging

from invest_api.exceptions import AuthenticationError, InvalidInputError
from invest_api.store import JsonDocumentStore

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "header."


def issue_mock_token(user_id: int, email: str) -> str:
    payload = json.dumps({"userId": user_id, "email": email}, separators=(",", ":"))
    return TOKEN_PREFIX + base64.b64encode(payload.encode("utf-8")).decode("ascii")


def decode_mock_token(token: str) -> dict:
    """Inverse of :func:`issue_mock_token`.  Raises ``ValueError`` on garbage."""
    if not token.startswith(TOKEN_PREFIX):
        raise ValueError("Malformed token")
    raw = base64.b64decode(token[len(TOKEN_PREFIX):], validate=True)
    return json.loads(raw)


def login(store: JsonDocumentStore, email: str | None, senha: str | None) -> dict:
    """Returns dict with keys: token, clienteId."""
    if not email or not senha:
        raise InvalidInputError("E-mail e senha são obrigatórios")

    user = next(
        (u for u in store.all("users") if u.get("email") == email and u.get("password") == senha),
        None,
    )
    if user is None:
        logger.info("Failed login for %s", email)
        raise AuthenticationError("E-mail ou senha incorretos")

    logger.info("Login: cliente=%s", user["id"])
    return {"token": issue_mock_token(user["id"], user["email"]), "clienteId": user["id"]}
