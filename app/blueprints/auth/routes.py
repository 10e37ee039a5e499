from __future__ import annotations

import logging

from flask import Blueprint, Response, session

from app.blueprints.api._common import (
    get_auth_manager as _auth_manager,
    require_json_object,
    success as _success,
)
from app.schemas import LoginRequest, SignupRequest
from app.utils.http import safe_route

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/signup")
@safe_route("Failed to register user")
def signup() -> Response:
    body = SignupRequest.model_validate(require_json_object())
    user = _auth_manager().register_user(body.fullname, body.email, body.password)
    return _success(user, 201, message="Account created")


@auth_bp.post("/login")
@safe_route("Failed to log in")
def login() -> Response:
    body = LoginRequest.model_validate(require_json_object())
    user = _auth_manager().authenticate_user(body.email, body.password)

    # Regenerate the session on login to prevent fixation
    session.clear()
    session["user_id"] = user["id"]
    session["user_email"] = user["email"]
    return _success(user, message="Login successful")


@auth_bp.post("/logout")
def logout() -> Response:
    user_id = session.get("user_id")
    session.clear()
    if user_id is not None:
        logger.info("User %s logged out", user_id)
    return _success(None, message="Logged out")
