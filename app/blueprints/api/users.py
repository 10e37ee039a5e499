"""Users API
============

Routes:
    GET /api/users/<id>            - Profile without the password hash
    PUT /api/users/<id>/security   - Change email and/or password
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from app.blueprints.api._common import (
    get_auth_manager as _auth_manager,
    require_json_object,
    success as _success,
)
from app.schemas import SecurityUpdateRequest
from app.utils.http import safe_route

logger = logging.getLogger(__name__)

users_api = Blueprint("users_api", __name__)


@users_api.get("/<int:user_id>")
@safe_route("Failed to load user")
def get_user(user_id: int) -> Response:
    return _success(_auth_manager().get_profile(user_id))


@users_api.put("/<int:user_id>/security")
@safe_route("Failed to update security settings")
def update_security(user_id: int) -> Response:
    body = SecurityUpdateRequest.model_validate(require_json_object())
    user = _auth_manager().update_security(
        user_id,
        body.current_password,
        email=body.email,
        new_password=body.new_password,
    )
    return _success(user, message="Security settings updated")
