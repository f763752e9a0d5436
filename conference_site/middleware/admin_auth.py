"""Administrator authentication.

The administrator proves knowledge of a shared secret (stored only as a
bcrypt hash in ``ADMIN_SECRET_HASH``) and receives a short-lived JWT carrying
``role=admin``. ``admin_required`` guards the endpoints that need it.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Optional

import bcrypt
from flask import jsonify
from flask_jwt_extended import create_access_token, get_jwt, verify_jwt_in_request

logger = logging.getLogger(__name__)

ADMIN_IDENTITY = "admin"


def check_admin_secret(secret: Optional[str], secret_hash: Optional[str]) -> bool:
    if not secret or not secret_hash:
        return False
    try:
        return bcrypt.checkpw(secret.encode("utf-8"), secret_hash.encode("utf-8"))
    except ValueError:
        logger.error("ADMIN_SECRET_HASH is not a valid bcrypt hash")
        return False


def issue_admin_token() -> str:
    return create_access_token(identity=ADMIN_IDENTITY, additional_claims={"role": "admin"})


def admin_required(func: Callable[..., Any]) -> Callable[..., Any]:
    """Reject requests without a valid admin JWT (401) or with another role (403)."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        verify_jwt_in_request()
        claims = get_jwt() or {}
        if claims.get("role") != "admin":
            logger.warning(
                "Admin access denied",
                extra={"subject": claims.get("sub"), "endpoint": func.__name__},
            )
            return jsonify({"error": "admin_privileges_required"}), 403
        return func(*args, **kwargs)

    return wrapper
