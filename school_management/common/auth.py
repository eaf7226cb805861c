from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, redirect, request
from flask_login import current_user

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

PUBLIC_PREFIXES = ("/auth", "/api/auth", "/api/health", "/static")

# Page prefixes and the role each one requires
ROLE_PREFIXES = (
    ("/admin", Role.ADMIN),
    ("/teacher", Role.TEACHER),
    ("/principal", Role.PRINCIPAL),
)


def is_public_path(path: str) -> bool:
    if path == "/":
        return True
    return any(path == p or path.startswith(p + "/") for p in PUBLIC_PREFIXES)


def required_role_for(path: str):
    for prefix, role in ROLE_PREFIXES:
        if path == prefix or path.startswith(prefix + "/"):
            return role
    return None


def roles_required(*roles: Role):
    """API guard: 401 without a session, 403 when the role is not allowed."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                raise AuthenticationError("Unauthorized")
            if roles and current_user.role not in roles:
                raise AuthorizationError("Forbidden")
            return view(*args, **kwargs)

        return wrapper

    return decorator


login_required = roles_required()
admin_required = roles_required(Role.ADMIN)
teacher_required = roles_required(Role.TEACHER)
principal_required = roles_required(Role.PRINCIPAL)
report_viewer_required = roles_required(Role.ADMIN, Role.PRINCIPAL)


def install_page_guard(app: Flask) -> None:
    """Redirect page requests to sign-in or /unauthorized before the view runs.

    API routes are left to their own decorators so they can answer with JSON.
    """

    @app.before_request
    def guard_pages():
        path = request.path
        if path.startswith("/api/") or is_public_path(path):
            return None

        if not current_user.is_authenticated:
            return redirect(f"/auth/sign-in?callbackUrl={path}")

        role = required_role_for(path)
        if role is not None and current_user.role != role:
            logger.info("Role %s denied for %s", current_user.role, path)
            return redirect("/unauthorized")
        return None
