"""
Admin authentication for the staff dashboard API.

Every admin route depends on require_admin, which checks the X-Admin-Key
header against ADMIN_KEY (or ADMIN_API_KEY from the environment).

- No key configured: 503 admin_auth_unconfigured
- Missing or wrong key: 403 forbidden
"""
import os
import hashlib
import hmac
from typing import Optional
from dataclasses import dataclass
from fastapi import Request
from salespath_admin.core.errors import AppError, PermissionError
from salespath_admin.core.config import settings


@dataclass
class AdminActor:
    """Represents an authenticated admin actor."""
    actor_id: str  # "admin_key:<hash>"
    actor_display: Optional[str] = None


def get_admin_api_key() -> Optional[str]:
    """Get the admin API key.
    Prefer ADMIN_API_KEY env var; fall back to settings.ADMIN_KEY.
    """
    env_key = os.getenv("ADMIN_API_KEY")
    if env_key:
        return env_key
    return settings.ADMIN_KEY


def verify_admin_key(request: Request) -> Optional[AdminActor]:
    """
    Verify X-Admin-Key header.
    Returns AdminActor if valid, None if not present/invalid.
    """
    expected_key = get_admin_api_key()
    if not expected_key:
        return None

    header_key = request.headers.get("X-Admin-Key", "").strip()
    if not header_key or not hmac.compare_digest(header_key, expected_key):
        return None

    key_hash = hashlib.sha256(header_key.encode()).hexdigest()[:16]
    return AdminActor(
        actor_id=f"admin_key:{key_hash}",
        actor_display="Admin Key",
    )


def require_admin(request: Request) -> AdminActor:
    """
    FastAPI dependency: Require admin authentication.

    Usage:
        @router.get("/admin/endpoint")
        def admin_endpoint(actor: AdminActor = Depends(require_admin)):
            pass
    """
    if not get_admin_api_key():
        raise AppError(
            "Admin authentication not configured",
            code="admin_auth_unconfigured",
            status_code=503,
        )

    actor = verify_admin_key(request)
    if not actor:
        raise PermissionError("Unauthorized")

    return actor
