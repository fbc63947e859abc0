"""
Identity endpoints.

Anonymous sign-in hands out a fresh identifier; the admin exchange adds the
admin capability to an existing identity.
"""
import secrets

from fastapi import APIRouter, Depends, status

from myroom.api import deps
from myroom.config.settings import settings
from myroom.core.exceptions import PermissionDeniedError
from myroom.core.logging import get_audit_logger
from myroom.core.security import JWTManager, Principal
from myroom.core.utils import new_id
from myroom.schemas.auth import AdminLoginRequest, TokenResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])
audit = get_audit_logger("myroom.audit.auth")


@router.post("/anonymous", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def sign_in_anonymously(jwt_manager: JWTManager = Depends(deps.get_jwt_manager)):
    user_id = new_id()
    audit.info("anonymous_sign_in", new_user_id=user_id)
    return TokenResponse(access_token=jwt_manager.create_access_token(user_id), user_id=user_id)


@router.post("/admin", response_model=TokenResponse)
def admin_login(
    body: AdminLoginRequest,
    principal: Principal = Depends(deps.get_principal),
    jwt_manager: JWTManager = Depends(deps.get_jwt_manager),
):
    user_id = principal.require_user()
    expected = settings.ADMIN_PASSWORD.get_secret_value()
    if not secrets.compare_digest(body.password.encode(), expected.encode()):
        audit.warning("admin_login_failed", attempted_by=user_id)
        raise PermissionDeniedError("Incorrect admin password.")

    audit.info("admin_login", admin_id=user_id)
    return TokenResponse(
        access_token=jwt_manager.create_access_token(user_id, is_admin=True),
        user_id=user_id,
        is_admin=True,
    )
