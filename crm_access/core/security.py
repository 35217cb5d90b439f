"""
Security & Authorization

JWT-based authentication and permission guards for API routes.
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from crm_access.services.catalog import FixedRole
from crm_access.services.permissions import PermissionService, get_permission_service

from .config import settings
from .database import get_db

# JWT Bearer token
security = HTTPBearer(auto_error=False)


def verify_token(token: str) -> dict:
    """
    Verify and decode a JWT token

    Args:
        token: JWT token string

    Returns:
        Decoded token payload

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
        return payload
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
):
    """
    Dependency to get the current authenticated user

    Usage:
        @app.get("/me")
        def get_me(user: User = Depends(get_current_user)):
            return user
    """
    from crm_access.models import User

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(credentials.credentials)

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    user = db.query(User).filter(User.id == str(user_id)).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled"
        )

    return user


def require_permission(resource: str, action: str):
    """
    Dependency factory to require a specific permission

    Usage:
        @app.get("/leads")
        def list_leads(
            user: User = Depends(require_permission("leads", "view_assigned"))
        ):
            ...
    """
    def permission_checker(
        user=Depends(get_current_user),
        service: PermissionService = Depends(get_permission_service)
    ):
        if not service.has_permission(user, resource, action):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions"
            )
        return user

    return permission_checker


def require_role(*roles: FixedRole):
    """
    Dependency factory to require one of several fixed roles

    Usage:
        @app.get("/superadmin")
        def superadmin_panel(user: User = Depends(require_role(FixedRole.SUPERADMIN))):
            ...
    """
    def role_checker(user=Depends(get_current_user)):
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role permissions"
            )
        return user

    return role_checker
