# registrar/api/deps/auth.py - Bearer token authentication and role checks
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Dict, Any, List, Optional
from uuid import UUID

from registrar.core.security import TokenManager
from registrar.models.user import UserRole
from registrar.schemas.auth import TokenUser

security = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """
    Verify the bearer token and return the identity it carries.
    Returns: {"user": TokenUser, "claims": dict}

    A missing token is a 401; a token that fails verification is a 403.
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_manager: TokenManager = request.app.state.token_manager
    claims = token_manager.decode_token(credentials.credentials)

    try:
        user_id = UUID(claims["sub"])
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid token"
        )

    user = TokenUser(id=user_id, username=claims["username"], role=claims["role"])
    request.state.user = user

    return {
        "user": user,
        "claims": claims
    }


def require_roles(required_roles: List[str]):
    """
    Create a dependency that requires specific roles.
    Usage: @router.post("/x", dependencies=[Depends(require_roles(["admin", "accountant"]))])
    """
    def role_checker(ctx=Depends(get_current_user)):
        user = ctx["user"]
        if user.role not in required_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {required_roles}"
            )
        return ctx
    return role_checker


def require_accountant(ctx=Depends(require_roles([UserRole.ACCOUNTANT.value, UserRole.ADMIN.value]))):
    """Require accountant or admin role"""
    return ctx
