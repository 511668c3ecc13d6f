# registrar/api/routers/auth.py - Staff login and identity
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from typing import Dict, Any
import logging

from registrar.core.db import get_db
from registrar.api.deps.auth import get_current_user
from registrar.services.auth_service import AuthService
from registrar.schemas.auth import LoginIn, LoginOut, UserOut, TokenUser

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/login", response_model=LoginOut)
def login(
    credentials: LoginIn,
    request: Request,
    db: Session = Depends(get_db)
):
    """Authenticate a staff member and return an access token"""
    auth_service = AuthService(db, request.app.state.password_manager)
    user = auth_service.authenticate(credentials.username, credentials.password)

    if user is None:
        logger.warning(f"Failed login attempt for {credentials.username!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password"
        )

    access_token = request.app.state.token_manager.create_access_token(
        subject=str(user.id),
        username=user.username,
        role=user.role,
    )

    return LoginOut(
        access_token=access_token,
        token_type="bearer",
        user=UserOut.model_validate(user),
    )


@router.get("/me", response_model=TokenUser)
def me(ctx: Dict[str, Any] = Depends(get_current_user)):
    """Identity carried by the presented token"""
    return ctx["user"]
