# registrar/core/security.py - Authentication utilities (JWT, password hashing)
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional, Union
import secrets

import jwt
from passlib.context import CryptContext
from fastapi import HTTPException, status

from registrar.core.config import Settings

MAX_FILENAME_LENGTH = 255


class SecurityError(Exception):
    """Raised when a token or a password hash cannot be produced"""
    pass


class TokenManager:
    """Issues and verifies signed, time-limited staff access tokens.

    A token carries the subject id, the username and the role of the staff
    member it was issued to.
    """

    def __init__(self, settings: Settings):
        self.secret_key = settings.JWT_SECRET
        self.algorithm = settings.JWT_ALGORITHM
        self.issuer = settings.JWT_ISSUER
        self.audience = settings.JWT_AUDIENCE
        self.access_token_expire_minutes = settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES

    def create_access_token(
        self,
        subject: Union[str, Any],
        username: str,
        role: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create a JWT access token.

        Args:
            subject: Token subject (the user ID)
            username: Login name of the user
            role: Role of the user
            expires_delta: Custom expiration time

        Returns:
            Encoded JWT token string

        Raises:
            SecurityError: If token creation fails
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None
                        else timedelta(minutes=self.access_token_expire_minutes))

        payload = {
            "sub": str(subject),
            "username": username,
            "role": role,
            "iat": now,
            "exp": expire,
            "iss": self.issuer,
            "aud": self.audience,
            "type": "access",
            "jti": secrets.token_hex(16),
        }

        try:
            return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        except jwt.PyJWTError as e:
            raise SecurityError(f"Failed to create access token: {e}")

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate a JWT access token.

        Args:
            token: JWT token string

        Returns:
            Dictionary containing token claims

        Raises:
            HTTPException: 403 if the token is invalid, expired or incomplete
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Token has expired",
            )
        except jwt.InvalidTokenError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid token",
            )

        if payload.get("type") != "access" or not payload.get("username") or not payload.get("role"):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid token",
            )

        return payload


class PasswordManager:
    """Manages password hashing and verification"""

    def __init__(self, rounds: int = 12):
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
            bcrypt__ident="2b"
        )

    def hash_password(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        if not password:
            raise SecurityError("Password cannot be empty")

        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Returns:
            True if password matches, False otherwise
        """
        if not plain_password or not hashed_password:
            return False

        try:
            return self.pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            # malformed or unknown hash format
            return False


def sanitize_filename(filename: str) -> str:
    """Make a client-supplied filename safe to store and display.

    Path separators become underscores, control characters are dropped and
    the name is capped at 255 characters with its extension preserved.
    """
    cleaned = "".join(
        "_" if c in "/\\" else c
        for c in filename or ""
        if ord(c) >= 32
    )

    if len(cleaned) > MAX_FILENAME_LENGTH:
        stem, dot, ext = cleaned.rpartition(".")
        if dot:
            cleaned = stem[:MAX_FILENAME_LENGTH - len(ext) - 1] + dot + ext
        else:
            cleaned = cleaned[:MAX_FILENAME_LENGTH]

    return cleaned.strip(". ") or "unnamed_file"


__all__ = [
    "TokenManager", "PasswordManager", "SecurityError", "sanitize_filename",
]
