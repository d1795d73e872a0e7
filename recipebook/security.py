"""HTTP Basic authentication backed by the users table.

Handlers that need a caller depend on ``get_current_user``; it resolves the
credentials to a ``User`` or rejects the request before the handler runs.
"""
import logging
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from . import crud, models
from .config import get_settings
from .db import get_db
from .errors import NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)

basic_auth = HTTPBasic(auto_error=False)

# bcrypt only looks at the first 72 bytes; newer releases raise instead of truncating
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def hash_password(password: str) -> str:
    """Hash a password with bcrypt and a fresh salt."""
    salt = bcrypt.gensalt(rounds=get_settings().bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        logger.error("Stored password hash is malformed")
        return False


def load_user_by_username(db: Session, username: str) -> models.User:
    logger.info("Searching for user with username: %s", username)
    user = crud.get_user(db, username)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_current_user(
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
    db: Session = Depends(get_db),
) -> models.User:
    if credentials is None:
        raise UnauthorizedError("Full authentication is required to access this resource")
    try:
        user = load_user_by_username(db, credentials.username)
    except NotFoundError:
        logger.warning("Rejected credentials for unknown user %s", credentials.username)
        raise UnauthorizedError("Bad credentials")
    if not verify_password(credentials.password, user.password):
        logger.warning("Rejected credentials for user %s", credentials.username)
        raise UnauthorizedError("Bad credentials")
    return user
