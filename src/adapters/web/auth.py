"""Staff login backed by signed session cookies."""

import sys
from typing import Dict, Optional

import bcrypt
from fastapi import APIRouter, Request
from pydantic import BaseModel

from src.config import StaffConfig
from src.domain.errors import DashboardError, ValidationError

DEV_USERNAME = "staff"
DEV_PASSWORD = "staff123"

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


def _log(msg: str):
    print(msg, file=sys.stderr)


class NotAuthenticated(DashboardError):
    status_code = 401


class InvalidCredentials(DashboardError):
    status_code = 401


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class StaffDirectory:
    """Username -> bcrypt hash lookup.

    Without configured credentials a development account is hashed on first use.
    """

    def __init__(self, staff: StaffConfig):
        self._staff = staff
        self._users: Optional[Dict[str, bytes]] = None

    def users(self) -> Dict[str, bytes]:
        if self._users is None:
            if self._staff.is_configured:
                self._users = {self._staff.username: self._staff.password_hash.encode("utf-8")}
            else:
                _log(
                    f"STAFF_USERNAME/STAFF_PASSWORD_HASH not set, "
                    f"using development account '{DEV_USERNAME}'"
                )
                self._users = {DEV_USERNAME: hash_password(DEV_PASSWORD).encode("utf-8")}
            _log("Staff authentication initialized")
        return self._users

    def verify(self, username: str, password: str) -> bool:
        """Check a password. Raises ValueError if the stored hash is malformed."""
        hashed = self.users().get(username)
        if hashed is None:
            return False
        return bcrypt.checkpw(_password_bytes(password), hashed)


def require_staff(request: Request) -> str:
    """FastAPI dependency: the logged-in staff username, or 401."""
    if request.session.get("authenticated"):
        return request.session.get("username", "")
    raise NotAuthenticated("Authentication required")


auth_router = APIRouter(prefix="/api", tags=["auth"])


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


@auth_router.post("/login")
async def login(req: LoginRequest, request: Request):
    if not req.username or not req.password:
        raise ValidationError("Username and password required")

    staff: StaffDirectory = request.app.state.staff
    try:
        valid = staff.verify(req.username, req.password)
    except ValueError as e:
        _log(f"Login error: {e}")
        raise DashboardError("Login failed") from e
    if not valid:
        raise InvalidCredentials("Invalid credentials")

    request.session["authenticated"] = True
    request.session["username"] = req.username
    _log(f"Staff login: {req.username}")
    return {"success": True, "username": req.username}


@auth_router.post("/logout")
async def logout(request: Request):
    request.session.clear()
    return {"success": True}


@auth_router.get("/auth-status")
async def auth_status(request: Request):
    return {
        "authenticated": bool(request.session.get("authenticated")),
        "username": request.session.get("username"),
    }
