# shiftboard/auth/auth.py
"""
Employee identity from bearer tokens.

Tokens are issued by the employer's identity service; this service only
verifies them. The token subject is the employee id.
"""

import os
import warnings
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from shiftboard.core.config import IS_PRODUCTION
from shiftboard.core.models import EmployeeContext

DEFAULT_SECRET_KEY = "your-secret-key-change-this-in-production"
SECRET_KEY = os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY)
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 12

if SECRET_KEY == DEFAULT_SECRET_KEY:
    if IS_PRODUCTION:
        raise RuntimeError("SECRET_KEY must be set in production!")
    warnings.warn(
        "Using default SECRET_KEY! Set SECRET_KEY environment variable for production.",
        RuntimeWarning,
        stacklevel=2,
    )

security = HTTPBearer(auto_error=False)


def create_access_token(
    employee_id: str,
    display_name: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed token for an employee."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": employee_id, "exp": expire}
    if display_name:
        to_encode["name"] = display_name
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict | None:
    """Decode and validate a token, None if invalid or expired."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


def employee_from_token(token: str) -> EmployeeContext | None:
    payload = decode_token(token)
    if payload is None:
        return None
    employee_id = payload.get("sub")
    if not employee_id:
        return None
    return EmployeeContext(employee_id=str(employee_id), display_name=payload.get("name"))


async def get_current_employee(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> EmployeeContext:
    """Current employee from the Authorization header. Raises 401 otherwise."""
    employee = employee_from_token(credentials.credentials) if credentials else None
    if employee is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    request.state.employee = employee
    return employee
