"""
Role-based access dependencies for FastAPI endpoints.
"""
import logging
from typing import Callable, List, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError as PydanticValidationError

from hrms.schemas.auth import CurrentUser, Role
from hrms.services import auth as auth_service

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> CurrentUser:
    """
    Extracts and validates the current user from the JWT token.
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    payload = auth_service.decode_access_token(credentials.credentials)

    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise _unauthorized("Could not validate credentials")

    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise _unauthorized("TOKEN_EXPIRED")

    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise _unauthorized("Invalid token type")

    if payload.get("sub") is None:
        logger.warning("Authentication failed: Missing subject in token")
        raise _unauthorized("Missing subject in token")

    try:
        return CurrentUser(
            sub=payload["sub"],
            role=payload.get("role", Role.EMPLOYEE.value),
            employee_id=payload.get("employee_id"),
            name=payload.get("name"),
        )
    except PydanticValidationError:
        logger.warning(f"Authentication failed: Unknown role {payload.get('role')!r}")
        raise _unauthorized("Invalid role in token")


def require_role(allowed_roles: List[Role]) -> Callable:
    """
    Dependency factory that checks if the user has one of the allowed roles.
    
    Usage:
        @router.get("/admin-only")
        def admin_endpoint(user: CurrentUser = Depends(require_role([Role.ADMIN]))):
            ...
    """
    def role_checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {[r.value for r in allowed_roles]}"
            )
        return current_user
    return role_checker


def _missing_profile() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Employee ID not found. Please contact HR to set up your employee profile.",
    )


def require_employee_profile(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Self-service endpoints need an employee id on the token."""
    if not current_user.employee_id:
        raise _missing_profile()
    return current_user


def _check_other_employee_access(current_user: CurrentUser, requested_employee_id: Optional[str]) -> None:
    if requested_employee_id and requested_employee_id != current_user.employee_id and not current_user.is_hr:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not authorized to view this employee's records",
        )


def resolve_employee_scope(current_user: CurrentUser, requested_employee_id: Optional[str] = None) -> Optional[str]:
    """
    Employee filter for list endpoints. HR roles may look at anyone, and
    without a filter see everyone (None); everyone else only themselves.
    """
    _check_other_employee_access(current_user, requested_employee_id)
    if requested_employee_id or current_user.is_hr:
        return requested_employee_id
    if not current_user.employee_id:
        raise _missing_profile()
    return current_user.employee_id


def resolve_single_employee(current_user: CurrentUser, requested_employee_id: Optional[str] = None) -> str:
    """Like resolve_employee_scope, but always names exactly one employee."""
    _check_other_employee_access(current_user, requested_employee_id)
    target = requested_employee_id or current_user.employee_id
    if not target:
        raise _missing_profile()
    return target


def require_hr():
    """Shorthand for requiring an HR role."""
    return require_role([Role.ADMIN, Role.HR])


def require_approver():
    """Shorthand for roles that can decide leave requests."""
    return require_role([Role.ADMIN, Role.HR, Role.MANAGER])
