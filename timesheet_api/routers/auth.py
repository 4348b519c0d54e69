"""Auth router - resolves the calling user from the bearer token."""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from timesheet_api.models.user import Caller
from timesheet_api.utils.auth import verify_access_token


router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)


async def get_current_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Caller:
    """
    Dependency to get the current caller from the JWT token.

    Args:
        credentials: HTTP bearer credentials

    Returns:
        Caller with user ID and role

    Raises:
        HTTPException: If token is missing or invalid (401)
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        return verify_access_token(credentials.credentials)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )


@router.get("/me", response_model=Caller)
async def get_me(caller: Caller = Depends(get_current_caller)):
    """Get the authenticated caller's identity and role."""
    return caller
