"""User endpoints."""

from fastapi import APIRouter, HTTPException, status

from classroom.core.enrolment import enroll_user
from classroom.core.models import Role
from classroom.core.repositories import RepositoryError
from classroom.web.dependencies import get_web_context
from classroom.web.schemas import EnrollRequest, UserResponse

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserResponse)
async def enroll(request: EnrollRequest) -> UserResponse:
    """Register a user on first sign-in; known users keep their role."""
    ctx = get_web_context()
    try:
        context = await enroll_user(ctx.users, ctx.progress, request.user_id, Role(request.role))
    except RepositoryError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return UserResponse(user_id=context.user_id, role=context.role.value)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str) -> UserResponse:
    """Get a user's role."""
    ctx = get_web_context()
    try:
        role = await ctx.users.get_role(user_id)
    except RepositoryError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    if role is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User '{user_id}' not found",
        )
    return UserResponse(user_id=user_id, role=role.value)
