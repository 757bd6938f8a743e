"""User router for account administration and profiles."""

import logging

from fastapi import APIRouter, HTTPException, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, DatabaseSession, RequiredAuth, ensure_self_or_admin, is_admin
from ..core.exceptions import ProblemDetailsException
from ..schemas.user import CreateUserRequest, UpdateUserRequest, User
from ..services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


def _user_response(user, status_code: int = 200, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=User.model_validate(user).model_dump(mode="json"),
        headers=headers
    )


@router.get("", response_model=list[User])
async def list_users(
    db: AsyncSession = DatabaseSession,
    current_user: dict = AdminAuth
) -> JSONResponse:
    """List every user."""
    users = await UserService(db).list_users()
    return JSONResponse(
        status_code=200,
        content=[User.model_validate(u).model_dump(mode="json") for u in users]
    )


@router.get("/profile", response_model=User)
async def get_profile(
    db: AsyncSession = DatabaseSession,
    current_user: dict = RequiredAuth
) -> JSONResponse:
    """Return the caller's own account."""
    user = await UserService(db).get_user_by_id_or_raise(current_user["user_id"])
    return _user_response(user)


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: int,
    db: AsyncSession = DatabaseSession,
    current_user: dict = RequiredAuth
) -> JSONResponse:
    """Get a user; customers may only read themselves."""
    ensure_self_or_admin(current_user, user_id, detail="You can only view your own account")
    user = await UserService(db).get_user_by_id_or_raise(user_id)
    return _user_response(user)


@router.post("", response_model=User, status_code=201)
async def create_user(
    request: CreateUserRequest,
    db: AsyncSession = DatabaseSession,
    current_user: dict = AdminAuth
) -> JSONResponse:
    """Create a user with any role."""
    try:
        user = await UserService(db).create_user(request)
        return _user_response(
            user,
            status_code=201,
            headers={"Location": f"{router.prefix}/{user.id}"}
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in user creation",
            extra={
                "email": request.email,
                "admin_user_id": current_user["user_id"],
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.put("/{user_id}", response_model=User)
async def update_user(
    user_id: int,
    request: UpdateUserRequest,
    db: AsyncSession = DatabaseSession,
    current_user: dict = RequiredAuth
) -> JSONResponse:
    """
    Update a user.

    Users may change their own names. Role and activation changes are
    applied only when an administrator makes the request.
    """
    ensure_self_or_admin(current_user, user_id, detail="You can only update your own account")

    try:
        user = await UserService(db).update_user(
            user_id,
            request,
            allow_privileged=is_admin(current_user)
        )
        return _user_response(user)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in user update",
            extra={
                "user_id": user_id,
                "requesting_user_id": current_user["user_id"],
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: int,
    db: AsyncSession = DatabaseSession,
    current_user: dict = AdminAuth
) -> Response:
    """Delete a user that owns no bookings."""
    try:
        await UserService(db).delete_user(user_id)
        return Response(status_code=204)

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in user deletion",
            extra={
                "user_id": user_id,
                "admin_user_id": current_user["user_id"],
                "error": str(e)
            },
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Internal server error") from e
