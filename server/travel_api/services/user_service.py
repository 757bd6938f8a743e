"""User service for account management operations."""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError
from ..core.security import hash_password
from ..models.booking import Booking
from ..models.user import User, UserRole
from ..schemas.user import CreateUserRequest, UpdateUserRequest

logger = logging.getLogger(__name__)


class UserService:
    """Service for user-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_user(self, request: CreateUserRequest) -> User:
        """
        Create a new user with a hashed password.

        Raises:
            ConflictError: If a user with the same email already exists
        """
        email = request.email.strip().lower()

        existing_user = await self.get_user_by_email(email)
        if existing_user:
            logger.warning(
                "User creation failed - email already registered",
                extra={"email": email, "existing_user_id": existing_user.id}
            )
            raise ConflictError(
                detail=f"User with email '{email}' already exists",
                code="EMAIL_TAKEN",
            )

        user = User(
            email=email,
            first_name=request.first_name,
            last_name=request.last_name,
            password_hash=hash_password(request.password),
            role=UserRole(request.role).value,
            is_active=True,
        )

        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "User creation failed due to integrity constraint",
                extra={"email": email, "error": str(e)}
            )
            raise ConflictError(
                detail=f"User with email '{email}' already exists",
                code="EMAIL_TAKEN",
            )

        logger.info(
            "User created successfully",
            extra={"user_id": user.id, "email": user.email, "role": user.role}
        )

        return user

    async def update_user(
        self,
        user_id: int,
        request: UpdateUserRequest,
        allow_privileged: bool = False,
    ) -> User:
        """
        Update a user's names, and role and activation when privileged.

        Args:
            user_id: User to update
            request: Fields to change; omitted fields keep their value
            allow_privileged: Whether role and is_active may be changed

        Raises:
            NotFoundError: If user not found
        """
        user = await self.get_user_by_id_or_raise(user_id)

        if request.first_name is not None:
            user.first_name = request.first_name
        if request.last_name is not None:
            user.last_name = request.last_name
        if allow_privileged:
            if request.role is not None:
                user.role = UserRole(request.role).value
            if request.is_active is not None:
                user.is_active = request.is_active

        await self.db.commit()
        await self.db.refresh(user)

        logger.info("User updated", extra={"user_id": user_id})
        return user

    async def delete_user(self, user_id: int) -> None:
        """
        Delete a user that owns no bookings.

        Raises:
            NotFoundError: If user not found
            ConflictError: If the user still owns bookings
        """
        user = await self.get_user_by_id_or_raise(user_id)

        stmt = select(func.count(Booking.id)).where(Booking.user_id == user_id)
        booking_count = (await self.db.execute(stmt)).scalar() or 0
        if booking_count:
            raise ConflictError(
                detail=f"User {user_id} has {booking_count} bookings and cannot be deleted",
                conflicting_resource={"user_id": user_id, "booking_count": booking_count},
                code="USER_HAS_BOOKINGS",
            )

        await self.db.delete(user)
        await self.db.commit()
        logger.info("User deleted", extra={"user_id": user_id})

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return list(result.scalars())

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_by_id_or_raise(self, user_id: int) -> User:
        user = await self.get_user_by_id(user_id)
        if not user:
            logger.warning("User not found", extra={"user_id": user_id})
            raise NotFoundError(resource_type="user", resource_id=user_id)
        return user
