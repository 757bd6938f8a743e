"""Authentication service: registration and credential exchange."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import AuthenticationError, ValidationError
from ..core.security import create_access_token, verify_password
from ..models.user import User, UserRole
from ..schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from ..schemas.user import CreateUserRequest
from ..schemas.user import User as UserSchema
from .user_service import UserService

logger = logging.getLogger(__name__)


class AuthService:
    """Service for issuing bearer tokens."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_service = UserService(db)

    async def register(self, request: RegisterRequest) -> AuthResponse:
        """
        Register a customer account and log it in.

        Raises:
            ValidationError: If the password confirmation does not match
            ConflictError: If the email is already registered
        """
        if request.password != request.confirm_password:
            raise ValidationError(
                detail="Passwords do not match",
                violations=[{"path": "confirm_password", "message": "must match password"}],
            )

        user = await self.user_service.create_user(
            CreateUserRequest(
                email=request.email,
                first_name=request.first_name,
                last_name=request.last_name,
                password=request.password,
                role=UserRole.CUSTOMER,
            )
        )

        logger.info("User registered", extra={"user_id": user.id})
        return self.issue_token(user)

    async def login(self, request: LoginRequest) -> AuthResponse:
        """
        Exchange email and password for a bearer token.

        Raises:
            AuthenticationError: If the credentials are wrong or the account is disabled
        """
        user = await self.user_service.get_user_by_email(request.email)
        if user is None or not verify_password(request.password, user.password_hash):
            logger.warning("Login failed - invalid credentials", extra={"email": request.email})
            raise AuthenticationError(detail="Invalid email or password")

        if not user.is_active:
            logger.warning("Login failed - account disabled", extra={"user_id": user.id})
            raise AuthenticationError(detail="Account is disabled")

        logger.info("User logged in", extra={"user_id": user.id})
        return self.issue_token(user)

    def issue_token(self, user: User) -> AuthResponse:
        token = create_access_token(
            user_id=user.id,
            email=user.email,
            name=user.full_name,
            role=user.role,
        )
        return AuthResponse(
            token=token,
            expires_in=settings.jwt_expiry_hours * 3600,
            user=UserSchema.model_validate(user),
        )
