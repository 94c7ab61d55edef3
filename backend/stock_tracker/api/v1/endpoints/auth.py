"""
Stock Portfolio Tracker - Authentication Endpoints
"""
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from stock_tracker.dependencies import (
    get_user_repository,
    get_current_active_user,
)
from stock_tracker.db.repositories.user import UserRepository
from stock_tracker.db.models.user import User
from stock_tracker.schemas.user import (
    UserCreate,
    UserLogin,
    User as UserSchema,
    UserWithToken,
    Token,
    RefreshTokenRequest,
)
from stock_tracker.core.security import (
    create_access_token,
    create_refresh_token,
    verify_token,
)
from stock_tracker.utils.exceptions import (
    InvalidCredentialsError,
    UserAlreadyExistsError,
    raise_forbidden,
    raise_unauthorized,
)

router = APIRouter()


def _issue_tokens(user_id: int) -> Token:
    access_token, _ = create_access_token(subject=user_id)
    refresh_token, _ = create_refresh_token(subject=user_id)
    return Token(access_token=access_token, refresh_token=refresh_token)


async def _login(user_repo: UserRepository, email_or_username: str, password: str) -> Token:
    user = await user_repo.authenticate(
        email_or_username=email_or_username,
        password=password
    )
    if not user:
        raise InvalidCredentialsError()

    if not user.is_active:
        raise_forbidden("Inactive user account")

    await user_repo.update_last_login(user)
    return _issue_tokens(user.id)


@router.post(
    "/register",
    response_model=UserWithToken,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    user_data: UserCreate,
    user_repo: UserRepository = Depends(get_user_repository)
) -> UserWithToken:
    """
    Register a new user.

    - **username**: Username (3-50 chars, unique)
    - **email**: Valid email address (unique)
    - **phone**: Optional phone number
    - **password**: Password (min 6 chars)
    """
    existing_user = await user_repo.get_by_email_or_username(
        email=user_data.email,
        username=user_data.username
    )
    if existing_user:
        if existing_user.username == user_data.username:
            raise UserAlreadyExistsError("Username already exists")
        raise UserAlreadyExistsError("Email already registered")

    user = await user_repo.create(user_data)
    tokens = _issue_tokens(user.id)

    return UserWithToken(
        **UserSchema.model_validate(user).model_dump(),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post(
    "/login",
    response_model=Token,
    summary="Login and get access token",
)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    user_repo: UserRepository = Depends(get_user_repository)
) -> Token:
    """
    OAuth2 compatible token login.

    - **username**: Username or email address
    - **password**: User's password
    """
    return await _login(user_repo, form_data.username, form_data.password)


@router.post(
    "/login/json",
    response_model=Token,
    summary="Login with JSON body",
)
async def login_json(
    credentials: UserLogin,
    user_repo: UserRepository = Depends(get_user_repository)
) -> Token:
    """JSON login endpoint (alternative to the OAuth2 form)."""
    return await _login(user_repo, credentials.email_or_username, credentials.password)


@router.post("/refresh", response_model=Token)
async def refresh_token(
    data: RefreshTokenRequest,
    user_repo: UserRepository = Depends(get_user_repository)
) -> Token:
    """Exchange a refresh token for a new token pair."""
    user_id = verify_token(data.refresh_token, token_type="refresh")
    user = await user_repo.get_by_id(int(user_id)) if user_id and user_id.isdigit() else None
    if user is None or not user.is_active:
        raise_unauthorized("Invalid refresh token")
    return _issue_tokens(user.id)


@router.get("/me", response_model=UserSchema)
async def read_current_user(
    current_user: User = Depends(get_current_active_user)
) -> User:
    """Get the logged-in user's profile."""
    return current_user
