"""
API v1 routes.

Defines REST endpoints for registration, email verification and login.
Domain errors are translated to HTTP responses here; the error body is
always ``{"detail": <message>}`` with the domain's caller-safe message.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from authflow.api.dependencies import get_auth_service
from authflow.api.models import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    UserOut,
    VerifyCodeRequest,
)
from authflow.domain.auth import AuthService
from authflow.domain.exceptions import (
    AlreadyVerified,
    AuthError,
    CodeExpired,
    CodeInvalid,
    DuplicateEmail,
    InternalFailure,
    InvalidCredentials,
    NotFound,
    NotificationFailure,
    UnverifiedAccount,
    ValidationError,
)

router = APIRouter(tags=["v1"])

ERROR_STATUS: dict[type[AuthError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    DuplicateEmail: status.HTTP_409_CONFLICT,
    NotificationFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
    NotFound: status.HTTP_404_NOT_FOUND,
    AlreadyVerified: status.HTTP_409_CONFLICT,
    CodeInvalid: status.HTTP_400_BAD_REQUEST,
    CodeExpired: status.HTTP_410_GONE,
    InvalidCredentials: status.HTTP_401_UNAUTHORIZED,
    UnverifiedAccount: status.HTTP_403_FORBIDDEN,
    InternalFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def to_http_exception(exc: AuthError) -> HTTPException:
    """Map a domain error onto an HTTPException with its safe message."""
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    message = exc.message if type(exc) in ERROR_STATUS else InternalFailure.default_message
    return HTTPException(status_code=status_code, detail=message)


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or malformed input"},
        409: {"model": ErrorResponse, "description": "Email already exists"},
        503: {"model": ErrorResponse, "description": "Verification email could not be sent"},
    },
    summary="Register a new account",
    description="Submit role, email and password. A 6-digit verification code "
    "valid for 10 minutes is sent to the email address.",
)
def register(
    request_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    """
    Register a new account and send a verification code.

    - **role**: "admin" or "user"
    - **email**: Email address to register
    - **password**: Account password
    """
    try:
        result = service.register(request_data.role, request_data.email, request_data.password)
    except AuthError as exc:
        raise to_http_exception(exc) from None
    return RegisterResponse(
        message="Registration successful! Please check your email for the verification code.",
        user_id=result.user_id,
    )


@router.post(
    "/verify",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing input or invalid code"},
        404: {"model": ErrorResponse, "description": "Account not found"},
        409: {"model": ErrorResponse, "description": "Email already verified"},
        410: {"model": ErrorResponse, "description": "Verification code expired"},
    },
    summary="Verify email with the one-time code",
)
def verify_code(
    request_data: VerifyCodeRequest,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """
    Verify account email ownership.

    - **userId**: Identifier returned by registration
    - **code**: 6-digit verification code from the email
    """
    try:
        service.verify_code(request_data.user_id, request_data.code)
    except AuthError as exc:
        raise to_http_exception(exc) from None
    return MessageResponse(message="Email verified successfully")


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing input"},
        401: {"model": ErrorResponse, "description": "Invalid email or password"},
        403: {"model": ErrorResponse, "description": "Email not verified"},
    },
    summary="Log in with email and password",
)
def login(
    request_data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Authenticate and return the account's public identity."""
    try:
        identity = service.login(request_data.email, request_data.password)
    except AuthError as exc:
        raise to_http_exception(exc) from None
    return LoginResponse(
        message="Login successful",
        user=UserOut(id=identity.id, email=identity.email, role=identity.role.value),
    )
