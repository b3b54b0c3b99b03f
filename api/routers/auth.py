"""
Auth API Endpoints.

Email/password login and token refresh.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_auth_service
from api.models import (
    ApiResponse,
    ErrorResponse,
    LoginData,
    LoginRequest,
    RefreshRequest,
    TokensData,
    TokensResponse,
    UserResponse,
)
from services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/auth/login",
    response_model=ApiResponse[LoginData],
    responses={401: {"model": ErrorResponse}},
    summary="Login",
)
def login(request: LoginRequest, service: AuthService = Depends(get_auth_service)):
    """
    Exchange email and password for an access/refresh token pair.

    Send the access token as `Authorization: Bearer <token>`.
    """
    result = service.login(str(request.email), request.password)
    return ApiResponse(
        data=LoginData(
            user=UserResponse.from_domain(result.user),
            tokens=TokensResponse.from_domain(result.tokens),
        )
    )


@router.post(
    "/auth/refresh",
    response_model=ApiResponse[TokensData],
    responses={401: {"model": ErrorResponse}},
    summary="Refresh Tokens",
)
def refresh(request: RefreshRequest, service: AuthService = Depends(get_auth_service)):
    tokens = service.refresh(request.refresh_token)
    return ApiResponse(data=TokensData(tokens=TokensResponse.from_domain(tokens)))
