"""Authentication endpoints: register, login, refresh, logout and password reset."""

from fastapi import APIRouter, Body, Depends, Request, Response, status

from src.savemate.api.http.deps import (
    enforce_rate_limit,
    get_app_config,
    get_auth_service,
    get_identity,
)
from src.savemate.core.models.auth import (
    AccessTokenResponse,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    MeResponse,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from src.savemate.core.models.identity import Identity, TokenPair
from src.savemate.core.services import AuthService
from src.savemate.runtime.config.config_data import ConfigData

REFRESH_COOKIE = "refreshToken"
REFRESH_COOKIE_PATH = "/auth"

router = APIRouter(prefix="/auth", tags=["auth"])

limited = [Depends(enforce_rate_limit)]


def _set_refresh_cookie(response: Response, pair: TokenPair, config: ConfigData) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=pair.refresh_token,
        max_age=config.jwt.refresh_ttl_seconds,
        path=REFRESH_COOKIE_PATH,
        httponly=True,
        secure=config.app.environment == "production",
        samesite="lax",
    )


@router.post(
    "/register",
    response_model=AccessTokenResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=limited,
)
def register(
    payload: RegisterRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    config: ConfigData = Depends(get_app_config),
) -> AccessTokenResponse:
    pair = auth.register(payload.email, payload.password, payload.role)
    _set_refresh_cookie(response, pair, config)
    return AccessTokenResponse(access_token=pair.access_token)


@router.post("/login", response_model=AccessTokenResponse, dependencies=limited)
def login(
    payload: LoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    config: ConfigData = Depends(get_app_config),
) -> AccessTokenResponse:
    pair = auth.login(payload.email, payload.password)
    _set_refresh_cookie(response, pair, config)
    return AccessTokenResponse(access_token=pair.access_token)


@router.post("/refresh", response_model=AccessTokenResponse, dependencies=limited)
def refresh(
    request: Request,
    response: Response,
    payload: RefreshRequest | None = Body(default=None),
    auth: AuthService = Depends(get_auth_service),
    config: ConfigData = Depends(get_app_config),
) -> AccessTokenResponse:
    """Rotate the token pair; the refresh token comes from the cookie or the body."""
    token = request.cookies.get(REFRESH_COOKIE)
    if not token and payload is not None:
        token = payload.refresh_token
    pair = auth.refresh(token)
    _set_refresh_cookie(response, pair, config)
    return AccessTokenResponse(access_token=pair.access_token)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(get_identity)],
)
def logout(response: Response) -> Response:
    """Drop the refresh cookie. Needs a valid access token."""
    response.delete_cookie(REFRESH_COOKIE, path=REFRESH_COOKIE_PATH)
    response.status_code = status.HTTP_204_NO_CONTENT
    return response


@router.post("/forgot", response_model=ForgotPasswordResponse, dependencies=limited)
async def forgot_password(
    payload: ForgotPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
    config: ConfigData = Depends(get_app_config),
) -> ForgotPasswordResponse:
    """Always answers ok so the response never reveals whether the account exists."""
    token = await auth.forgot_password(payload.email)
    if token is not None and config.app.reveal_reset_token:
        return ForgotPasswordResponse(reset_token=token)
    return ForgotPasswordResponse()


@router.post("/reset", response_model=ForgotPasswordResponse, dependencies=limited)
async def reset_password(
    payload: ResetPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
) -> ForgotPasswordResponse:
    await auth.reset_password(payload.token, payload.new_password)
    return ForgotPasswordResponse()


@router.get("/me", response_model=MeResponse)
def me(
    identity: Identity = Depends(get_identity),
    auth: AuthService = Depends(get_auth_service),
) -> MeResponse:
    user, business_id = auth.me(identity)
    return MeResponse(id=user.id, email=user.email, role=user.role, business_id=business_id)
