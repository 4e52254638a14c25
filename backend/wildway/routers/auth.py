"""User authentication endpoints (signup, login, logout, password flows)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status

from wildway.core.config import Settings
from wildway.core.deps import (
    LOGGED_OUT_SENTINEL,
    AuthContext,
    get_mailer,
    get_settings,
    get_token_service,
    get_user_store,
    protect,
)
from wildway.core.rate_limit import rate_limit
from wildway.core.security import TokenService
from wildway.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
    StatusResponse,
)
from wildway.schemas.user import LoginRequest, SignupRequest, UpdatePasswordRequest, UserData, UserOut, UserResponse
from wildway.services import auth as auth_service
from wildway.services.email import Mailer
from wildway.services.users import UserStore

router = APIRouter(dependencies=[Depends(rate_limit("auth"))])

RESET_EMAIL_SENT_MESSAGE = "Token sent to email!"
LOGOUT_COOKIE_SECONDS = 10


def _is_secure_request(request: Request, settings: Settings) -> bool:
    if settings.is_production:
        return True
    forwarded_proto = request.headers.get("x-forwarded-proto", "").split(",")[0].strip().lower()
    return request.url.scheme == "https" or forwarded_proto == "https"


def _set_session_cookie(response: Response, request: Request, settings: Settings, token: str) -> None:
    response.set_cookie(
        settings.COOKIE_NAME,
        token,
        httponly=True,
        samesite="lax",
        secure=_is_secure_request(request, settings),
        path="/",
        max_age=settings.JWT_COOKIE_EXPIRES_DAYS * 24 * 60 * 60,
    )


def _session_response(
    session: auth_service.AuthSession,
    request: Request,
    response: Response,
    settings: Settings,
) -> AuthResponse:
    _set_session_cookie(response, request, settings, session.token)
    return AuthResponse(token=session.token, data=UserData(user=UserOut.model_validate(session.user)))


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupRequest,
    request: Request,
    response: Response,
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    session = auth_service.signup(store, tokens, payload)
    return _session_response(session, request, response, settings)


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    session = auth_service.login(store, tokens, payload.email, payload.password)
    return _session_response(session, request, response, settings)


@router.post("/logout", response_model=StatusResponse)
def logout(request: Request, response: Response, settings: Settings = Depends(get_settings)) -> StatusResponse:
    response.set_cookie(
        settings.COOKIE_NAME,
        LOGGED_OUT_SENTINEL,
        httponly=True,
        samesite="lax",
        secure=_is_secure_request(request, settings),
        path="/",
        max_age=LOGOUT_COOKIE_SECONDS,
    )
    return StatusResponse()


@router.get("/me", response_model=UserResponse)
def get_current_user(auth: AuthContext = Depends(protect)) -> UserResponse:
    return UserResponse(data=UserData(user=UserOut.model_validate(auth.user)))


@router.post("/forgotPassword", response_model=MessageResponse)
def forgot_password(
    payload: ForgotPasswordRequest,
    request: Request,
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
    mailer: Mailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    auth_service.request_password_reset(
        store,
        tokens,
        mailer,
        email=payload.email,
        build_reset_url=lambda raw: str(request.url_for("reset_password", token=raw)),
        reveal_unknown_email=settings.PASSWORD_RESET_REVEAL_UNKNOWN_EMAIL,
    )
    return MessageResponse(message=RESET_EMAIL_SENT_MESSAGE)


@router.patch(
    "/resetPassword/{token}",
    name="reset_password",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
def reset_password(
    token: str,
    payload: ResetPasswordRequest,
    request: Request,
    response: Response,
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    session = auth_service.reset_password(store, tokens, token, payload.password)
    return _session_response(session, request, response, settings)


@router.patch("/updateMyPassword", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def update_my_password(
    payload: UpdatePasswordRequest,
    request: Request,
    response: Response,
    auth: AuthContext = Depends(protect),
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> AuthResponse:
    session = auth_service.update_password(
        store,
        tokens,
        auth.user,
        payload.password_current,
        payload.password,
    )
    return _session_response(session, request, response, settings)
