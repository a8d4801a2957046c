from fastapi import APIRouter, Depends, Cookie, Response, status
from typing import Optional

from app.api.v1.dependencies import (
    get_auth_service,
    get_user_service,
    get_current_account,
    get_client_ip_and_ua,
)
from app.core.config import settings
from app.core.errors import UnauthorizedError
from app.db.models.accounts import Account
from app.features.authentication.services import AuthService
from app.features.authentication.schemas import (
    SignUpIn,
    SignUpOut,
    SignInIn,
    SignInOut,
    TokenPairOut,
    RefreshIn,
    LogoutIn,
    ChangePasswordIn,
)
from app.features.users.schemas import AccountOut, ProfileUpdateIn
from app.features.users.services import UserService
from app.security.rate_limit import limit_auth

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
    responses={404: {"description": "Not Found"}},
)


def _set_refresh_cookie(response: Response, refresh_token: str) -> None:
    # Place le refresh token en cookie httpOnly
    response.set_cookie(
        key=settings.AUTH_REFRESH_COOKIE_NAME,
        value=refresh_token,
        httponly=True,
        samesite=settings.AUTH_COOKIE_SAMESITE,
        secure=settings.AUTH_COOKIE_SECURE,
        max_age=settings.AUTH_COOKIE_MAX_AGE,
        path=settings.AUTH_COOKIE_PATH,
    )

# -----------------------------
# Sign-up
# -----------------------------
@router.post(
    "/sign-up",
    summary="Créer un compte",
    status_code=status.HTTP_201_CREATED,
    response_model=SignUpOut,
    responses={409: {"description": "Email déjà utilisé"}},
)
def sign_up(payload: SignUpIn, svc: AuthService = Depends(get_auth_service)):
    return svc.sign_up(payload)

# -----------------------------
# Sign-in
# -----------------------------
@router.post(
    "/sign-in",
    summary="Se connecter",
    description="Retourne un couple access/refresh et le profil. Le refresh est aussi posé en cookie httpOnly.",
    response_model=SignInOut,
    dependencies=[Depends(limit_auth)],
    responses={401: {"description": "Email ou mot de passe invalide"}, 429: {"description": "Trop d'essais"}},
)
def sign_in(
    payload: SignInIn,
    response: Response,
    svc: AuthService = Depends(get_auth_service),
    client_ctx=Depends(get_client_ip_and_ua),
):
    out = svc.sign_in(payload, ip=client_ctx.ip, user_agent=client_ctx.user_agent)
    _set_refresh_cookie(response, out.refresh_token)
    return out

# -----------------------------
# Refresh (rotation)
# -----------------------------
@router.post(
    "/refresh",
    summary="Renouveler les tokens (rotation)",
    description="Lit le refresh dans le body **ou** dans le cookie httpOnly.",
    response_model=TokenPairOut,
    dependencies=[Depends(limit_auth)],
)
def refresh(
    response: Response,
    payload: Optional[RefreshIn] = None,
    refresh_cookie: Optional[str] = Cookie(default=None, alias=settings.AUTH_REFRESH_COOKIE_NAME),
    svc: AuthService = Depends(get_auth_service),
    client_ctx=Depends(get_client_ip_and_ua),
):
    # Priorité payload > cookie (permet aussi d'appeler depuis un client non-navigateur)
    refresh_token = (payload.refresh_token if payload else None) or refresh_cookie
    if not refresh_token:
        raise UnauthorizedError("Missing refresh token", code="MISSING_TOKEN")

    pair = svc.refresh(
        RefreshIn(refresh_token=refresh_token),
        ip=client_ctx.ip,
        user_agent=client_ctx.user_agent,
    )
    _set_refresh_cookie(response, pair.refresh_token)
    return pair

# -----------------------------
# Logout
# -----------------------------
@router.post(
    "/logout",
    summary="Se déconnecter (révocation du refresh)",
    status_code=status.HTTP_204_NO_CONTENT,
)
def logout(
    response: Response,
    payload: Optional[LogoutIn] = None,
    refresh_cookie: Optional[str] = Cookie(default=None, alias=settings.AUTH_REFRESH_COOKIE_NAME),
    svc: AuthService = Depends(get_auth_service),
):
    refresh_token = (payload.refresh_token if payload else None) or refresh_cookie
    if refresh_token:
        svc.log_out(LogoutIn(refresh_token=refresh_token))
    # Supprime le cookie côté client
    response.delete_cookie(key=settings.AUTH_REFRESH_COOKIE_NAME, path=settings.AUTH_COOKIE_PATH)
    return None

# -----------------------------
# Me (profil courant)
# -----------------------------
@router.get(
    "/me",
    summary="Récupérer l'utilisateur courant",
    response_model=AccountOut,
    responses={
        200: {"description": "Utilisateur courant"},
        401: {"description": "Token invalide ou expiré"},
    },
)
def me(
    account: Account = Depends(get_current_account),
    user_svc: UserService = Depends(get_user_service),
):
    return user_svc.get_profile(account.id)


@router.put(
    "/me",
    summary="Mettre à jour son profil",
    response_model=AccountOut,
)
def update_me(
    payload: ProfileUpdateIn,
    account: Account = Depends(get_current_account),
    user_svc: UserService = Depends(get_user_service),
):
    return user_svc.update_profile(account.id, payload)

# -----------------------------
# Changer le mot de passe
# -----------------------------
@router.post(
    "/change-password",
    summary="Changer le mot de passe",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        204: {"description": "Mot de passe changé"},
        401: {"description": "Ancien mot de passe invalide ou token invalide"},
    },
)
def change_password(
    payload: ChangePasswordIn,
    account: Account = Depends(get_current_account),
    svc: AuthService = Depends(get_auth_service),
):
    svc.change_password(account_id=account.id, payload=payload)
    return None
