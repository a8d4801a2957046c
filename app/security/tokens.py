import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, TypedDict

from jose import jwt, JWTError

# ==========================================================
# 🔧 Configuration : paramètres de génération/validation JWT
# ==========================================================

@dataclass(frozen=True)
class JWTSettings:
    """
    Configuration des tokens JWT.

    - `secret` : clé secrète pour signer/valider les tokens
    - `issuer` : émetteur (utilisé dans le payload et vérifié au décodage)
    - `algorithm` : algo de signature (HS256 recommandé)
    - `access_ttl` : durée de vie d’un access token
    - `refresh_ttl` : durée de vie d’un refresh token
    """
    secret: str
    issuer: str = "board-api"
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=60)
    refresh_ttl: timedelta = timedelta(days=30)


class InvalidToken(Exception):
    """Token absent, mal signé, expiré ou du mauvais type."""
    pass


# ==========================================================
# 🧱 Types
# ==========================================================

class TokenPair(TypedDict):
    access_token: str
    refresh_token: str
    token_type: str     # "bearer"
    expires_in: int     # durée de vie de l'access token (en secondes)

class IdentityClaims(TypedDict):
    user_id: int
    email: str
    role: str           # "user" | "admin" | "master"
    display_name: str

class DecodedToken(TypedDict, total=False):
    iss: str
    sub: str            # identifiant du compte
    email: str
    role: str
    display_name: str
    typ: str            # "access" | "refresh"
    jti: str
    iat: int
    exp: int


# ==========================================================
# 🧩 Fonctions utilitaires
# ==========================================================

def _now() -> datetime:
    """Renvoie l'heure UTC actuelle."""
    return datetime.now(timezone.utc)

def new_jti() -> str:
    """Crée un identifiant unique pour un token."""
    return str(uuid.uuid4())


def _build_payload(claims: IdentityClaims, *, typ: str, jti: str, ttl: timedelta, issuer: str) -> DecodedToken:
    now = _now()
    return {
        "iss": issuer,
        "sub": str(claims["user_id"]),
        "email": claims["email"],
        "role": claims["role"],
        "display_name": claims["display_name"],
        "typ": typ,
        "jti": jti,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }


# ==========================================================
# 🎟️ Génération des tokens
# ==========================================================

def create_access_token(*, claims: IdentityClaims, settings: JWTSettings) -> str:
    """
    Crée un access token JWT portant l'identité (id, email, rôle, nom affiché).
    """
    payload = _build_payload(
        claims, typ="access", jti=new_jti(), ttl=settings.access_ttl, issuer=settings.issuer
    )
    return jwt.encode(payload, settings.secret, algorithm=settings.algorithm)


def create_refresh_token(*, claims: IdentityClaims, jti: str, settings: JWTSettings) -> str:
    """
    Crée un refresh token JWT long (par défaut 30 jours).
    Le JTI est fourni pour être stocké côté serveur.
    """
    payload = _build_payload(
        claims, typ="refresh", jti=jti, ttl=settings.refresh_ttl, issuer=settings.issuer
    )
    return jwt.encode(payload, settings.secret, algorithm=settings.algorithm)


# ==========================================================
# 🔍 Décodage / Validation
# ==========================================================

def decode_token(token: str, settings: JWTSettings, *, expected_typ: Optional[str] = None) -> DecodedToken:
    """
    Décode et valide un token JWT (signature + expiration + émetteur).
    Lève InvalidToken si le token est illisible, expiré, ou si son `typ`
    ne correspond pas à `expected_typ`.
    """
    if not token:
        raise InvalidToken("Missing token")
    try:
        decoded = jwt.decode(
            token,
            settings.secret,
            algorithms=[settings.algorithm],
            issuer=settings.issuer,
            options={"verify_aud": False},
        )
    except JWTError as e:
        raise InvalidToken(str(e)) from e

    if expected_typ is not None and decoded.get("typ") != expected_typ:
        raise InvalidToken("Invalid token type")
    if not decoded.get("sub") or not decoded.get("jti"):
        raise InvalidToken("Malformed token")
    return decoded  # type: ignore[return-value]


# ==========================================================
# 🪙 Utilitaire pratique pour générer un couple complet
# ==========================================================

def mint_token_pair(*, claims: IdentityClaims, settings: JWTSettings, jti: Optional[str] = None) -> TokenPair:
    """
    Génère un couple (access_token + refresh_token) cohérent.

    ⚠️ Le refresh_token est émis avec le JTI fourni (ou un nouveau JTI aléatoire) :
       il doit être enregistré via le repository côté serveur pour être révocable.
    """
    access_token = create_access_token(claims=claims, settings=settings)
    refresh_token = create_refresh_token(
        claims=claims,
        jti=jti or new_jti(),
        settings=settings,
    )

    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "expires_in": int(settings.access_ttl.total_seconds()),
    }
