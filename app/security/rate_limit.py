"""
➡️ But : Limiter le débit des appels par IP client (fenêtre fixe).

Deux limiteurs :

auth_limiter → sign-in / refresh (5 essais / 15 min par défaut)

api_limiter → reste de l'API (100 requêtes / min par défaut)

Exposés comme dépendances FastAPI ; un dépassement lève TooManyRequestsError
(HTTP 429 + en-tête Retry-After).

🔹 Avantages :

Pas de dépendance externe (compteurs en mémoire, un process).

Horloge injectable : testable sans attendre.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import Request

from app.core.config import settings
from app.core.errors import TooManyRequestsError

logger = logging.getLogger(__name__)


@dataclass
class Window:
    """Compteur d'une fenêtre fixe pour une clé."""
    started_at: float
    count: int = 0


class RateLimiter:
    def __init__(
        self,
        name: str,
        *,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, Window] = {}
        self._lock = threading.Lock()
        self._last_cleanup = clock()

    def __len__(self) -> int:
        return len(self._windows)

    def _expired(self, window: Window, now: float) -> bool:
        return now - window.started_at >= self.window_seconds

    def _prune(self, now: float) -> None:
        # Appelé sous self._lock
        stale = [key for key, window in self._windows.items() if self._expired(window, now)]
        for key in stale:
            del self._windows[key]
        self._last_cleanup = now

    def hit(self, key: str) -> Optional[int]:
        """
        Compte un appel pour `key`.

        Renvoie None si l'appel est accepté, sinon le nombre de secondes
        avant la prochaine fenêtre.
        """
        now = self.clock()
        with self._lock:
            # au plus un balayage par fenêtre : les clés inactives ne s'accumulent pas
            if now - self._last_cleanup >= self.window_seconds:
                self._prune(now)

            window = self._windows.get(key)
            if window is None or self._expired(window, now):
                window = Window(started_at=now)
                self._windows[key] = window

            if window.count >= self.max_requests:
                remaining = self.window_seconds - (now - window.started_at)
                return max(1, math.ceil(remaining))

            window.count += 1
            return None

    def check(self, key: str) -> None:
        retry_after = self.hit(key)
        if retry_after is not None:
            logger.warning("Rate limit '%s' exceeded for %s (retry in %ss)", self.name, key, retry_after)
            raise TooManyRequestsError("Too many requests, please try again later", retry_after=retry_after)

    def cleanup(self) -> int:
        """Supprime les fenêtres expirées. Renvoie le nombre de clés retirées."""
        with self._lock:
            before = len(self._windows)
            self._prune(self.clock())
            return before - len(self._windows)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


auth_limiter = RateLimiter(
    "auth",
    max_requests=settings.AUTH_RATE_LIMIT_MAX,
    window_seconds=settings.AUTH_RATE_LIMIT_WINDOW_SECONDS,
)
api_limiter = RateLimiter(
    "api",
    max_requests=settings.API_RATE_LIMIT_MAX,
    window_seconds=settings.API_RATE_LIMIT_WINDOW_SECONDS,
)


# -----------------------------
# Dépendances FastAPI
# -----------------------------

def client_key(request: Request) -> str:
    """IP du client TCP ; X-Forwarded-For seulement si TRUST_FORWARDED_FOR est activé."""
    forwarded = request.headers.get("X-Forwarded-For") if settings.TRUST_FORWARDED_FOR else None
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def limit_auth(request: Request) -> None:
    if settings.RATE_LIMIT_ENABLED:
        auth_limiter.check(client_key(request))


def limit_api(request: Request) -> None:
    if settings.RATE_LIMIT_ENABLED:
        api_limiter.check(client_key(request))
