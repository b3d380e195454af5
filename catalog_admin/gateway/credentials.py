"""
Persisted admin credentials.

The bearer token and the signed-in user are kept in a small JSON file so a
later session picks them up, the way a browser keeps them in local storage.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import structlog

from catalog_admin.config import get_settings

logger = structlog.get_logger(__name__)


class CredentialStore:
    """
    Token and user persisted to disk.

    Example:
        store = CredentialStore()
        store.save("jwt-token", {"id": 1, "email": "admin@example.com"})
        store.token  # "jwt-token"
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else get_settings().auth.credentials_path
        self._token: Optional[str] = None
        self._user: Optional[Dict[str, Any]] = None
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable credentials file", path=str(self.path), error=str(e))
            return
        self._token = data.get("token")
        self._user = data.get("user")

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def save(self, token: str, user: Optional[Dict[str, Any]] = None) -> None:
        self._token = token
        self._user = user
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"token": token, "user": user}), encoding="utf-8")
        logger.info("Credentials stored", path=str(self.path))

    def clear(self) -> None:
        self._token = None
        self._user = None
        if self.path.exists():
            self.path.unlink()
        logger.info("Credentials cleared", path=str(self.path))
