"""Session token storage."""
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Key the login flow writes the bearer token under.
AUTH_TOKEN_KEY = "authToken"


class TokenStore(ABC):
    """
    Abstract session-local token storage.

    The channel only ever reads. Writing and clearing belong to the login
    and logout flows.
    """

    @abstractmethod
    def get_token(self) -> Optional[str]:
        """Return the stored bearer token, if any."""
        pass

    @abstractmethod
    def set_token(self, token: str) -> None:
        """Store a bearer token."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Forget the stored token."""
        pass


class InMemoryTokenStore(TokenStore):
    """Token store that lives only as long as the process."""

    def __init__(self, token: Optional[str] = None):
        self._values = {}
        if token:
            self._values[AUTH_TOKEN_KEY] = token

    def get_token(self) -> Optional[str]:
        return self._values.get(AUTH_TOKEN_KEY)

    def set_token(self, token: str) -> None:
        self._values[AUTH_TOKEN_KEY] = token

    def clear(self) -> None:
        self._values.pop(AUTH_TOKEN_KEY, None)


class FileTokenStore(TokenStore):
    """Token store persisted as a small JSON document on disk."""

    def __init__(self, path: str):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"[AUTH] Ignoring unreadable token file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(data, f)

    def get_token(self) -> Optional[str]:
        token = self._read().get(AUTH_TOKEN_KEY)
        return token if isinstance(token, str) and token else None

    def set_token(self, token: str) -> None:
        data = self._read()
        data[AUTH_TOKEN_KEY] = token
        self._write(data)

    def clear(self) -> None:
        data = self._read()
        if AUTH_TOKEN_KEY in data:
            del data[AUTH_TOKEN_KEY]
            self._write(data)
