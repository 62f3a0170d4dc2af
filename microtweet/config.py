"""
Configuration management utilities for microtweet.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Mapping, Sequence

from dotenv import dotenv_values

from microtweet.exceptions import ConfigurationError

DEFAULT_API_BASE = "https://api.twitter.com/1.1/"

ENV_VAR_MAP = {
    "api_key": "TWITTER_API_KEY",
    "api_secret": "TWITTER_API_SECRET",
    "access_token": "TWITTER_ACCESS_TOKEN",
    "access_token_secret": "TWITTER_ACCESS_TOKEN_SECRET",
}


@dataclass(frozen=True, slots=True)
class OAuthApplicationCredentials:
    """Consumer key pair identifying the registered application."""

    consumer_key: str
    consumer_secret: str


@dataclass(frozen=True, slots=True)
class OAuthUserCredentials:
    """Access token pair identifying the user the application acts for."""

    access_token: str
    access_token_secret: str


@dataclass(slots=True)
class TwitterCredentials:
    """Credential container for the OAuth 1.0a application and user tokens."""

    api_key: str | None = None
    api_secret: str | None = None
    access_token: str | None = None
    access_token_secret: str | None = None

    def is_empty(self) -> bool:
        return all(value in (None, "") for value in asdict(self).values())

    def application(self) -> OAuthApplicationCredentials:
        if not self.api_key or not self.api_secret:
            raise ConfigurationError("API key and secret are required")
        return OAuthApplicationCredentials(self.api_key, self.api_secret)

    def user(self) -> OAuthUserCredentials:
        if not self.access_token or not self.access_token_secret:
            raise ConfigurationError("Access token and secret are required")
        return OAuthUserCredentials(self.access_token, self.access_token_secret)

    @classmethod
    def from_mapping(cls, data: Mapping[str, str | None]) -> "TwitterCredentials":
        return cls(
            api_key=data.get("api_key"),
            api_secret=data.get("api_secret"),
            access_token=data.get("access_token"),
            access_token_secret=data.get("access_token_secret"),
        )


@dataclass(slots=True)
class ClientSettings:
    """Runtime knobs for the request pipeline.

    ``timeout`` is handed to the transport; this library enforces none itself.
    ``strict_reads`` turns a body shorter than its declared length into a
    ``TransportFailure`` instead of accepting it as complete.
    """

    api_base: str = DEFAULT_API_BASE
    timeout: float | None = None
    strict_reads: bool = False
    read_chunk_size: int | None = None


class ConfigManager:
    """Loads credentials from environment variables, a .env file or disk."""

    def __init__(
        self,
        credential_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
        dotenv_path: Path | None = None,
    ) -> None:
        self._credential_path = credential_path or Path("credentials/twitter_config.json")
        self._env = os.environ if env is None else env
        self._dotenv_path = dotenv_path or Path(".env")

    def load_credentials(
        self,
        priority: Sequence[str] = ("env", "dotenv", "file"),
    ) -> TwitterCredentials:
        """
        Load credentials according to the requested priority order.

        Raises:
            ConfigurationError: when no credentials are available.
        """

        for source in priority:
            if source == "env":
                credentials = self._load_from_env(self._env)
            elif source == "dotenv":
                credentials = self._load_from_dotenv()
            elif source == "file":
                credentials = self._load_from_file()
            else:
                raise ValueError(f"Unknown credential source '{source}'.")

            if credentials and not credentials.is_empty():
                return credentials

        raise ConfigurationError("Twitter credentials are not configured.")

    @staticmethod
    def _load_from_env(env: Mapping[str, str | None]) -> TwitterCredentials | None:
        values: dict[str, str | None] = {
            field: env.get(env_name) for field, env_name in ENV_VAR_MAP.items()
        }
        credentials = TwitterCredentials.from_mapping(values)
        return credentials if not credentials.is_empty() else None

    def _load_from_dotenv(self) -> TwitterCredentials | None:
        if not self._dotenv_path.exists():
            return None
        return self._load_from_env(dotenv_values(self._dotenv_path))

    def _load_from_file(self) -> TwitterCredentials | None:
        if not self._credential_path.exists():
            return None

        with self._credential_path.open("r", encoding="utf-8") as fp:
            try:
                data = json.load(fp)
            except json.JSONDecodeError as exc:
                raise ConfigurationError(
                    f"Credential file {self._credential_path} is not valid JSON."
                ) from exc

        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Credential file {self._credential_path} did not contain a mapping."
            )

        credentials = TwitterCredentials.from_mapping(data)
        return credentials if not credentials.is_empty() else None
