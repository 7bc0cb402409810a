"""
Application settings

All configuration is read through Pydantic Settings from environment
variables and the project-level .env file, with type validation and
defaults.

Precedence:
1. environment variables
2. .env file
3. defaults declared below
"""
import secrets
import warnings
from typing import Annotated, Any, Literal

from pydantic import (
    AnyUrl,
    BeforeValidator,
    HttpUrl,
    computed_field,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


def parse_cors(v: Any) -> list[str] | str:
    """
    Parse the CORS origins setting.

    Accepts either a comma separated string
    ("http://localhost:5173,http://localhost:3000") or a JSON list.

    Raises:
        ValueError: when the value is neither a string nor a list
    """
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file="../.env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "Teacher Poli Members Area"
    API_PREFIX: str = "/api"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    SENTRY_DSN: HttpUrl | None = None

    # Session tokens
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    # bcrypt work factor; passlib accepts 4..31
    BCRYPT_ROUNDS: int = 12

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    # Credential store: "memory" keeps everything in process, "redis" shares
    # records between worker processes.
    STORE_BACKEND: Literal["memory", "redis"] = "memory"
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str | None = None
    REDIS_KEY_PREFIX: str = "members"

    # Hotmart webhook authentication (hottok or HMAC-SHA256 of the raw body)
    HOTMART_WEBHOOK_SECRET: str | None = None

    def _check_default_secret(self, var_name: str, value: str | None) -> None:
        """
        Refuse placeholder secrets outside local development.

        A value of "changethis" only warns in the local environment and
        raises everywhere else.
        """
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", '
                "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT == "local":
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        self._check_default_secret("SECRET_KEY", self.SECRET_KEY)
        self._check_default_secret("HOTMART_WEBHOOK_SECRET", self.HOTMART_WEBHOOK_SECRET)
        self._check_default_secret("REDIS_PASSWORD", self.REDIS_PASSWORD)

        if self.ENVIRONMENT != "local" and not self.HOTMART_WEBHOOK_SECRET:
            raise ValueError(
                "HOTMART_WEBHOOK_SECRET must be set outside the local environment."
            )
        return self


settings = Settings()  # type: ignore
