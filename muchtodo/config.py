import os
import sys
from contextvars import ContextVar
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type
from urllib.parse import urlsplit, urlunsplit

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict, SettingsError

APP_NAME = "MuchToDo Backend"
APP_VERSION = "0.1.0"

_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}

# Tagged with an environment variable but never read from any source.
_FIXED_FIELDS = ("jwt_expiration_hours", "cookie_domains", "secure_cookie", "allowed_origins")

# Variable lookup used by EnvironSettingsSource; None means the process environment.
_environ: ContextVar[Optional[Mapping[str, str]]] = ContextVar("muchtodo_environ", default=None)


class ConfigError(Exception):
    """Raised when a usable configuration cannot be produced."""


def parse_bool(value: str) -> bool:
    """
    Parses the conventional boolean spellings.

    Raises:
        ValueError: if the value is not a recognised boolean form.
    """
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean value: {value!r}")


def redact_uri(uri: str) -> str:
    """Masks the password of a connection URI, leaving everything else intact."""
    try:
        parts = urlsplit(uri)
    except ValueError:
        return uri
    if parts.password is None:
        return uri
    userinfo, _, host = parts.netloc.rpartition("@")
    user = userinfo.split(":", 1)[0]
    return urlunsplit(parts._replace(netloc=f"{user}:****@{host}"))


class EnvironSettingsSource(PydanticBaseSettingsSource):
    """
    Reads aliased fields from a variable mapping.

    The mapping comes from load_config(); outside of it the process
    environment is used. Empty values count as unset.
    """

    def __init__(self, settings_cls: Type[BaseSettings]):
        super().__init__(settings_cls)
        environ = _environ.get()
        self.environ = os.environ if environ is None else environ

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        env_name = field.validation_alias
        if not isinstance(env_name, str):
            return None, field_name, False
        return self.environ.get(env_name), env_name, False

    def __call__(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field, field_name)
            if value not in (None, ""):
                data[key] = value
        return data


class Config(BaseSettings):
    """Application configuration resolved from environment variables."""

    # Server
    server_port: str = Field("8080", validation_alias="PORT")

    # MongoDB
    mongo_uri: str = Field("", validation_alias="MONGO_URI")
    db_name: str = Field("much_todo_db", validation_alias="DB_NAME")

    # Auth
    jwt_secret_key: str = Field("your-super-secret-key-change-in-production", validation_alias="JWT_SECRET_KEY")
    jwt_expiration_hours: int = Field(72, json_schema_extra={"env": "JWT_EXPIRATION_HOURS"})

    # Cache
    enable_cache: bool = Field(False, validation_alias="ENABLE_CACHE")
    redis_addr: str = Field("localhost:6379", validation_alias="REDIS_ADDR")
    redis_password: str = Field("", validation_alias="REDIS_PASSWORD")

    # Logging
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field("json", validation_alias="LOG_FORMAT")

    # HTTP
    cookie_domains: List[str] = Field(
        default_factory=lambda: ["localhost"], json_schema_extra={"env": "COOKIE_DOMAINS"}
    )
    secure_cookie: bool = Field(False, json_schema_extra={"env": "SECURE_COOKIE"})
    allowed_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        json_schema_extra={"env": "ALLOWED_ORIGINS"},
    )

    model_config = SettingsConfigDict(
        env_file=None,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, EnvironSettingsSource(settings_cls), dotenv_settings

    @model_validator(mode="before")
    @classmethod
    def drop_fixed_fields(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if key not in _FIXED_FIELDS}
        return data

    @field_validator("enable_cache", mode="before")
    @classmethod
    def parse_enable_cache(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return parse_bool(value)
            except ValueError:
                # Unparsable flags leave the cache disabled.
                return False
        return value

    @classmethod
    def env_names(cls) -> Dict[str, str]:
        """Maps each field name to the environment variable it is tagged with."""
        return {
            name: field.validation_alias or field.json_schema_extra["env"]
            for name, field in cls.model_fields.items()
        }


def load_config(path: str = "", environ: Optional[Mapping[str, str]] = None) -> Config:
    """
    Builds the application configuration.

    Args:
        path (str): Optional dotenv file. Its values apply only where the
            environment leaves a variable unset or empty.
        environ (Mapping[str, str]): Variable lookup. Defaults to the process environment.

    Raises:
        ConfigError: if the resolved values cannot form a Config.
    """
    if environ is None:
        environ = os.environ

    print(f"==== CONFIG LOAD START: MONGO_URI env={redact_uri(environ.get('MONGO_URI', ''))}", file=sys.stderr)

    token = _environ.set(environ)
    try:
        config = Config(_env_file=path or None)
    except (ValidationError, SettingsError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
    finally:
        _environ.reset(token)

    print(
        f"DEBUG CONFIG: MONGO_URI={redact_uri(config.mongo_uri)} "
        f"LOG_LEVEL={config.log_level} ENABLE_CACHE={str(config.enable_cache).lower()}",
        file=sys.stderr,
    )
    return config
