"""Configuration helpers for the slug translation tool."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from slug_translations.slugging.models import LocaleContext
from slug_translations.slugging.ranker import DEFAULT_SEPARATOR


class LocaleSettings(BaseModel):
    """Locales used when resolving and generating slugs."""

    default_locale: str = Field("en", description="Locale used as fallback for lookups")
    current_locale: Optional[str] = Field(
        None, description="Locale of the current operation; defaults to the default locale"
    )
    available_locales: Optional[list[str]] = Field(
        None, description="Restrict operations to these locales when set"
    )

    @model_validator(mode="after")
    def _check_known_locales(self) -> "LocaleSettings":
        if self.available_locales:
            for locale in (self.default_locale, self.current_locale):
                if locale and locale not in self.available_locales:
                    raise ValueError(f"Locale {locale!r} is not listed in available_locales")
        return self

    def context(self) -> LocaleContext:
        return LocaleContext(current=self.current_locale or self.default_locale, default=self.default_locale)


class SluggingSettings(BaseModel):
    """Options for slug sequencing."""

    separator: str = Field(DEFAULT_SEPARATOR, description="Separator between a slug and its sequence number")

    @field_validator("separator")
    @classmethod
    def _check_separator(cls, value: str) -> str:
        if not value or value == "-":
            raise ValueError("separator must be non-empty and differ from a single '-'")
        return value


class StoreSettings(BaseModel):
    """Where translations are kept."""

    backend: Literal["memory", "files", "sql"] = Field("files", description="Store backend")
    path: Path = Field(Path("slugs"), description="Directory used by the files backend")
    url: Optional[str] = Field(None, description="SQLAlchemy database URL used by the sql backend")

    @model_validator(mode="after")
    def _check_url(self) -> "StoreSettings":
        if self.backend == "sql" and not self.url:
            raise ValueError("the sql backend requires a database url")
        return self


class SlugConfig(BaseModel):
    """Aggregate configuration for the tool."""

    locales: LocaleSettings = Field(default_factory=LocaleSettings)
    slugging: SluggingSettings = Field(default_factory=SluggingSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)


ENV_PREFIX = "SLUGS"
DEFAULT_CONFIG_PATHS = (
    Path.cwd() / "slug-translations.toml",
    Path.home() / ".config" / "slug-translations" / "config.toml",
)


@dataclasses.dataclass
class ConfigSource:
    """Result of attempting to resolve configuration data."""

    config: Optional[SlugConfig]
    path: Optional[Path]
    error: Optional[Exception]


def _load_from_env() -> dict[str, object]:
    """Return a dictionary with configuration values extracted from environment variables."""

    def _get(name: str) -> Optional[str]:
        return os.getenv(f"{ENV_PREFIX}_{name}")

    env_data: dict[str, object] = {}

    locales: dict[str, object] = {}
    for key in ("DEFAULT_LOCALE", "CURRENT_LOCALE"):
        value = _get(key)
        if value:
            locales[key.lower()] = value
    available = _get("AVAILABLE_LOCALES")
    if available:
        locales["available_locales"] = [item.strip() for item in available.split(",") if item.strip()]
    if locales:
        env_data["locales"] = locales

    separator = _get("SEPARATOR")
    if separator:
        env_data["slugging"] = {"separator": separator}

    store: dict[str, str] = {}
    for key in ("BACKEND", "PATH", "URL"):
        value = _get(f"STORE_{key}")
        if value:
            store[key.lower()] = value
    if store:
        env_data["store"] = store

    return env_data


def _load_toml(path: Path) -> Optional[dict]:
    if not path.exists():
        return None

    try:  # Python 3.11+
        import tomllib  # type: ignore
    except ModuleNotFoundError:  # pragma: no cover - Python <3.11 fallback
        import tomli as tomllib  # type: ignore

    with path.open("rb") as handle:
        return tomllib.load(handle)


def resolve_config(explicit_path: Optional[Path] = None) -> ConfigSource:
    """Discover configuration using the first available source.

    The priority order is:
    1. Explicit path provided via CLI argument.
    2. Default configuration files in the working directory or the user's config directory.
    3. Environment variables with the `SLUGS_` prefix.
    """

    errors: list[Exception] = []
    sources: list[tuple[Optional[Path], Optional[dict]]] = []

    if explicit_path:
        try:
            data = _load_toml(explicit_path)
            if data is not None:
                sources.append((explicit_path, data))
        except Exception as exc:  # pragma: no cover - configuration loading failure path
            errors.append(exc)

    if not sources:
        for path in DEFAULT_CONFIG_PATHS:
            try:
                data = _load_toml(path)
            except Exception as exc:  # pragma: no cover
                errors.append(exc)
                continue
            if data is not None:
                sources.append((path, data))
                break

    if not sources:
        env_data = _load_from_env()
        if env_data:
            sources.append((None, env_data))

    for path, data in sources:
        if data is None:
            continue
        try:
            config = SlugConfig.model_validate(data)
            return ConfigSource(config=config, path=path, error=None)
        except ValidationError as exc:
            errors.append(exc)

    error = errors[0] if errors else None
    return ConfigSource(config=None, path=None, error=error)


def ensure_config(
    *,
    locale: Optional[str] = None,
    default_locale: Optional[str] = None,
    backend: Optional[str] = None,
    store_path: Optional[Path] = None,
    store_url: Optional[str] = None,
    config_path: Optional[Path] = None,
) -> SlugConfig:
    """Resolve configuration from precedence order and apply explicit CLI options on top."""

    source = resolve_config(config_path)

    if source.config:
        config = source.config.model_copy(deep=True)
    elif source.error is not None:
        raise RuntimeError(f"Invalid configuration: {source.error}")
    else:
        config = SlugConfig()

    overrides: dict[str, dict[str, object]] = {"locales": {}, "store": {}}
    if locale:
        overrides["locales"]["current_locale"] = locale
    if default_locale:
        overrides["locales"]["default_locale"] = default_locale
    if backend:
        overrides["store"]["backend"] = backend
    if store_path:
        overrides["store"]["path"] = store_path
    if store_url:
        overrides["store"]["url"] = store_url

    if any(overrides.values()):
        data = config.model_dump()
        for section, values in overrides.items():
            data[section].update(values)
        try:
            config = SlugConfig.model_validate(data)
        except ValidationError as exc:
            raise RuntimeError(f"Invalid configuration: {exc}") from exc

    return config
