"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP/firma) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import AggregationFilters, ApiCredentials, BasicAuthCredentials


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "gf-forms"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "gf-forms"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "gf-forms"
    return Path.home() / ".config" / "gf-forms"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# gf-forms user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="GF_FORMS_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    base_url: str | None = Field(
        default=None,
        description="URL raíz del sitio WordPress (sin '/' final).",
    )
    api_key: str | None = Field(
        default=None,
        description="Consumer key de la REST API de Gravity Forms.",
    )
    api_secret: str | None = Field(
        default=None,
        description="Consumer secret usado para firmar cada request.",
    )
    basic_auth_username: str | None = Field(
        default=None,
        description="Usuario HTTP Basic (opcional, p.ej. sitios de staging).",
    )
    basic_auth_password: str | None = Field(
        default=None,
        description="Password HTTP Basic (opcional).",
    )

    include: list[int] = Field(
        default_factory=list,
        description="IDs de formularios a incluir (vacío = todos).",
    )
    exclude: list[int] = Field(
        default_factory=list,
        description="IDs de formularios a excluir (gana sobre include).",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="gf-forms/0.1",
        min_length=1,
        description="User-Agent para peticiones a la API.",
    )
    retry_delay_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Espera fija entre reintentos (segundos).",
    )
    max_global_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Fallos acumulados (toda la ejecución) antes de abortar sin reintentar.",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().rstrip("/")
        return value or None

    def api_credentials(self) -> ApiCredentials | None:
        if not self.api_key or not self.api_secret:
            return None
        return ApiCredentials(key=self.api_key, secret=self.api_secret)

    def basic_auth(self) -> BasicAuthCredentials | None:
        if not self.basic_auth_username:
            return None
        return BasicAuthCredentials(
            username=self.basic_auth_username,
            password=self.basic_auth_password or "",
        )

    def filters(self) -> AggregationFilters:
        return AggregationFilters.from_lists(include=self.include, exclude=self.exclude)
