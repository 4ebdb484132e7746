"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- El scheduler, el transporte HTTP y la CLI leen los mismos tunables
  (cooldown, umbral por minuto, timeouts) de una única fuente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

INATURALIST_API_URL = "https://api.inaturalist.org"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "inat-queue"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "inat-queue"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "inat-queue"
    return Path.home() / ".config" / "inat-queue"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            data[key] = value.strip().strip('"').strip("'")
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario.

    Las claves existentes se conservan; las nuevas sobrescriben.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# inat-queue user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para scheduler/adapters/CLI.
    """

    model_config = SettingsConfigDict(
        env_prefix="INAT_QUEUE_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    base_url: str = Field(
        default=INATURALIST_API_URL,
        min_length=8,
        description="Raíz del servicio remoto; se le añaden /v1 o /v2.",
    )

    # iNaturalist corta a 100 req/min, pero pide mantenerse en 60/min.
    api_cooldown_ms: int = Field(
        default=1000,
        gt=0,
        description="Espera entre despachos (ms) una vez activado el rate-limiting.",
    )
    requests_per_minute: int = Field(
        default=60,
        ge=0,
        description="Profundidad de cola a partir de la cual se activa el rate-limiting.",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="inat-queue/0.1 (+https://github.com/inaturalist)",
        min_length=1,
        description="User-Agent para las peticiones a la API.",
    )

    api_token: str | None = Field(
        default=None,
        description="Token (JWT) de iNaturalist usado por la CLI para peticiones autenticadas.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging para la CLI (DEBUG, INFO, WARNING...).",
    )

    @property
    def api_cooldown_seconds(self) -> float:
        return self.api_cooldown_ms / 1000.0
