"""
Interpretação das chaves de configuração consumidas pelo engine.

Chaves reconhecidas (v1):

    engine:
      concurrency: null     # null/"unbounded" → sem limite; ou inteiro positivo
      manifest: true        # registra o Manifest da run no RunContext

Chaves desconhecidas são preservadas e ignoradas pelo engine.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .errors import InvalidConcurrencyError
from .merge import deep_merge


UNBOUNDED = "unbounded"

DEFAULT_CONFIG: Dict[str, Any] = {
    "engine": {
        "concurrency": None,
        "manifest": True,
    },
}


def parse_concurrency(value: Any) -> Optional[int]:
    """Normaliza um valor de concorrência: None (sem limite) ou inteiro positivo."""
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in {UNBOUNDED, "infinity", "inf"}:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidConcurrencyError(
            f"concurrency must be a positive integer or '{UNBOUNDED}', got {value!r}"
        )
    return value


def effective_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Aplica DEFAULT_CONFIG sob a configuração informada."""
    return deep_merge(DEFAULT_CONFIG, dict(config or {}))


def _engine_section(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return (config or {}).get("engine", {}) or {}


def resolve_concurrency(config: Optional[Dict[str, Any]]) -> Optional[int]:
    return parse_concurrency(_engine_section(config).get("concurrency"))


def manifest_enabled(config: Optional[Dict[str, Any]]) -> bool:
    return bool(_engine_section(config).get("manifest", True))
