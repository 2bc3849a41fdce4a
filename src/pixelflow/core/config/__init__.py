"""
Camada de configuração do Pixelflow.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução da configuração final via deep-merge determinístico
    - Hash canônico para rastreabilidade (gravado no Manifest)
    - Interpretação das chaves do engine (`settings`)

Limites explícitos:
    - Não executa pipeline
    - Não interage com colaboradores
"""

from .errors import (
    ConfigError,
    ConfigParseError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConcurrencyError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .hashing import canonical_config_json, compute_config_hash
from .loader import load_config, read_document
from .merge import deep_merge
from .settings import (
    DEFAULT_CONFIG,
    UNBOUNDED,
    effective_config,
    manifest_enabled,
    parse_concurrency,
    resolve_concurrency,
)

__all__ = [
    "ConfigError",
    "ConfigParseError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConcurrencyError",
    "InvalidConfigRootTypeError",
    "UnsupportedConfigFormatError",
    "canonical_config_json",
    "compute_config_hash",
    "load_config",
    "read_document",
    "deep_merge",
    "DEFAULT_CONFIG",
    "UNBOUNDED",
    "effective_config",
    "manifest_enabled",
    "parse_concurrency",
    "resolve_concurrency",
]
