"""
Identidade da configuração efetiva de uma run.

O hash é gravado no Manifest (`inputs.config_hash`), permitindo dizer se
duas runs usaram a mesma configuração.

Forma canônica (v1): JSON UTF-8 com chaves ordenadas, sem espaços, e
valores não serializáveis convertidos via `str`; o digest é SHA-256 hex.
"""

import hashlib
import json
from typing import Any, Dict


def canonical_config_json(config: Dict[str, Any]) -> str:
    """Serialização determinística usada como entrada do hash."""
    if not isinstance(config, dict):
        raise TypeError(f"config deve ser um dict, recebido: {type(config).__name__}")
    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    SHA-256 (64 caracteres hex) da forma canônica de `config`.

    A ordem das chaves não afeta o resultado e o input não é mutado.

    Raises:
        TypeError: Se `config` não for um dict.
    """
    payload = canonical_config_json(config).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()
