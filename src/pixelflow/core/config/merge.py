"""
Deep-merge de camadas de configuração do Pixelflow.

Política de merge (v1):
    - mapeamento + mapeamento → merge recursivo por chave
    - lista                   → substituída por inteiro
    - escalar                 → substituído
    - None em qualquer lado   → "não definido": o valor do override prevalece
    - tipos divergentes       → ConfigTypeConflictError com o caminho da chave

Nenhum input é mutado; o resultado nunca compartilha objetos com o override.
"""

from copy import deepcopy
from typing import Any, Dict, Tuple

from .errors import ConfigTypeConflictError


def _dotted(path: Tuple[str, ...]) -> str:
    return ".".join(str(p) for p in path) or "<raiz>"


def _merge_into(target: Dict[str, Any], layer: Dict[str, Any], path: Tuple[str, ...]) -> None:
    for key, incoming in layer.items():
        current = target.get(key)
        here = path + (key,)

        if current is None or incoming is None:
            target[key] = deepcopy(incoming)
        elif isinstance(current, dict) and isinstance(incoming, dict):
            _merge_into(current, incoming, here)
        elif isinstance(incoming, list) or type(current) is type(incoming):
            target[key] = deepcopy(incoming)
        else:
            raise ConfigTypeConflictError(
                f"Conflito de tipo em '{_dotted(here)}': "
                f"{type(current).__name__} (base) vs {type(incoming).__name__} (override)"
            )


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Combina `override` sobre `base` e devolve um novo dicionário.

    `None` nunca gera conflito: `engine.concurrency: null` nos defaults
    (sem limite) pode ser trocado por um inteiro no arquivo local, e
    vice-versa.

    Raises:
        ConfigTypeConflictError: Raiz que não é dict, ou tipos divergentes
            na mesma chave (a mensagem traz o caminho pontuado da chave).
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"deep_merge espera dois dicts, recebido: {type(base).__name__} e {type(override).__name__}"
        )

    merged = deepcopy(base)
    _merge_into(merged, override, ())
    return merged
