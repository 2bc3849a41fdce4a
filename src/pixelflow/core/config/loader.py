"""
Leitura de arquivos de configuração do Pixelflow.

A configuração efetiva de uma run vem de duas camadas:

    defaults (obrigatório)  ←  local (opcional, vence em caso de conflito)

`read_document` é o leitor de baixo nível (YAML/JSON por extensão),
compartilhado com o loader de documentos de pipeline. `load_config`
aplica as regras da camada de configuração sobre ele: raiz obrigatoriamente
dict, arquivo vazio vira `{}` e overrides via `deep_merge`.

Limites explícitos:
    - Não interpreta chaves do engine (ver `settings`)
    - Não calcula nem persiste o hash
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml  # PyYAML

from .errors import (
    ConfigParseError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


PathLike = Union[str, Path]

YAML_SUFFIXES = frozenset({".yaml", ".yml"})
JSON_SUFFIXES = frozenset({".json"})

PARSE_ERRORS = (yaml.YAMLError, json.JSONDecodeError)


def read_document(path: Path) -> Any:
    """
    Lê um arquivo YAML ou JSON e devolve o conteúdo bruto.

    Raises:
        FileNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Para extensões fora de .yaml/.yml/.json.
        yaml.YAMLError, json.JSONDecodeError: Conteúdo sintaticamente inválido
            (ver `PARSE_ERRORS`; cada chamador converte no seu erro tipado).
    """
    suffix = path.suffix.lower()
    if suffix not in YAML_SUFFIXES | JSON_SUFFIXES:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix or '<sem extensão>'}")

    with path.open("r", encoding="utf-8") as f:
        if suffix in YAML_SUFFIXES:
            return yaml.safe_load(f)
        return json.load(f)


def _config_layer(path: Path) -> Dict[str, Any]:
    try:
        data = read_document(path)
    except PARSE_ERRORS as e:
        raise ConfigParseError(f"Arquivo de configuração inválido ({path.name}): {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Raiz da configuração em {path.name} deve ser um mapeamento, recebido: {type(data).__name__}"
        )
    return data


def load_config(
    *,
    defaults_path: PathLike,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Resolve a configuração efetiva (defaults + overrides locais).

    Um `local_path` informado mas inexistente é ignorado; a ausência
    do arquivo de defaults é sempre erro.

    Raises:
        DefaultsNotFoundError: Arquivo de defaults ausente.
        UnsupportedConfigFormatError: Extensão não suportada em qualquer camada.
        ConfigParseError: YAML/JSON sintaticamente inválido em qualquer camada.
        InvalidConfigRootTypeError: Camada cuja raiz não é um mapeamento.
        ConfigTypeConflictError: Conflito de tipos entre as camadas.
    """
    defaults = Path(defaults_path)
    if not defaults.is_file():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {defaults}")

    config = _config_layer(defaults)

    if local_path is None:
        return config
    local = Path(local_path)
    if not local.is_file():
        return config
    return deep_merge(config, _config_layer(local))
