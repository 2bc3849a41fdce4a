"""
Leitura de documentos declarativos de pipeline.

Converte um documento (YAML, JSON ou dict já carregado) na sequência
ordenada de Steps consumida pelo Engine, junto com as opções da
pipeline (`name`, `concurrency`).

Formato aceito:

    name: thumbnails
    concurrency: 2            # inteiro positivo ou "unbounded"
    steps:
      - kind: produce
        producer: shapes
        params: {width: 800}
        out: original
      - kind: derive
        in: original
        transformer: resize
        params: {width: 200}
        out: thumb
      - kind: persist
        in: thumb
        destination: ./out/thumb.png

Aliases históricos aceitos: `generate` (produce), `transform` (derive),
`save`/`upload` (persist), `generator`, `op`, `provider`, `key`.

Limites explícitos:
    - Não valida unicidade de `out` nem dependências (graph builder e planner)
    - Não resolve colaboradores
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pixelflow.core.config.errors import UnsupportedConfigFormatError
from pixelflow.core.config.loader import PARSE_ERRORS, read_document
from pixelflow.core.config.settings import parse_concurrency
from pixelflow.core.exceptions import PipelineDefinitionError

from .step import DeriveStep, PersistStep, ProduceStep, Step


_KIND_ALIASES = {
    "produce": "produce",
    "generate": "produce",
    "derive": "derive",
    "transform": "derive",
    "persist": "persist",
    "save": "persist",
    "upload": "persist",
}


@dataclass(frozen=True)
class PipelineDefinition:
    """Pipeline declarada: Steps ordenados e opções de execução."""

    steps: List[Step] = field(default_factory=list)
    name: Optional[str] = None
    concurrency: Optional[int] = None
    concurrency_declared: bool = False


def _fail(index: Optional[int], message: str, **details: Any) -> PipelineDefinitionError:
    where = f"steps[{index}]: " if index is not None else ""
    return PipelineDefinitionError(
        f"{where}{message}",
        details={"step_index": index, **details},
        hint="Revise o documento de pipeline",
    )


def _pick(raw: Mapping[str, Any], index: int, *keys: str, required: bool = True) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            value = raw[key]
            if not isinstance(value, str) or not value.strip():
                raise _fail(index, f"'{key}' must be a non-empty string", field=key)
            return value
    if required:
        raise _fail(index, f"missing required field '{keys[0]}'", field=keys[0])
    return None


def _params(raw: Mapping[str, Any], index: int) -> Dict[str, Any]:
    params = raw.get("params")
    if params is None:
        return {}
    if not isinstance(params, dict):
        raise _fail(index, "'params' must be a mapping", field="params")
    return dict(params)


def parse_step(raw: Any, index: int) -> Step:
    if not isinstance(raw, Mapping):
        raise _fail(index, f"step must be a mapping, got {type(raw).__name__}")

    kind_raw = raw.get("kind")
    kind = _KIND_ALIASES.get(str(kind_raw).lower()) if kind_raw is not None else None
    if kind is None:
        raise _fail(index, f"unknown step kind: {kind_raw!r}", kind=kind_raw)

    if kind == "produce":
        return ProduceStep(
            producer=_pick(raw, index, "producer", "generator"),
            out=_pick(raw, index, "out"),
            params=_params(raw, index),
        )
    if kind == "derive":
        return DeriveStep(
            input=_pick(raw, index, "in", "input"),
            transformer=_pick(raw, index, "transformer", "op"),
            out=_pick(raw, index, "out"),
            params=_params(raw, index),
        )
    return PersistStep(
        input=_pick(raw, index, "in", "input"),
        destination=_pick(raw, index, "destination", "key"),
        out=_pick(raw, index, "out", required=False),
        persister=_pick(raw, index, "persister", "provider", required=False),
    )


def parse_pipeline(document: Mapping[str, Any]) -> PipelineDefinition:
    if not isinstance(document, Mapping):
        raise _fail(None, f"pipeline root must be a mapping, got {type(document).__name__}")

    raw_steps = document.get("steps")
    if not isinstance(raw_steps, list):
        raise _fail(None, "'steps' must be a list")

    name = document.get("name")
    if name is not None and not isinstance(name, str):
        raise _fail(None, "'name' must be a string")

    declared = "concurrency" in document
    try:
        concurrency = parse_concurrency(document.get("concurrency"))
    except ValueError as e:
        raise _fail(None, str(e), field="concurrency") from e

    return PipelineDefinition(
        steps=[parse_step(raw, i) for i, raw in enumerate(raw_steps)],
        name=name,
        concurrency=concurrency,
        concurrency_declared=declared,
    )


def load_pipeline(path: Union[str, Path]) -> PipelineDefinition:
    """Carrega um documento de pipeline YAML (.yaml/.yml) ou JSON (.json)."""
    p = Path(path)
    if not p.is_file():
        raise PipelineDefinitionError(f"Pipeline file not found: {p}", details={"path": str(p)})

    try:
        data = read_document(p)
    except UnsupportedConfigFormatError as e:
        raise PipelineDefinitionError(
            f"Unsupported pipeline format: {p.suffix}",
            details={"path": str(p)},
            hint="Use .yaml, .yml ou .json",
        ) from e
    except PARSE_ERRORS as e:
        raise PipelineDefinitionError(
            f"Malformed pipeline document {p.name}: {e}",
            details={"path": str(p)},
            hint="Corrija a sintaxe YAML/JSON do documento",
        ) from e

    return parse_pipeline(data or {})
