"""
Modelo canônico de Step do Pixelflow.

Um Step é a menor unidade declarativa do pipeline. Existem exatamente
três variantes, fechadas e imutáveis:

    - ProduceStep → cria um artefato novo a partir de parâmetros
    - DeriveStep  → deriva um artefato de outro artefato nomeado
    - PersistStep → persiste um artefato nomeado (com `out` opcional)

Princípios fundamentais:
    - Steps são dados: não conhecem o Engine, o planner ou o registry
    - Dependências são expressas apenas por nomes de artefatos
    - Todo ponto de consumo trata as três variantes de forma exaustiva

Invariantes:
    - `out`, quando presente, identifica unicamente o artefato produzido
    - Um Step lê no máximo um artefato nomeado
    - Produce e Derive carregam `params` mutável e por isso não são hashable

Limites explícitos:
    - Não valida unicidade de `out` (responsabilidade do graph builder)
    - Não resolve colaboradores
    - Não executa nada
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from .types import StepKind


@dataclass(frozen=True)
class ProduceStep:
    """Cria o artefato `out` chamando o producer `producer` com `params`."""

    producer: str
    out: str
    params: Dict[str, Any] = field(default_factory=dict)

    kind = StepKind.PRODUCE
    __hash__ = None


@dataclass(frozen=True)
class DeriveStep:
    """Deriva `out` a partir do artefato `input` via transformer `transformer`."""

    input: str
    transformer: str
    out: str
    params: Dict[str, Any] = field(default_factory=dict)

    kind = StepKind.DERIVE
    __hash__ = None


@dataclass(frozen=True)
class PersistStep:
    """
    Persiste o artefato `input` em `destination`.

    `out` é opcional: quando ausente, o Step não cria binding novo e o
    PersistResult aparece apenas no resultado da run. `persister` seleciona
    o persister registrado; None usa o default do registry.
    """

    input: str
    destination: str
    out: Optional[str] = None
    persister: Optional[str] = None

    kind = StepKind.PERSIST


Step = Union[ProduceStep, DeriveStep, PersistStep]


def step_inputs(step: Step) -> Tuple[str, ...]:
    """Nomes de artefatos lidos pelo Step."""
    if isinstance(step, ProduceStep):
        return ()
    if isinstance(step, (DeriveStep, PersistStep)):
        return (step.input,)
    raise TypeError(f"Unsupported step type: {type(step).__name__}")


def step_outputs(step: Step) -> Tuple[str, ...]:
    """Nomes de artefatos escritos pelo Step (zero ou um)."""
    if isinstance(step, (ProduceStep, DeriveStep)):
        return (step.out,)
    if isinstance(step, PersistStep):
        return (step.out,) if step.out is not None else ()
    raise TypeError(f"Unsupported step type: {type(step).__name__}")


def step_label(index: int, step: Step) -> str:
    """Identificador estável de um Step para logs e Manifest (`<index>:<kind>`)."""
    return f"{index}:{step.kind.value}"
