"""
Tipos canônicos do pipeline do Pixelflow.

Este módulo define as estruturas e enums fundamentais que padronizam
a comunicação entre Steps, colaboradores externos e o Engine.

Componentes principais:
    - StepKind      → enum dos três tipos de Step (produce, derive, persist)
    - StepStatus    → enum de estados finais (SUCCESS, FAILED)
    - Artifact      → bytes + metadados mínimos, opacos para o engine
    - PersistResult → confirmação de persistência devolvida por um persister
    - StepOutcome   → resultado de um Step, indexado pela posição original
    - PipelineResult→ sequência ordenada de StepOutcome de uma run

Princípios fundamentais:
    - Tipos são estáveis e imutáveis
    - O engine nunca inspeciona o conteúdo de um Artifact
    - Nenhuma lógica de execução vive neste módulo

Limites explícitos:
    - Não executa Steps
    - Não valida formato de imagem
    - Não decide políticas de execução
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class StepKind(str, Enum):
    """
    Tipos de Steps no pipeline.

    Os valores são strings para facilitar serialização em JSON,
    persistência em Manifest e leitura de documentos de pipeline.

    Tipos definidos:
        - PRODUCE: cria um novo artefato a partir de parâmetros
        - DERIVE: deriva um novo artefato a partir de outro artefato nomeado
        - PERSIST: armazena um artefato nomeado de forma durável
    """
    PRODUCE = "produce"
    DERIVE = "derive"
    PERSIST = "persist"


class StepStatus(str, Enum):
    """Estados finais possíveis da execução de um Step."""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class Artifact:
    """
    Artefato opaco trafegado entre Steps.

    Campos:
        - data: bytes brutos do artefato
        - format: tag de formato/MIME (ex.: "image/png"), se conhecida
        - width / height: dimensões em pixels, se conhecidas
        - metadata: metadados livres do colaborador
        - source: identificador da origem (ex.: "shapes", "openai")

    O engine não lê nem valida nenhum destes campos.
    """
    data: bytes
    format: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    source: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class PersistResult:
    """Confirmação de persistência devolvida por um persister."""
    location: str
    persister: Optional[str] = None
    size: Optional[int] = None
    url: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


BoundValue = Union[Artifact, PersistResult, Any]


@dataclass(frozen=True)
class StepOutcome:
    """
    Resultado imutável de um Step executado.

    Campos:
        - step_index: posição do Step na lista original
        - kind: tipo do Step
        - output_name: nome vinculado na binding table (None para persist sem `out`)
        - value: Artifact produzido ou PersistResult
        - status: estado final do Step
    """
    step_index: int
    kind: StepKind
    output_name: Optional[str]
    value: BoundValue
    status: StepStatus = StepStatus.SUCCESS


@dataclass(frozen=True)
class PipelineResult:
    """Resultado agregado de uma run, na ordem original dos Steps."""

    run_id: str
    outcomes: List[StepOutcome] = field(default_factory=list)
    name: Optional[str] = None
    wave_sizes: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.outcomes)

    def __iter__(self):
        return iter(self.outcomes)

    def __getitem__(self, index: int) -> StepOutcome:
        return self.outcomes[index]

    def bindings(self) -> Dict[str, BoundValue]:
        return {o.output_name: o.value for o in self.outcomes if o.output_name is not None}
