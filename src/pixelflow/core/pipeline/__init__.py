"""
# Pipeline Core: Pixelflow

Contratos e estruturas que compõem uma pipeline.

## Componentes

- **step**: `ProduceStep`, `DeriveStep`, `PersistStep` (variantes fechadas)
- **types**: `Artifact`, `PersistResult`, `StepKind`, `StepStatus`,
  `StepOutcome`, `PipelineResult`
- **registry**: contratos `Producer`/`Transformer`/`Persister` e
  `CollaboratorRegistry`
- **context**: `RunContext` (binding table, eventos, meta)
- **definition**: leitura de documentos de pipeline (YAML/JSON)

## Invariantes

- Cada `out` é único na pipeline
- Steps se comunicam apenas por nomes de artefatos
- A binding table é isolada por run
"""

from .context import RunContext
from .definition import PipelineDefinition, load_pipeline, parse_pipeline
from .registry import CollaboratorRegistry, Persister, Producer, Transformer
from .step import DeriveStep, PersistStep, ProduceStep, Step, step_inputs, step_outputs
from .types import (
    Artifact,
    PersistResult,
    PipelineResult,
    StepKind,
    StepOutcome,
    StepStatus,
)

__all__ = [
    "RunContext",
    "PipelineDefinition",
    "load_pipeline",
    "parse_pipeline",
    "CollaboratorRegistry",
    "Persister",
    "Producer",
    "Transformer",
    "DeriveStep",
    "PersistStep",
    "ProduceStep",
    "Step",
    "step_inputs",
    "step_outputs",
    "Artifact",
    "PersistResult",
    "PipelineResult",
    "StepKind",
    "StepOutcome",
    "StepStatus",
]
