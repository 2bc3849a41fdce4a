# src/pixelflow/__init__.py
"""
Pixelflow: engine de execução de pipelines declarativas de imagem.

Uma pipeline é uma lista nomeada de Steps (produce, derive, persist) que
trocam artefatos por nome. O engine resolve dependências, agrupa os Steps
em waves independentes e executa cada wave com concorrência limitada,
mantendo a ordem dos resultados.

Arquitetura em alto nível:
    - core.pipeline     → modelo de Steps, tipos, registry de colaboradores e RunContext
    - core.engine       → grafo de dependências, waves, executor e Engine
    - core.config       → carregamento, merge, hashing e interpretação de configuração
    - core.traceability → Manifest e Event Log da run

Limites explícitos:
    - Não implementa codecs de imagem, upload ou geração (colaboradores externos)
    - Não faz retry nem valida o conteúdo de artefatos
"""
from ._version import __version__
from .core.engine import Engine, RunState, run_definition, run_pipeline
from .core.exceptions import (
    CircularOrMissingDependencyError,
    ConfigurationError,
    PipelineStepError,
    PixelflowException,
    UnknownCollaboratorError,
    UnresolvedBindingError,
)
from .core.pipeline import (
    Artifact,
    CollaboratorRegistry,
    DeriveStep,
    PersistResult,
    PersistStep,
    PipelineResult,
    ProduceStep,
    RunContext,
    load_pipeline,
    parse_pipeline,
)

__all__ = [
    "__version__",
    "Engine",
    "RunState",
    "run_definition",
    "run_pipeline",
    "CircularOrMissingDependencyError",
    "ConfigurationError",
    "PipelineStepError",
    "PixelflowException",
    "UnknownCollaboratorError",
    "UnresolvedBindingError",
    "Artifact",
    "CollaboratorRegistry",
    "DeriveStep",
    "PersistResult",
    "PersistStep",
    "PipelineResult",
    "ProduceStep",
    "RunContext",
    "load_pipeline",
    "parse_pipeline",
]
