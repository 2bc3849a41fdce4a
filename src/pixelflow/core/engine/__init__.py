"""
Engine do Pixelflow.

Componentes principais:
    - graph    → extração de dependências e saídas de cada Step
    - planner  → agrupamento em waves (posicionamento guloso mais cedo possível)
    - executor → execução com concorrência limitada e resultados ordenados
    - engine   → orquestração da run, binding table e PipelineResult

Invariantes:
    - Waves executam estritamente em sequência
    - Steps de uma wave são mutuamente independentes
    - Resultados seguem a ordem original dos Steps
"""

from .engine import Engine, RunState, run_definition, run_pipeline
from .executor import run_bounded
from .graph import GraphNode, build_dependency_graph
from .planner import Wave, compute_waves

__all__ = [
    "Engine",
    "RunState",
    "run_definition",
    "run_pipeline",
    "run_bounded",
    "GraphNode",
    "build_dependency_graph",
    "Wave",
    "compute_waves",
]
