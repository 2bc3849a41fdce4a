"""
Planejador de execução do pipeline (waves).

Este módulo agrupa os nós do grafo de dependências em "waves" ordenadas:
dentro de uma wave todos os nós têm suas dependências satisfeitas por
waves anteriores e são mutuamente independentes, podendo executar em
paralelo; as waves executam estritamente em sequência.

Algoritmo:
    - Varre todos os nós ainda não agendados
    - Um nó está pronto se todas as suas dependências já foram vinculadas
    - Todos os nós prontos formam a próxima wave; suas saídas passam a
      contar como vinculadas
    - Repete até agendar tudo ou até uma varredura não encontrar nenhum
      nó pronto (ciclo ou entrada inexistente)

Decisões arquiteturais:
    - Posicionamento guloso: cada nó entra na wave mais cedo possível
    - Dentro de uma wave, os nós seguem a ordem original dos Steps
    - Complexidade O(N²) no pior caso; pipelines têm dezenas de Steps

Invariantes:
    - Um nó nunca aparece em wave anterior à de quem produz suas entradas
    - Nenhum nó depende de outro nó da mesma wave
    - Todos os nós aparecem exatamente uma vez
    - A mesma entrada sempre produz as mesmas waves

Limites explícitos:
    - Não executa Steps
    - Não interage com RunContext nem com o registry
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Set, Tuple

from pixelflow.core.exceptions import CircularOrMissingDependencyError

from .graph import GraphNode


@dataclass(frozen=True)
class Wave:
    """Conjunto ordenado de nós independentes e prontos para execução (sem hash, como `GraphNode`)."""

    __hash__ = None

    index: int
    nodes: Tuple[GraphNode, ...]

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def step_indexes(self) -> List[int]:
        return [n.index for n in self.nodes]


def compute_waves(nodes: Iterable[GraphNode]) -> List[Wave]:
    """
    Produz as waves de execução a partir dos nós do grafo.

    Args:
        nodes (Iterable[GraphNode]): Nós produzidos por `build_dependency_graph`.

    Returns:
        List[Wave]: Waves na ordem em que devem executar.

    Raises:
        CircularOrMissingDependencyError: Se restarem nós cujas dependências
            nunca serão satisfeitas. A mensagem e `details["unresolved"]`
            listam todos esses nós e os nomes que cada um aguarda.
    """
    remaining: List[GraphNode] = sorted(nodes, key=lambda n: n.index)
    bound: Set[str] = set()
    waves: List[Wave] = []

    while remaining:
        ready = [n for n in remaining if n.dependencies <= bound]

        if not ready:
            unresolved: List[Dict[str, Any]] = [
                {
                    "step_index": n.index,
                    "kind": n.step.kind.value,
                    "needs": sorted(n.dependencies - bound),
                }
                for n in remaining
            ]
            listed = "; ".join(
                f"step {u['step_index']} ({u['kind']}) needs {', '.join(u['needs'])}"
                for u in unresolved
            )
            raise CircularOrMissingDependencyError(
                f"Circular dependency or missing input detected in pipeline: {listed}",
                details={"unresolved": unresolved, "bound": sorted(bound)},
                hint="Verifique se cada `in` corresponde ao `out` de outro Step e se não há ciclos",
            )

        ready_ids = {n.index for n in ready}
        remaining = [n for n in remaining if n.index not in ready_ids]
        for n in ready:
            bound.update(n.outputs)

        waves.append(Wave(index=len(waves), nodes=tuple(ready)))

    return waves
