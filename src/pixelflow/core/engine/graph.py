"""
Construção do grafo de dependências do pipeline.

Converte a lista ordenada de Steps em `GraphNode`s anotados com os nomes
de artefatos que cada Step lê (`dependencies`) e escreve (`outputs`).

O builder é uma função pura e total sobre a lista literal:
    - não valida ordem nem referências pendentes (responsabilidade do planner)
    - rejeita `out` duplicado e nomes de artefato vazios, que são erros de configuração

Invariantes:
    - `GraphNode.index` é a posição do Step na lista original
    - A mesma lista produz sempre grafos estruturalmente iguais
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from pixelflow.core.exceptions import ConfigurationError
from pixelflow.core.pipeline.step import Step, step_inputs, step_label, step_outputs


@dataclass(frozen=True)
class GraphNode:
    """
    Step anotado com suas dependências e saídas.

    Igualdade estrutural, mas sem hash: `step.params` é um dict mutável.
    """

    __hash__ = None

    index: int
    step: Step
    dependencies: FrozenSet[str]
    outputs: Tuple[str, ...]

    @property
    def label(self) -> str:
        return step_label(self.index, self.step)

    @property
    def output_name(self) -> Optional[str]:
        return self.outputs[0] if self.outputs else None


def _check_names(index: int, step: Step, names: Tuple[str, ...]) -> None:
    for name in names:
        if not isinstance(name, str) or not name:
            raise ConfigurationError(
                f"Step {index} ({step.kind.value}): artifact names must be non-empty strings, got {name!r}",
                details={"step_index": index, "name": name},
                hint="Informe `in`/`out` com nomes não vazios",
            )


def build_dependency_graph(steps: Iterable[Step]) -> List[GraphNode]:
    """
    Extrai dependências e saídas de cada Step.

    Args:
        steps (Iterable[Step]): Steps na ordem declarada.

    Returns:
        List[GraphNode]: Um nó por Step, na mesma ordem.

    Raises:
        ConfigurationError: Se dois Steps declararem o mesmo `out`.
        ConfigurationError: Se algum `in`/`out` for vazio ou não for string.
        TypeError: Se algum item não for ProduceStep/DeriveStep/PersistStep.
    """
    nodes: List[GraphNode] = []
    producers: Dict[str, List[int]] = {}

    for index, step in enumerate(steps):
        outputs = step_outputs(step)
        _check_names(index, step, step_inputs(step) + outputs)
        for name in outputs:
            producers.setdefault(name, []).append(index)
        nodes.append(
            GraphNode(
                index=index,
                step=step,
                dependencies=frozenset(step_inputs(step)),
                outputs=outputs,
            )
        )

    duplicates = {name: idx for name, idx in producers.items() if len(idx) > 1}
    if duplicates:
        listed = ", ".join(f"'{n}' (steps {idx})" for n, idx in sorted(duplicates.items()))
        raise ConfigurationError(
            f"Duplicate output name: {listed}",
            details={"duplicates": {n: list(idx) for n, idx in duplicates.items()}},
            hint="Cada `out` deve ser único na pipeline",
        )

    return nodes
