"""
Registro de colaboradores externos do pipeline.

Este módulo define os contratos de capacidade (`Producer`, `Transformer`,
`Persister`) e o `CollaboratorRegistry`, o mapa explícito de
identificador → colaborador consultado pelo Engine ao construir as tasks
de cada wave.

Responsabilidades do módulo:
    - Declarar os três contratos de colaborador (duck typing, runtime_checkable)
    - Validar unicidade de nomes por tipo de colaborador
    - Congelar o registro antes da execução (single-writer, many-readers)
    - Resolver colaboradores por identificador com erro explícito

Decisões arquiteturais:
    - Não existe descoberta de plugins nem import dinâmico por string
    - O registry é populado na inicialização e imutável durante runs
    - Colaboradores podem ser síncronos ou assíncronos

Invariantes:
    - Cada nome é único dentro do seu tipo de colaborador
    - Nenhum registro é aceito após `freeze()`

Limites explícitos:
    - Não executa colaboradores
    - Não valida o conteúdo dos artefatos
    - Não implementa retry
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable

from pixelflow.core.exceptions import (
    DuplicateCollaboratorError,
    RegistryFrozenError,
    UnknownCollaboratorError,
)

from .types import Artifact, PersistResult


@runtime_checkable
class Producer(Protocol):
    """Cria um Artifact novo a partir de parâmetros."""

    def generate(self, params: Mapping[str, Any]) -> Artifact:
        ...


@runtime_checkable
class Transformer(Protocol):
    """Deriva um Artifact novo a partir de um Artifact existente."""

    def transform(self, artifact: Artifact, params: Mapping[str, Any]) -> Artifact:
        ...


@runtime_checkable
class Persister(Protocol):
    """Armazena um Artifact de forma durável."""

    def persist(self, artifact: Artifact, destination: str) -> PersistResult:
        ...


PRODUCER = "producer"
TRANSFORMER = "transformer"
PERSISTER = "persister"

_CONTRACTS = {
    PRODUCER: (Producer, "generate"),
    TRANSFORMER: (Transformer, "transform"),
    PERSISTER: (Persister, "persist"),
}


@dataclass
class CollaboratorRegistry:
    """
    Registro canônico de producers, transformers e persisters.

    O Engine chama `freeze()` ao iniciar a execução; a partir daí o
    registry é somente leitura e pode ser compartilhado entre runs
    concorrentes sem locking.
    """

    _entries: Dict[str, Dict[str, Any]] = field(
        default_factory=lambda: {PRODUCER: {}, TRANSFORMER: {}, PERSISTER: {}},
        init=False,
        repr=False,
    )
    default_persister: Optional[str] = field(default=None, init=False)
    _frozen: bool = field(default=False, init=False, repr=False)

    # -----------------------------
    # Registro
    # -----------------------------
    def _add(self, kind: str, name: str, collaborator: Any) -> None:
        if self._frozen:
            raise RegistryFrozenError(
                f"Registry is frozen; cannot register {kind} '{name}'",
                details={"kind": kind, "name": name},
                hint="Registre todos os colaboradores antes de iniciar a primeira run",
            )
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"{kind} name must be a non-empty string")

        contract, method = _CONTRACTS[kind]
        if not isinstance(collaborator, contract):
            raise TypeError(f"{kind} '{name}' must implement {method}()")

        bucket = self._entries[kind]
        if name in bucket:
            raise DuplicateCollaboratorError(
                f"Duplicate {kind}: {name}",
                details={"kind": kind, "name": name},
            )
        bucket[name] = collaborator

    def register_producer(self, name: str, producer: Producer) -> None:
        self._add(PRODUCER, name, producer)

    def register_transformer(self, name: str, transformer: Transformer) -> None:
        self._add(TRANSFORMER, name, transformer)

    def register_persister(self, name: str, persister: Persister, *, default: bool = False) -> None:
        self._add(PERSISTER, name, persister)
        if default or self.default_persister is None:
            self.default_persister = name

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -----------------------------
    # Lookup
    # -----------------------------
    def names(self, kind: str) -> List[str]:
        return sorted(self._entries[kind])

    def _get(self, kind: str, name: Optional[str]) -> Any:
        bucket = self._entries[kind]
        if name is None or name not in bucket:
            raise UnknownCollaboratorError(
                f"Unknown {kind}: {name!r}",
                details={"kind": kind, "name": name, "available": sorted(bucket)},
                hint=f"Registre o {kind} antes de executar o pipeline",
            )
        return bucket[name]

    def producer(self, name: str) -> Producer:
        return self._get(PRODUCER, name)

    def transformer(self, name: str) -> Transformer:
        return self._get(TRANSFORMER, name)

    def persister(self, name: Optional[str] = None) -> Persister:
        return self._get(PERSISTER, name if name is not None else self.default_persister)
