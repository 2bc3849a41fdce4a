"""
Contexto de execução de uma run do pipeline.

Este módulo define o `RunContext`, a estrutura canônica que carrega o
estado de uma única run: a binding table (nome → artefato), o log de
eventos estruturados e os metadados livres da run (`meta`, copiados para
o Manifest).

Princípios fundamentais:
    - Isolamento por execução (cada run possui seu próprio contexto)
    - Ausência de estado global compartilhado
    - A binding table só é escrita entre waves, pelo Engine

Invariantes:
    - Um nome é vinculado no máximo uma vez por run
    - Logs sempre incluem `run_id` e `step_id`
    - Em caso de falha, os bindings já materializados permanecem disponíveis

Limites explícitos:
    - Não executa Steps
    - Não planeja nem coordena execução
    - Não persiste dados automaticamente
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pixelflow.core.exceptions import ConfigurationError, UnresolvedBindingError


@dataclass
class RunContext:
    """
    Contexto de execução de uma run do pipeline.

    Consolida:
        - identidade da execução (run_id, created_at)
        - configuração resolvida
        - binding table (artefatos materializados por nome)
        - logs estruturados por Step
        - metadados livres da run (origem, usuário...)
        - Manifest opcional da run
    """
    run_id: str
    created_at: datetime
    config: Dict[str, Any] = field(default_factory=dict)
    meta: Dict[str, Any] = field(default_factory=dict)
    manifest: Optional[Any] = None

    _bindings: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)

    @classmethod
    def create(cls, *, config: Optional[Dict[str, Any]] = None, **meta: Any) -> "RunContext":
        return cls(
            run_id=uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc),
            config=dict(config or {}),
            meta=dict(meta),
        )

    # -----------------------------
    # Binding table
    # -----------------------------
    def bind(self, name: str, value: Any) -> None:
        if name in self._bindings:
            raise ConfigurationError(
                f"Artifact name already bound: {name}",
                details={"name": name},
            )
        self._bindings[name] = value

    def is_bound(self, name: str) -> bool:
        return name in self._bindings

    def resolve(self, name: str, *, step_index: Optional[int] = None) -> Any:
        if name not in self._bindings:
            raise UnresolvedBindingError(
                f"Unresolved binding: {name}",
                details={"name": name, "step_index": step_index, "bound": sorted(self._bindings)},
            )
        return self._bindings[name]

    def bound_names(self) -> List[str]:
        return list(self._bindings)

    def bindings(self) -> Dict[str, Any]:
        return dict(self._bindings)

    # -----------------------------
    # Logging
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)
