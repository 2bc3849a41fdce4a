"""
Pixelflow: Canonical Exceptions (v1)

Este módulo define as exceções tipadas do engine de pipelines do Pixelflow.

Objetivo:
- Permitir que graph builder, planner, executor e Engine levantem
  exceções semânticas tipadas
- Facilitar o mapeamento determinístico para ErrorPayload
- Evitar ValueError/RuntimeError genéricos em erros estruturais

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Erros estruturais (configuração, dependências) abortam antes de qualquer
  efeito colateral externo.
- Erros de runtime não desfazem waves já concluídas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(eq=False)
class PixelflowException(Exception):
    """Base class para exceções internas do Pixelflow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Estruturais (antes de qualquer execução)
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ConfigurationError(PixelflowException):
    """Definição de pipeline inválida (ex.: `out` duplicado)."""


@dataclass(eq=False)
class PipelineDefinitionError(ConfigurationError):
    """Documento de pipeline malformado (YAML/JSON/dict)."""


@dataclass(eq=False)
class CircularOrMissingDependencyError(PixelflowException):
    """Dependência insatisfazível detectada pelo planner.

    `details["unresolved"]` enumera todos os nós não agendados e os
    nomes que cada um ainda aguarda.
    """

    @property
    def unresolved(self) -> List[Dict[str, Any]]:
        return list(self.details.get("unresolved", []))


# ---------------------------------------------------------------------------
# Registry de colaboradores
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class UnknownCollaboratorError(PixelflowException):
    """Identificador de producer/transformer/persister não registrado."""


@dataclass(eq=False)
class DuplicateCollaboratorError(PixelflowException):
    """Dois colaboradores do mesmo tipo registrados com o mesmo nome."""


@dataclass(eq=False)
class RegistryFrozenError(PixelflowException):
    """Tentativa de registro após o congelamento do registry."""


# ---------------------------------------------------------------------------
# Execução
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class UnresolvedBindingError(PixelflowException):
    """Nome de entrada ausente na binding table no momento da execução."""


@dataclass(eq=False)
class TaskFailedError(PixelflowException):
    """Falha de uma task do executor, atribuída ao seu índice."""

    index: int = -1
    error: Optional[BaseException] = None


@dataclass(eq=False)
class PipelineStepError(PixelflowException):
    """Falha de um colaborador durante a execução de um Step.

    Carrega o índice do Step, seu `out` (se houver), o erro original e os
    nomes já materializados antes da falha (para recuperação manual).
    """

    step_index: int = -1
    output_name: Optional[str] = None
    cause: Optional[BaseException] = None
    bound_names: List[str] = field(default_factory=list)
