"""
Pixelflow: Canonical Error Structures (v1)

Este módulo define o padrão canônico de payloads de erro do Pixelflow.
Erros fazem parte do contrato operacional do engine, devendo ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

O payload é o formato usado pelo Manifest e por relatórios externos;
as exceções tipadas vivem em `pixelflow.core.exceptions`.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from pixelflow.core.exceptions import (
    CircularOrMissingDependencyError,
    ConfigurationError,
    PipelineStepError,
    PixelflowException,
    UnknownCollaboratorError,
    UnresolvedBindingError,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do Pixelflow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Estruturais
PIPELINE_CONFIGURATION_ERROR = "PIPELINE_CONFIGURATION_ERROR"
PIPELINE_DEPENDENCY_ERROR = "PIPELINE_DEPENDENCY_ERROR"

# Colaboradores / bindings
UNKNOWN_COLLABORATOR = "UNKNOWN_COLLABORATOR"
UNRESOLVED_BINDING = "UNRESOLVED_BINDING"

# Execução
PIPELINE_STEP_FAILED = "PIPELINE_STEP_FAILED"
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"


_CODES = (
    (PipelineStepError, PIPELINE_STEP_FAILED),
    (CircularOrMissingDependencyError, PIPELINE_DEPENDENCY_ERROR),
    (UnknownCollaboratorError, UNKNOWN_COLLABORATOR),
    (UnresolvedBindingError, UNRESOLVED_BINDING),
    (ConfigurationError, PIPELINE_CONFIGURATION_ERROR),
)


def _safe_details(details: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in details.items():
        if isinstance(value, (str, int, float, bool)) or value is None:
            out[key] = value
        elif isinstance(value, (list, tuple)):
            out[key] = [v if isinstance(v, (str, int, float, bool, dict)) or v is None else str(v) for v in value]
        elif isinstance(value, dict):
            out[key] = _safe_details(value)
        else:
            out[key] = str(value)
    return out


def exception_to_payload(exc: BaseException) -> ErrorPayload:
    """Converte exceções em ErrorPayload (serializável, acionável).

    Regras:
    - PixelflowException: já vem com message/details/hint; o código é
      escolhido pelo tipo mais específico do catálogo.
    - Outras exceções: encapsular como ENGINE_EXECUTION_ERROR sem expor
      stack trace.
    """
    if isinstance(exc, PixelflowException):
        code = next((c for cls, c in _CODES if isinstance(exc, cls)), exc.__class__.__name__)
        details = _safe_details(dict(exc.details or {}))
        if isinstance(exc, PipelineStepError):
            details.setdefault("step_index", exc.step_index)
            details.setdefault("output_name", exc.output_name)
            if exc.cause is not None:
                details.setdefault("exception_class", exc.cause.__class__.__name__)
        return ErrorPayload(
            type=code,
            message=str(exc) or "Erro de execução",
            details=details,
            hint=exc.hint,
        )

    return ErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante execução",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique o log técnico e a configuração do pipeline",
    )
