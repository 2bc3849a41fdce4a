"""
Pacote de rastreabilidade do Pixelflow (Manifest v1).

API pública exposta:
    - RunManifest     → estrutura canônica do Manifest
    - create_manifest → criação explícita do Manifest
    - add_event       → registro explícito de eventos no Event Log
    - record_waves    → composição das waves planejadas
    - step_started    → marca início de execução de um Step
    - step_finished   → registra conclusão bem-sucedida de um Step
    - step_failed     → registra falha de um Step
    - save_manifest   → persistência do Manifest em JSON
    - load_manifest   → restauração do Manifest
"""

from .manifest import (
    RunManifest,
    create_manifest,
    add_event,
    record_waves,
    step_started,
    step_finished,
    step_failed,
    save_manifest,
    load_manifest,
)

__all__ = [
    "RunManifest",
    "create_manifest",
    "add_event",
    "record_waves",
    "step_started",
    "step_finished",
    "step_failed",
    "save_manifest",
    "load_manifest",
]
