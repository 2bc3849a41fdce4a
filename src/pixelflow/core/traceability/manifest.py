"""
Manifest de execução do Pixelflow (Manifest v1).

Registro forense de uma run, mantido pelo Engine enquanto a pipeline
executa:

    run     → identidade (run_id, início, nome da pipeline, versão, meta)
    inputs  → hash da configuração efetiva e quantidade de Steps
    waves   → índices dos Steps de cada wave planejada
    steps   → estado por Step, indexado por `<index>:<kind>`
    events  → Event Log na ordem exata das chamadas

Regras:
    - Nada é registrado implicitamente: cada evento vem de uma chamada da API
    - Datas são normalizadas para UTC (naive = UTC) e gravadas em ISO-8601
    - `to_dict`/`from_dict` e `save_manifest`/`load_manifest` são inversos

Depois de uma falha, `steps_with_status("success")` diz exatamente quais
artefatos chegaram a ser materializados.
"""

from __future__ import annotations

import copy
import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


RUNNING = "running"
SUCCESS = "success"
FAILED = "failed"


def _utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


def _stamp(dt: datetime) -> str:
    return _utc(dt).isoformat()


def _elapsed_ms(started: Optional[str], ended: datetime) -> int:
    if not started:
        return 0
    delta = _utc(ended) - _utc(datetime.fromisoformat(started))
    return max(0, int(delta.total_seconds() * 1000))


@dataclass
class RunManifest:
    """Estrutura serializável do Manifest v1 (ver docstring do módulo)."""

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    waves: List[List[int]] = field(default_factory=list)
    steps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunManifest":
        def section(key: str, empty: Any) -> Any:
            value = data.get(key)
            return copy.deepcopy(value) if value else empty

        return cls(
            run=section("run", {}),
            inputs=section("inputs", {}),
            waves=section("waves", []),
            steps=section("steps", {}),
            events=section("events", []),
        )

    def steps_with_status(self, status: str) -> List[str]:
        return [step_id for step_id, state in self.steps.items() if state.get("status") == status]


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    pixelflow_version: str,
    config_hash: str,
    step_count: int,
    pipeline_name: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> RunManifest:
    """
    Abre o Manifest de uma run.

    O Event Log começa vazio: `run_started` é emitido pelo Engine depois
    do planejamento, via `add_event`. `meta` são os metadados livres do
    RunContext (origem da run, usuário...), copiados como estão.
    """
    return RunManifest(
        run={
            "run_id": run_id,
            "started_at": _stamp(started_at),
            "pipeline": pipeline_name,
            "pixelflow_version": pixelflow_version,
            "meta": dict(meta or {}),
        },
        inputs={"config_hash": config_hash, "step_count": step_count},
    )


def add_event(
    manifest: RunManifest,
    *,
    event_type: str,
    ts: datetime,
    step_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    event: Dict[str, Any] = {"event_type": event_type, "timestamp": _stamp(ts)}
    if step_id is not None:
        event["step_id"] = step_id
    if payload is not None:
        event["payload"] = payload
    manifest.events.append(event)


def record_waves(manifest: RunManifest, waves: List[List[int]]) -> None:
    manifest.waves = [list(w) for w in waves]


def _update_step(manifest: RunManifest, step_id: str, **fields: Any) -> Dict[str, Any]:
    state = manifest.steps.setdefault(step_id, {"step_id": step_id})
    state.update(fields)
    return state


def step_started(manifest: RunManifest, *, step_id: str, kind: str, wave: int, ts: datetime) -> None:
    _update_step(manifest, step_id, kind=kind, wave=wave, status=RUNNING, started_at=_stamp(ts))
    add_event(manifest, event_type="step_started", ts=ts, step_id=step_id, payload={"kind": kind, "wave": wave})


def step_finished(
    manifest: RunManifest,
    *,
    step_id: str,
    ts: datetime,
    output_name: Optional[str] = None,
    artifact: Optional[Dict[str, Any]] = None,
) -> None:
    """Marca o Step como `success`, com duração desde `step_started` e metadados leves do valor."""
    started = manifest.steps.get(step_id, {}).get("started_at")
    duration = _elapsed_ms(started, ts)
    _update_step(
        manifest,
        step_id,
        status=SUCCESS,
        finished_at=_stamp(ts),
        duration_ms=duration,
        output_name=output_name,
        artifact=dict(artifact or {}),
    )
    add_event(
        manifest,
        event_type="step_finished",
        ts=ts,
        step_id=step_id,
        payload={"status": SUCCESS, "duration_ms": duration},
    )


def step_failed(manifest: RunManifest, *, step_id: str, ts: datetime, error: Dict[str, Any]) -> None:
    _update_step(manifest, step_id, status=FAILED, finished_at=_stamp(ts), error=dict(error))
    add_event(manifest, event_type="step_failed", ts=ts, step_id=step_id, payload={"error": error.get("message")})


def save_manifest(manifest: RunManifest, path: Union[str, Path]) -> None:
    """Grava o Manifest como JSON (UTF-8, chaves ordenadas), criando diretórios."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2, sort_keys=True)
    target.write_text(text, encoding="utf-8")


def load_manifest(path: Union[str, Path]) -> RunManifest:
    return RunManifest.from_dict(json.loads(Path(path).read_text(encoding="utf-8")))
