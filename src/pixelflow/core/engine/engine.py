"""
Engine de execução do pipeline do Pixelflow.

O Engine conduz uma run completa:

    1. build_dependency_graph → ConfigurationError em `out` duplicado
    2. compute_waves          → CircularOrMissingDependencyError
    3. para cada wave, em ordem estrita:
         a. constrói uma task por nó (resolve colaborador e entradas)
            antes de lançar qualquer task da wave
         b. executa as tasks via `run_bounded` com o limite da run
         c. sucesso → vincula as saídas na binding table do RunContext
            falha   → PipelineStepError; waves restantes são abandonadas
    4. monta o PipelineResult na ordem original dos Steps

Máquina de estados da run (`RunState`):
    PENDING → BUILT → SCHEDULED → EXECUTING → COMPLETED | FAILED

Ajustes de rastreabilidade:
- Eventos estruturados no RunContext (run, wave e step).
- Manifest opcional (config `engine.manifest`) com estado por Step,
  composição das waves e erro serializado em caso de falha.

Erros estruturais abortam antes de qualquer chamada a colaboradores.
Falhas de runtime não desfazem waves já concluídas.
"""

from __future__ import annotations

import asyncio
import inspect
from datetime import datetime, timezone
from enum import Enum
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from pixelflow._version import __version__
from pixelflow.core.config.hashing import compute_config_hash
from pixelflow.core.config.settings import (
    effective_config,
    manifest_enabled,
    parse_concurrency,
    resolve_concurrency,
)
from pixelflow.core.errors import exception_to_payload
from pixelflow.core.exceptions import (
    PipelineStepError,
    TaskFailedError,
    UnknownCollaboratorError,
)
from pixelflow.core.pipeline.context import RunContext
from pixelflow.core.pipeline.definition import PipelineDefinition
from pixelflow.core.pipeline.registry import CollaboratorRegistry
from pixelflow.core.pipeline.step import DeriveStep, PersistStep, ProduceStep, Step
from pixelflow.core.pipeline.types import Artifact, PersistResult, PipelineResult, StepOutcome
from pixelflow.core.traceability import manifest as mf

from .executor import run_bounded
from .graph import GraphNode, build_dependency_graph
from .planner import Wave, compute_waves


RUN_STEP_ID = "run"

_FROM_CONFIG = object()


class RunState(str, Enum):
    PENDING = "pending"
    BUILT = "built"
    SCHEDULED = "scheduled"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


def _now() -> datetime:
    return datetime.now(timezone.utc)


async def _invoke(fn: Callable[..., Any], *args: Any) -> Any:
    """Chama um colaborador síncrono (em thread) ou assíncrono."""
    if inspect.iscoroutinefunction(fn):
        return await fn(*args)
    value = await asyncio.to_thread(fn, *args)
    if inspect.isawaitable(value):
        value = await value
    return value


def _describe_value(value: Any) -> Dict[str, Any]:
    """Metadados leves de um valor vinculado, para o Manifest."""
    if isinstance(value, Artifact):
        return {
            "type": "artifact",
            "format": value.format,
            "bytes": value.size,
            "width": value.width,
            "height": value.height,
        }
    if isinstance(value, PersistResult):
        return {
            "type": "persist_result",
            "location": value.location,
            "persister": value.persister,
            "size": value.size,
        }
    return {"type": type(value).__name__}


class Engine:
    """Engine canônico do Pixelflow (graph builder + planner + executor)."""

    def __init__(
        self,
        *,
        steps: Sequence[Step],
        registry: CollaboratorRegistry,
        ctx: Optional[RunContext] = None,
        concurrency: Any = _FROM_CONFIG,
        name: Optional[str] = None,
    ):
        self.steps: List[Step] = list(steps)
        self.registry = registry
        self.ctx: RunContext = ctx if ctx is not None else RunContext.create(config=effective_config())
        self.name = name
        if concurrency is _FROM_CONFIG:
            self.concurrency: Optional[int] = resolve_concurrency(self.ctx.config)
        else:
            self.concurrency = parse_concurrency(concurrency)

        self.state = RunState.PENDING
        self.current_wave: Optional[int] = None
        self.waves: List[Wave] = []

    # ------------------------------------------------------------------
    # Rastreamento
    # ------------------------------------------------------------------
    @property
    def manifest(self) -> Optional[mf.RunManifest]:
        return self.ctx.manifest

    def _event(self, event_type: str, *, step_id: Optional[str] = None, **payload: Any) -> None:
        if self.manifest is not None:
            mf.add_event(self.manifest, event_type=event_type, ts=_now(), step_id=step_id, payload=payload or None)

    def _start_manifest(self) -> None:
        if not manifest_enabled(self.ctx.config):
            return
        self.ctx.manifest = mf.create_manifest(
            run_id=self.ctx.run_id,
            started_at=self.ctx.created_at,
            pixelflow_version=__version__,
            config_hash=compute_config_hash(self.ctx.config),
            step_count=len(self.steps),
            pipeline_name=self.name,
            meta=self.ctx.meta,
        )

    def _step_started(self, node: GraphNode, wave: Wave) -> None:
        self.ctx.log(step_id=node.label, level="INFO", message="step started", wave=wave.index)
        if self.manifest is not None:
            mf.step_started(self.manifest, step_id=node.label, kind=node.step.kind.value, wave=wave.index, ts=_now())

    def _step_finished(self, node: GraphNode, value: Any) -> None:
        self.ctx.log(step_id=node.label, level="INFO", message="step finished", output=node.output_name)
        if self.manifest is not None:
            mf.step_finished(
                self.manifest,
                step_id=node.label,
                ts=_now(),
                output_name=node.output_name,
                artifact=_describe_value(value),
            )

    def _step_failed(self, node: GraphNode, exc: Exception) -> None:
        self.ctx.log(
            step_id=node.label,
            level="ERROR",
            message="step failed",
            error=str(exc),
            exception_class=exc.__class__.__name__,
        )
        if self.manifest is not None:
            mf.step_failed(self.manifest, step_id=node.label, ts=_now(), error=exception_to_payload(exc).to_dict())

    def _fail(self, exc: Exception) -> None:
        self.state = RunState.FAILED
        payload = exception_to_payload(exc).to_dict()
        self.ctx.log(step_id=RUN_STEP_ID, level="ERROR", message="run failed", error=payload)
        self._event("run_failed", error=payload, wave=self.current_wave)

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------
    def _prepare_call(self, node: GraphNode) -> Callable[[], Awaitable[Any]]:
        step = node.step
        try:
            if isinstance(step, ProduceStep):
                producer = self.registry.producer(step.producer)
                return partial(_invoke, producer.generate, dict(step.params))
            if isinstance(step, DeriveStep):
                transformer = self.registry.transformer(step.transformer)
                source = self.ctx.resolve(step.input, step_index=node.index)
                return partial(_invoke, transformer.transform, source, dict(step.params))
            if isinstance(step, PersistStep):
                persister = self.registry.persister(step.persister)
                source = self.ctx.resolve(step.input, step_index=node.index)
                return partial(_invoke, persister.persist, source, step.destination)
        except UnknownCollaboratorError as e:
            raise UnknownCollaboratorError(
                f"Step {node.index}: {e.message}",
                details={**e.details, "step_index": node.index},
                hint=e.hint,
            ) from None
        raise TypeError(f"Unsupported step type: {type(step).__name__}")

    def _build_task(self, node: GraphNode, wave: Wave) -> Callable[[], Awaitable[Any]]:
        call = self._prepare_call(node)

        async def task() -> Any:
            self._step_started(node, wave)
            try:
                value = await call()
            except Exception as exc:
                self._step_failed(node, exc)
                raise
            self._step_finished(node, value)
            return value

        return task

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------
    async def execute(self) -> PipelineResult:
        if self.state is not RunState.PENDING:
            raise RuntimeError("Engine instances execute a single run; create a new Engine")

        self.registry.freeze()
        self._start_manifest()

        try:
            return await self._execute()
        except Exception as e:
            self._fail(e)
            raise

    async def _execute(self) -> PipelineResult:
        nodes = build_dependency_graph(self.steps)
        self.state = RunState.BUILT

        self.waves = compute_waves(nodes)
        self.state = RunState.SCHEDULED
        if self.manifest is not None:
            mf.record_waves(self.manifest, [w.step_indexes for w in self.waves])

        self.ctx.log(
            step_id=RUN_STEP_ID,
            level="INFO",
            message="run started",
            steps=len(nodes),
            waves=len(self.waves),
            concurrency=self.concurrency,
        )
        self._event("run_started", steps=len(nodes), waves=len(self.waves), concurrency=self.concurrency)

        self.state = RunState.EXECUTING
        values: Dict[int, Any] = {}

        for wave in self.waves:
            self.current_wave = wave.index
            self.ctx.log(step_id=RUN_STEP_ID, level="INFO", message="wave started", wave=wave.index, steps=wave.step_indexes)
            self._event("wave_started", wave=wave.index, steps=wave.step_indexes)

            tasks = [self._build_task(node, wave) for node in wave.nodes]

            try:
                results = await run_bounded(tasks, self.concurrency)
            except TaskFailedError as e:
                node = wave.nodes[e.index]
                raise PipelineStepError(
                    f"Step {node.index} ({node.step.kind.value}) failed: {e.error}",
                    details={
                        "step_index": node.index,
                        "kind": node.step.kind.value,
                        "output_name": node.output_name,
                        "wave": wave.index,
                    },
                    hint="Corrija a falha do colaborador e reexecute a pipeline desde o início",
                    step_index=node.index,
                    output_name=node.output_name,
                    cause=e.error,
                    bound_names=self.ctx.bound_names(),
                ) from e.error

            for node, value in zip(wave.nodes, results):
                for name in node.outputs:
                    self.ctx.bind(name, value)
                values[node.index] = value

        self.state = RunState.COMPLETED
        self.ctx.log(step_id=RUN_STEP_ID, level="INFO", message="run completed", steps=len(nodes))
        self._event("run_finished", steps=len(nodes))

        return PipelineResult(
            run_id=self.ctx.run_id,
            name=self.name,
            outcomes=[
                StepOutcome(
                    step_index=node.index,
                    kind=node.step.kind,
                    output_name=node.output_name,
                    value=values[node.index],
                )
                for node in nodes
            ],
            wave_sizes=[len(w) for w in self.waves],
        )

    def run(self) -> PipelineResult:
        """Executa a run de forma síncrona (não usar dentro de um event loop ativo)."""
        return asyncio.run(self.execute())


def run_pipeline(
    steps: Sequence[Step],
    registry: CollaboratorRegistry,
    *,
    concurrency: Any = _FROM_CONFIG,
    config: Optional[Dict[str, Any]] = None,
    name: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> PipelineResult:
    """Atalho síncrono: cria RunContext (com `meta`) e Engine e executa a pipeline."""
    ctx = RunContext.create(config=effective_config(config), **(meta or {}))
    engine = Engine(steps=steps, registry=registry, ctx=ctx, concurrency=concurrency, name=name)
    return engine.run()


def run_definition(
    definition: PipelineDefinition,
    registry: CollaboratorRegistry,
    *,
    config: Optional[Dict[str, Any]] = None,
    meta: Optional[Dict[str, Any]] = None,
) -> PipelineResult:
    """Executa uma pipeline declarada; `concurrency` do documento tem prioridade sobre a config."""
    concurrency = definition.concurrency if definition.concurrency_declared else _FROM_CONFIG
    return run_pipeline(
        definition.steps,
        registry,
        concurrency=concurrency,
        config=config,
        name=definition.name,
        meta=meta,
    )
