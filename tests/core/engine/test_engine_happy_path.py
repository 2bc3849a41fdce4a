# tests/core/engine/test_engine_happy_path.py
"""
Testes do fluxo feliz do Engine.

Este módulo valida uma run completa (graph → waves → execução) usando
colaboradores fake, garantindo que:

- o PipelineResult segue a ordem original dos Steps
- Artifacts fluem entre Steps pela binding table
- persist sem `persister` usa o persister default do registry
- colaboradores síncronos e assíncronos são aceitos
- a máquina de estados termina em COMPLETED
- o Manifest registra waves, estado por Step e eventos da run
- `meta` do RunContext chega ao Manifest, inclusive via run_definition

Limites explícitos:
    - Não valida falhas (ver test_engine_fail_fast)
    - Não usa codecs de imagem, filesystem ou rede
"""

import asyncio

import pytest

from pixelflow.core.config.errors import InvalidConcurrencyError
from pixelflow.core.engine.engine import Engine, RunState, run_definition, run_pipeline
from pixelflow.core.exceptions import RegistryFrozenError
from pixelflow.core.pipeline.definition import parse_pipeline
from pixelflow.core.pipeline.registry import CollaboratorRegistry
from pixelflow.core.pipeline.step import DeriveStep, PersistStep, ProduceStep
from pixelflow.core.pipeline.types import Artifact, PersistResult, StepKind, StepStatus
from pixelflow.core.traceability import manifest as mf


def _thumbnail_steps():
    return [
        ProduceStep(producer="shapes", out="original", params={"label": "logo"}),
        DeriveStep(input="original", transformer="resize", out="thumb", params={"width": 200}),
        PersistStep(input="thumb", destination="out/thumb.png"),
        PersistStep(input="original", destination="archive/original.png", out="receipt", persister="archive"),
    ]


def test_run_returns_outcomes_in_step_order(registry):
    result = run_pipeline(_thumbnail_steps(), registry)

    assert len(result) == 4
    assert [o.step_index for o in result] == [0, 1, 2, 3]
    assert [o.kind for o in result] == [
        StepKind.PRODUCE,
        StepKind.DERIVE,
        StepKind.PERSIST,
        StepKind.PERSIST,
    ]
    assert all(o.status is StepStatus.SUCCESS for o in result)
    assert result.wave_sizes == [1, 2, 1]


def test_artifacts_flow_between_steps(registry):
    result = run_pipeline(_thumbnail_steps(), registry)

    original = result[0].value
    thumb = result[1].value
    assert isinstance(original, Artifact)
    assert original.data == b"logo"
    assert thumb.data == b"logo-resized"
    assert thumb.width == 200

    resize = registry.transformer("resize")
    assert resize.calls == [(original, {"width": 200})]


def test_persist_uses_default_or_named_persister(registry):
    result = run_pipeline(_thumbnail_steps(), registry)

    default_ack = result[2].value
    archive_ack = result[3].value
    assert isinstance(default_ack, PersistResult)
    assert default_ack.location == "out/thumb.png"
    assert default_ack.persister == "memory"
    assert result[2].output_name is None
    assert archive_ack.persister == "archive"

    assert "out/thumb.png" in registry.persister("memory").stored
    assert "archive/original.png" in registry.persister("archive").stored


def test_result_bindings_expose_named_outputs(registry):
    result = run_pipeline(_thumbnail_steps(), registry)

    assert sorted(result.bindings()) == ["original", "receipt", "thumb"]


def test_sync_transformer_runs_in_worker_thread(registry):
    steps = [
        ProduceStep(producer="qr", out="code"),
        DeriveStep(input="code", transformer="sync", out="code2"),
    ]

    result = run_pipeline(steps, registry)

    assert result[1].value.data == b"qr-sync"


def test_engine_state_and_context(registry, dummy_ctx):
    engine = Engine(steps=_thumbnail_steps(), registry=registry, ctx=dummy_ctx, name="thumbnails")
    assert engine.state is RunState.PENDING

    result = engine.run()

    assert engine.state is RunState.COMPLETED
    assert result.run_id == "run-test-001"
    assert result.name == "thumbnails"
    assert [w.step_indexes for w in engine.waves] == [[0], [1, 3], [2]]
    assert dummy_ctx.bound_names() == ["original", "thumb", "receipt"]
    assert all(e["run_id"] == "run-test-001" for e in dummy_ctx.events)
    messages = [e["message"] for e in dummy_ctx.events]
    assert messages[0] == "run started"
    assert messages[-1] == "run completed"
    assert messages.count("wave started") == 3


def test_engine_records_manifest(registry, dummy_ctx):
    engine = Engine(steps=_thumbnail_steps(), registry=registry, ctx=dummy_ctx, name="thumbnails")
    engine.run()

    manifest = dummy_ctx.manifest
    assert manifest is not None
    assert manifest.run["run_id"] == "run-test-001"
    assert manifest.run["pipeline"] == "thumbnails"
    assert manifest.run["meta"] == {"source": "pytest"}
    assert manifest.inputs["step_count"] == 4
    assert len(manifest.inputs["config_hash"]) == 64
    assert manifest.waves == [[0], [1, 3], [2]]
    assert sorted(manifest.steps_with_status("success")) == ["0:produce", "1:derive", "2:persist", "3:persist"]
    assert manifest.steps["1:derive"]["output_name"] == "thumb"
    assert manifest.steps["1:derive"]["artifact"]["bytes"] == len(b"logo-resized")

    types = [e["event_type"] for e in manifest.events]
    assert types[0] == "run_started"
    assert types[-1] == "run_finished"
    assert types.count("wave_started") == 3
    assert types.count("step_finished") == 4


def test_manifest_can_be_disabled(registry, dummy_ctx):
    dummy_ctx.config["engine"]["manifest"] = False

    Engine(steps=_thumbnail_steps(), registry=registry, ctx=dummy_ctx).run()

    assert dummy_ctx.manifest is None


def test_engine_runs_once(registry, dummy_ctx):
    engine = Engine(steps=_thumbnail_steps(), registry=registry, ctx=dummy_ctx)
    engine.run()

    with pytest.raises(RuntimeError):
        engine.run()


def test_registry_is_frozen_by_the_run(registry, fakes):
    run_pipeline(_thumbnail_steps(), registry)

    assert registry.frozen
    with pytest.raises(RegistryFrozenError):
        registry.register_producer("late", fakes.FakeProducer("late"))


def test_empty_pipeline_completes(registry):
    result = run_pipeline([], registry)

    assert len(result) == 0
    assert result.wave_sizes == []


def test_execute_inside_running_loop(registry, dummy_ctx):
    async def main():
        engine = Engine(steps=_thumbnail_steps(), registry=registry, ctx=dummy_ctx)
        return await engine.execute()

    result = asyncio.run(main())

    assert len(result) == 4


# ---------------------------------------------------------------------------
# Concorrência
# ---------------------------------------------------------------------------

class TrackingProducer:
    def __init__(self):
        self.active = 0
        self.peak = 0

    async def generate(self, params):
        self.active += 1
        self.peak = max(self.peak, self.active)
        await asyncio.sleep(0.02)
        self.active -= 1
        return Artifact(data=str(params.get("n")).encode("utf-8"))


def _tracking_registry():
    reg = CollaboratorRegistry()
    producer = TrackingProducer()
    reg.register_producer("track", producer)
    return reg, producer


def _wide_steps(n):
    return [ProduceStep(producer="track", out=f"img{i}", params={"n": i}) for i in range(n)]


def test_concurrency_limit_from_config_is_respected():
    reg, producer = _tracking_registry()

    result = run_pipeline(_wide_steps(5), reg, config={"engine": {"concurrency": 2}})

    assert producer.peak == 2
    assert [o.value.data for o in result] == [b"0", b"1", b"2", b"3", b"4"]


def test_explicit_concurrency_overrides_config():
    reg, producer = _tracking_registry()

    run_pipeline(_wide_steps(4), reg, concurrency=1, config={"engine": {"concurrency": 3}})

    assert producer.peak == 1


def test_unbounded_concurrency_runs_whole_wave_together():
    reg, producer = _tracking_registry()

    run_pipeline(_wide_steps(4), reg, concurrency="unbounded")

    assert producer.peak == 4


def test_invalid_concurrency_is_rejected_before_running(registry):
    with pytest.raises(InvalidConcurrencyError):
        Engine(steps=_thumbnail_steps(), registry=registry, concurrency=0)


def test_run_definition_uses_document_concurrency():
    reg, producer = _tracking_registry()
    definition = parse_pipeline(
        {
            "name": "wide",
            "concurrency": 1,
            "steps": [{"kind": "produce", "producer": "track", "out": f"i{n}", "params": {"n": n}} for n in range(3)],
        }
    )

    result = run_definition(definition, reg, config={"engine": {"concurrency": 3}})

    assert producer.peak == 1
    assert result.name == "wide"
    assert len(result) == 3


def test_run_definition_forwards_meta_to_manifest(registry, monkeypatch):
    opened = []
    create_manifest = mf.create_manifest

    def recording_create_manifest(**kwargs):
        manifest = create_manifest(**kwargs)
        opened.append(manifest)
        return manifest

    monkeypatch.setattr(mf, "create_manifest", recording_create_manifest)
    definition = parse_pipeline({"name": "thumbnails", "steps": [{"kind": "produce", "producer": "shapes", "out": "a"}]})

    run_definition(definition, registry, meta={"source": "cli", "user": "ops"})

    assert len(opened) == 1
    assert opened[0].run["meta"] == {"source": "cli", "user": "ops"}
    assert opened[0].run["pipeline"] == "thumbnails"
