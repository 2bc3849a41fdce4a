"""
Fixtures compartilhados para testes do Pixelflow.

Este módulo define fixtures reutilizáveis que fornecem:
- colaboradores fake (producer, transformer, persister) síncronos e assíncronos
- um CollaboratorRegistry populado com esses colaboradores
- um RunContext determinístico

O objetivo destas fixtures é permitir testes do core (graph, planner,
executor e Engine) sem depender de:
- codecs de imagem reais
- filesystem ou rede
- serviços externos de geração ou upload

Invariantes:
    - Nenhuma fixture executa pipeline real
    - Colaboradores fake registram as chamadas recebidas para inspeção
    - Artefatos produzidos são determinísticos
"""

import asyncio
from datetime import datetime, timezone

import pytest


@pytest.fixture
def make_artifact():
    """Factory de Artifacts determinísticos."""
    from pixelflow.core.pipeline.types import Artifact

    def _make(data: bytes = b"img", fmt: str = "image/png", **kwargs):
        return Artifact(data=data, format=fmt, **kwargs)

    return _make


@pytest.fixture
def fakes():
    """
    Colaboradores fake, duck-typed conforme os contratos do registry.

    Retorna um namespace com as classes:
        - FakeProducer(tag, delay=0.0, fail=False)           (async)
        - FakeTransformer(suffix, delay=0.0, fail=False)     (async)
        - SyncTransformer(suffix)                            (sync)
        - FakePersister(name)                                (async)

    Todos registram chamadas em `calls`.
    """
    from pixelflow.core.pipeline.types import Artifact, PersistResult

    class FakeProducer:
        def __init__(self, tag: str = "shapes", delay: float = 0.0, fail: bool = False):
            self.tag = tag
            self.delay = delay
            self.fail = fail
            self.calls = []

        async def generate(self, params):
            self.calls.append(dict(params))
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail:
                raise RuntimeError(f"{self.tag} generation failed")
            label = params.get("label", self.tag)
            return Artifact(data=label.encode("utf-8"), format="image/svg+xml", source=self.tag)

    class FakeTransformer:
        def __init__(self, suffix: str = "-t", delay: float = 0.0, fail: bool = False):
            self.suffix = suffix
            self.delay = delay
            self.fail = fail
            self.calls = []

        async def transform(self, artifact, params):
            self.calls.append((artifact, dict(params)))
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail:
                raise ValueError("transform failed")
            return Artifact(
                data=artifact.data + self.suffix.encode("utf-8"),
                format=params.get("to", artifact.format),
                width=params.get("width"),
                height=params.get("height"),
            )

    class SyncTransformer:
        def __init__(self, suffix: str = "-s"):
            self.suffix = suffix
            self.calls = []

        def transform(self, artifact, params):
            self.calls.append((artifact, dict(params)))
            return Artifact(data=artifact.data + self.suffix.encode("utf-8"), format=artifact.format)

    class FakePersister:
        def __init__(self, name: str = "memory", fail: bool = False):
            self.name = name
            self.fail = fail
            self.stored = {}

        async def persist(self, artifact, destination):
            if self.fail:
                raise OSError(f"cannot write {destination}")
            self.stored[destination] = artifact
            return PersistResult(location=destination, persister=self.name, size=artifact.size)

    class _Fakes:
        pass

    ns = _Fakes()
    ns.FakeProducer = FakeProducer
    ns.FakeTransformer = FakeTransformer
    ns.SyncTransformer = SyncTransformer
    ns.FakePersister = FakePersister
    return ns


@pytest.fixture
def registry(fakes):
    """
    Registry populado com colaboradores fake.

    Nomes registrados:
        - producers: "shapes", "qr"
        - transformers: "resize", "blur", "sync"
        - persisters: "memory" (default), "archive"
    """
    from pixelflow.core.pipeline.registry import CollaboratorRegistry

    reg = CollaboratorRegistry()
    reg.register_producer("shapes", fakes.FakeProducer("shapes"))
    reg.register_producer("qr", fakes.FakeProducer("qr"))
    reg.register_transformer("resize", fakes.FakeTransformer("-resized"))
    reg.register_transformer("blur", fakes.FakeTransformer("-blurred"))
    reg.register_transformer("sync", fakes.SyncTransformer("-sync"))
    reg.register_persister("memory", fakes.FakePersister("memory"), default=True)
    reg.register_persister("archive", fakes.FakePersister("archive"))
    return reg


@pytest.fixture
def dummy_config() -> dict:
    return {"engine": {"concurrency": None, "manifest": True}}


@pytest.fixture
def dummy_ctx(dummy_config):
    """RunContext com identidade fixa e configuração mínima."""
    from pixelflow.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        meta={"source": "pytest"},
    )
