# tests/core/engine/test_planner_invalid_graph.py
"""
Testes de grafos inválidos no planner.

Garantem que entradas inexistentes e ciclos são detectados antes de
qualquer execução, e que o erro enumera todos os Steps não agendáveis
junto com os nomes que cada um aguarda.
"""

import pytest

from pixelflow.core.engine.graph import build_dependency_graph
from pixelflow.core.engine.planner import compute_waves
from pixelflow.core.exceptions import CircularOrMissingDependencyError
from pixelflow.core.pipeline.step import DeriveStep, PersistStep, ProduceStep


def test_missing_input_is_reported_by_name():
    steps = [DeriveStep(input="nonexistent", transformer="resize", out="img1")]

    with pytest.raises(CircularOrMissingDependencyError) as exc:
        compute_waves(build_dependency_graph(steps))

    assert "nonexistent" in str(exc.value)
    assert exc.value.unresolved == [{"step_index": 0, "kind": "derive", "needs": ["nonexistent"]}]


def test_cycle_is_detected():
    steps = [
        DeriveStep(input="b", transformer="resize", out="a"),
        DeriveStep(input="a", transformer="blur", out="b"),
    ]

    with pytest.raises(CircularOrMissingDependencyError) as exc:
        compute_waves(build_dependency_graph(steps))

    assert [u["step_index"] for u in exc.value.unresolved] == [0, 1]


def test_all_unresolved_steps_are_enumerated():
    """Steps bloqueados transitivamente também aparecem no erro."""
    steps = [
        ProduceStep(producer="shapes", out="ok"),
        DeriveStep(input="ghost", transformer="resize", out="x"),
        DeriveStep(input="x", transformer="blur", out="y"),
        PersistStep(input="y", destination="out/y.png"),
    ]

    with pytest.raises(CircularOrMissingDependencyError) as exc:
        compute_waves(build_dependency_graph(steps))

    unresolved = exc.value.unresolved
    assert [u["step_index"] for u in unresolved] == [1, 2, 3]
    assert unresolved[0]["needs"] == ["ghost"]
    assert unresolved[1]["needs"] == ["x"]
    assert exc.value.details["bound"] == ["ok"]
    for name in ("ghost", "x", "y"):
        assert name in str(exc.value)


def test_persist_without_out_cannot_feed_other_steps():
    steps = [
        ProduceStep(producer="shapes", out="img"),
        PersistStep(input="img", destination="out/img.png"),
        DeriveStep(input="out/img.png", transformer="resize", out="thumb"),
    ]

    with pytest.raises(CircularOrMissingDependencyError):
        compute_waves(build_dependency_graph(steps))
