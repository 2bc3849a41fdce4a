# tests/core/pipeline/test_step_model.py
"""
Testes do modelo de Step.

Garantem que as três variantes são dados imutáveis e que entradas e
saídas são extraídas de forma exaustiva.
"""

import dataclasses

import pytest

from pixelflow.core.pipeline.step import (
    DeriveStep,
    PersistStep,
    ProduceStep,
    step_inputs,
    step_label,
    step_outputs,
)
from pixelflow.core.pipeline.types import StepKind


def test_each_variant_declares_its_kind():
    assert ProduceStep(producer="shapes", out="a").kind is StepKind.PRODUCE
    assert DeriveStep(input="a", transformer="resize", out="b").kind is StepKind.DERIVE
    assert PersistStep(input="b", destination="out/b.png").kind is StepKind.PERSIST


def test_inputs_and_outputs():
    produce = ProduceStep(producer="shapes", out="a", params={"width": 10})
    derive = DeriveStep(input="a", transformer="resize", out="b")
    persist = PersistStep(input="b", destination="out/b.png")
    persist_named = PersistStep(input="b", destination="out/b.png", out="ack")

    assert step_inputs(produce) == ()
    assert step_outputs(produce) == ("a",)
    assert step_inputs(derive) == ("a",)
    assert step_outputs(derive) == ("b",)
    assert step_inputs(persist) == ("b",)
    assert step_outputs(persist) == ()
    assert step_outputs(persist_named) == ("ack",)


def test_steps_are_immutable():
    step = ProduceStep(producer="shapes", out="a")
    with pytest.raises(dataclasses.FrozenInstanceError):
        step.out = "b"


def test_unknown_step_type_is_rejected():
    with pytest.raises(TypeError):
        step_inputs("produce")
    with pytest.raises(TypeError):
        step_outputs(object())


def test_step_label():
    assert step_label(3, PersistStep(input="b", destination="x")) == "3:persist"
