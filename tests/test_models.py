"""Tests for trendfusion/models.py dataclasses."""

import dataclasses

import pytest

from trendfusion.models import CompositeResponse, DetailLevel, GenerationOutcome, Role


def test_detail_level_wire_values():
    assert DetailLevel("high") is DetailLevel.IN_DEPTH
    assert DetailLevel("low") is DetailLevel.HIGH_LEVEL


def test_generation_outcome_defaults():
    o = GenerationOutcome(provider="gemini", role=Role.GENERATION, success=True, text="Report")
    assert o.error_detail == ""
    assert o.token_count is None


def test_generation_outcome_is_immutable():
    o = GenerationOutcome(provider="gemini", role=Role.GENERATION, success=True, text="Report")
    with pytest.raises(dataclasses.FrozenInstanceError):
        o.text = "changed"  # type: ignore[misc]


def test_generation_outcome_equality_ignores_timing():
    a = GenerationOutcome("openai", Role.CRITIQUE, True, "Fine.", latency_sec=1.0, token_count=5)
    b = GenerationOutcome("openai", Role.CRITIQUE, True, "Fine.", latency_sec=9.0, token_count=50)
    assert a == b


def test_composite_equality_ignores_duration():
    summary = GenerationOutcome("openai", Role.FUSION, True, "Fused")
    a = CompositeResponse("EVs", DetailLevel.IN_DEPTH, "openai", summary, {}, {}, total_duration_sec=1.0)
    b = CompositeResponse("EVs", DetailLevel.IN_DEPTH, "openai", summary, {}, {}, total_duration_sec=2.0)
    assert a == b
