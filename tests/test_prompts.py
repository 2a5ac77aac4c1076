"""Tests for trendfusion/prompts.py."""

import pytest

from trendfusion.models import DetailLevel, Role
from trendfusion.prompts import build_critique_prompt, build_fusion_prompt, build_prompt, parse_detail_level
from tests.conftest import outcome

DISPLAY = {"openai": "OpenAI", "perplexity": "Perplexity", "gemini": "Gemini"}


@pytest.mark.parametrize(
    "value, expected",
    [
        ("high", DetailLevel.IN_DEPTH),
        ("in-depth", DetailLevel.IN_DEPTH),
        ("low", DetailLevel.HIGH_LEVEL),
        ("high-level", DetailLevel.HIGH_LEVEL),
        ("HighLevel", DetailLevel.HIGH_LEVEL),
        (DetailLevel.IN_DEPTH, DetailLevel.IN_DEPTH),
    ],
)
def test_parse_detail_level(value, expected):
    assert parse_detail_level(value) is expected


def test_parse_detail_level_unknown():
    with pytest.raises(ValueError, match="Unknown detail level"):
        parse_detail_level("medium")


def test_build_prompt_in_depth(sample_prompts_config):
    prompt = build_prompt("electric vehicles", DetailLevel.IN_DEPTH, sample_prompts_config)
    assert prompt.startswith("In-depth analysis of electric vehicles")
    assert "2. Mega trends" in prompt


def test_build_prompt_high_level(sample_prompts_config):
    prompt = build_prompt("electric vehicles", DetailLevel.HIGH_LEVEL, sample_prompts_config)
    assert prompt == "High-level bullets about electric vehicles."


def test_build_prompt_is_deterministic(sample_prompts_config):
    assert build_prompt("EVs", DetailLevel.IN_DEPTH, sample_prompts_config) == build_prompt(
        "EVs", DetailLevel.IN_DEPTH, sample_prompts_config
    )


def test_build_prompt_keeps_braces_in_topic(sample_prompts_config):
    prompt = build_prompt("{weird} topic", DetailLevel.HIGH_LEVEL, sample_prompts_config)
    assert "{weird} topic" in prompt


def test_build_critique_prompt_wraps_report(sample_prompts_config):
    prompt = build_critique_prompt("EV sales grew 35%.", sample_prompts_config)
    assert prompt.startswith("Critique for accuracy")
    assert prompt.endswith("EV sales grew 35%.")


def test_build_fusion_prompt_labels_everything(sample_prompts_config):
    generations = {
        "openai": outcome("openai", Role.GENERATION, "EV-A"),
        "perplexity": outcome("perplexity", Role.GENERATION, "", success=False, display_name="Perplexity"),
        "gemini": outcome("gemini", Role.GENERATION, "EV-C"),
    }
    critiques = {
        ("openai", "perplexity"): outcome("perplexity", Role.CRITIQUE, "Solid."),
        ("openai", "gemini"): outcome("gemini", Role.CRITIQUE, "Missing stats."),
    }

    prompt = build_fusion_prompt("electric vehicles", generations, critiques, DISPLAY, sample_prompts_config)

    assert "Topic: electric vehicles" in prompt
    assert "3 reports (OpenAI, Perplexity, Gemini), 2 validations" in prompt
    assert "[OpenAI], [Perplexity], [Gemini]" in prompt
    assert "---OpenAI Main Output:\nEV-A" in prompt
    assert "---Perplexity Main Output:\n(No Perplexity output)" in prompt
    assert "OpenAI by Perplexity:\nSolid." in prompt
    assert "OpenAI by Gemini:\nMissing stats." in prompt
