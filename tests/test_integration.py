"""Integration tests: real API calls, no mocks. Requires .env with all three API keys."""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

load_dotenv()

_REQUIRED_KEYS = ["OPENAI_API_KEY", "PERPLEXITY_API_KEY", "GEMINI_API_KEY"]
_MISSING_KEYS = [k for k in _REQUIRED_KEYS if not os.environ.get(k, "").strip()]
pytestmark = pytest.mark.integration

if _MISSING_KEYS:
    pytestmark = pytest.mark.skip(reason=f"Missing API keys: {', '.join(_MISSING_KEYS)}")


async def test_full_fusion_pipeline(tmp_path: Path):
    """Run a real high-level report, verify no crash and a complete composite."""
    from config.config_loader import load_config
    from trendfusion.orchestrator import FusionOrchestrator
    from trendfusion.output import save_to_file
    from trendfusion.providers.registry import build_providers

    config = load_config()
    orchestrator = FusionOrchestrator(
        providers=build_providers(config),
        referee=config.defaults.referee,
        prompts=config.prompts,
        max_topic_length=config.defaults.max_topic_length,
    )

    result = await orchestrator.run("electric vehicles", "low")

    assert set(result.generations) == {"openai", "perplexity", "gemini"}
    assert len(result.critiques) == 6
    assert any(g.success for g in result.generations.values())
    for g in result.generations.values():
        if g.success:
            assert g.latency_sec > 0
    assert result.summary.text

    saved = save_to_file(result, tmp_path / "reports")
    content = saved.read_text(encoding="utf-8")
    assert "Trend Report" in content
    assert "**Panel:**" in content
    assert len(content) > 500
