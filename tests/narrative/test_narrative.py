"""
Tests for Narrative Enrichment.

============================================================
PURPOSE
============================================================
TEST PRINCIPLES:
- Enrichment never raises
- Slow providers degrade within the ceiling
- Malformed output falls back to the template

============================================================
"""

import asyncio
import time
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from narrative import (
    FALLBACK_COUNTER_NARRATIVE,
    GENERATED,
    SUPPORTED_LANGUAGES,
    TEMPLATE,
    CounterNarrativeGenerator,
    CredibilityVerifier,
    DeepSeekTextGenerator,
    GenerationError,
    MalformedResponseError,
    NarrativeSummarizer,
    VerificationResult,
    parse_json_object,
)
from risk_scoring import (
    CRISIS,
    Alert,
    AlertLevel,
    Document,
    FactCheckEvidence,
    IndicatorScore,
    NarrativeConfig,
    OverallScore,
)


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def config():
    return NarrativeConfig(timeout_seconds=0.2)


@pytest.fixture
def overall():
    return OverallScore(
        value=0.65,
        triggered_indicators=("violence_keywords", "political_tension"),
        per_indicator={
            "violence_keywords": IndicatorScore("violence_keywords", 7, 0.7),
            "political_tension": IndicatorScore("political_tension", 6, 0.6),
        },
        catalog_id=CRISIS,
    )


@pytest.fixture
def alerts():
    return [Alert(level=AlertLevel.CRITICAL, score=1.0, entity_name="Turkana")]


def _generator(text=None, side_effect=None):
    generator = MagicMock()
    generator.generate = AsyncMock(return_value=text, side_effect=side_effect)
    return generator


def _mock_session(status, text):
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(return_value=text)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.closed = False
    session.post = MagicMock(return_value=context)
    return session


# ============================================================
# JSON PARSING
# ============================================================

class TestParseJsonObject:

    def test_plain(self):
        assert parse_json_object('{"summary": "calm"}') == {"summary": "calm"}

    def test_code_fence(self):
        assert parse_json_object('```json\n{"summary": "calm"}\n```') == {"summary": "calm"}

    def test_surrounding_prose(self):
        assert parse_json_object('Here you go: {"summary": "calm"} Thanks') == {"summary": "calm"}

    @pytest.mark.parametrize("text", ["no json here", "[1, 2]", "{broken"])
    def test_malformed(self, text):
        with pytest.raises(MalformedResponseError):
            parse_json_object(text)


# ============================================================
# SUMMARIZER
# ============================================================

class TestNarrativeSummarizer:

    @pytest.mark.asyncio
    async def test_generated_summary(self, config, overall, alerts):
        generator = _generator('{"summary": "Tension is rising in Turkana."}')
        summarizer = NarrativeSummarizer(generator, config)

        result = await summarizer.summarize(overall, alerts)

        assert result.text == "Tension is rising in Turkana."
        assert result.source == GENERATED
        assert result.is_generated
        kwargs = generator.generate.await_args.kwargs
        assert kwargs == {"temperature": config.temperature, "max_tokens": config.max_tokens}

    @pytest.mark.asyncio
    async def test_without_generator(self, overall, alerts):
        result = await NarrativeSummarizer().summarize(overall, alerts)

        assert result.source == TEMPLATE
        assert result.text == "2 indicator(s) triggered; risk assessed as HIGH."

    @pytest.mark.asyncio
    async def test_disabled(self, overall, alerts):
        generator = _generator('{"summary": "x"}')
        summarizer = NarrativeSummarizer(generator, NarrativeConfig(enabled=False))

        result = await summarizer.summarize(overall, alerts)

        assert result.source == TEMPLATE
        generator.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_timeout_falls_back_within_ceiling(self, config, overall, alerts):
        async def slow(prompt, **kwargs):
            await asyncio.sleep(5)
            return '{"summary": "late"}'

        generator = MagicMock()
        generator.generate = slow

        started = time.monotonic()
        result = await NarrativeSummarizer(generator, config).summarize(overall, alerts)
        elapsed = time.monotonic() - started

        assert result.source == TEMPLATE
        assert "HIGH" in result.text
        assert elapsed < 2.0

    @pytest.mark.asyncio
    async def test_provider_error_falls_back(self, config, overall, alerts):
        generator = _generator(side_effect=GenerationError("boom", provider="test", status_code=503))

        result = await NarrativeSummarizer(generator, config).summarize(overall, alerts)

        assert result.source == TEMPLATE

    @pytest.mark.parametrize("text", ["not json", '{"other": 1}', '{"summary": "  "}', '{"summary": 3}'])
    @pytest.mark.asyncio
    async def test_malformed_output_falls_back(self, config, overall, alerts, text):
        result = await NarrativeSummarizer(_generator(text), config).summarize(overall, alerts)

        assert result.source == TEMPLATE

    def test_prompt_includes_scores_alerts_and_context(self, config, overall, alerts):
        documents = [Document(source="nation.co.ke", content="x" * 500)]

        prompt = NarrativeSummarizer(config=config).build_prompt(overall, alerts, documents)

        assert "violence_keywords: 0.70" in prompt
        assert "Turkana: CRITICAL (1.00)" in prompt
        assert "nation.co.ke: " + "x" * 200 + "\n" in prompt
        assert "x" * 201 not in prompt


# ============================================================
# CREDIBILITY VERIFIER
# ============================================================

class TestCredibilityVerifier:

    @pytest.mark.asyncio
    async def test_likelihood(self, config):
        verifier = CredibilityVerifier(_generator('{"likelihood_accurate": 0.8}'), config)

        result = await verifier.verify("The budget passed")

        assert result.likelihood_accurate == 0.8
        assert result.key_concerns == ()

    @pytest.mark.asyncio
    async def test_likelihood_clamped(self, config):
        verifier = CredibilityVerifier(_generator('{"likelihood_accurate": 7}'), config)

        assert (await verifier.verify("The budget passed")).likelihood_accurate == 1.0

    @pytest.mark.asyncio
    async def test_zero_is_kept(self, config):
        verifier = CredibilityVerifier(_generator('{"likelihood_accurate": 0}'), config)

        assert (await verifier.verify("The budget passed")).likelihood_accurate == 0.0

    @pytest.mark.asyncio
    async def test_key_concerns(self, config):
        text = (
            '{"likelihood_accurate": 0.3, "key_concerns": '
            '["No named source", "  ", 4, "Date is wrong", "a", "b", "c", "d"]}'
        )
        verifier = CredibilityVerifier(_generator(text), config)

        result = await verifier.verify("The budget passed")

        assert result.likelihood_accurate == 0.3
        assert result.key_concerns == ("No named source", "Date is wrong", "a", "b", "c")

    @pytest.mark.asyncio
    async def test_empty_without_generator(self):
        assert await CredibilityVerifier().verify("The budget passed") == VerificationResult()

    @pytest.mark.parametrize("text", ['{"likelihood_accurate": "high"}', '{"likelihood_accurate": true}', "?"])
    @pytest.mark.asyncio
    async def test_none_on_malformed(self, config, text):
        verifier = CredibilityVerifier(_generator(text), config)

        assert (await verifier.verify("The budget passed")).likelihood_accurate is None

    @pytest.mark.asyncio
    async def test_empty_on_error(self, config):
        verifier = CredibilityVerifier(_generator(side_effect=RuntimeError("down")), config)

        assert await verifier.verify("The budget passed") == VerificationResult()


# ============================================================
# COUNTER-NARRATIVE GENERATOR
# ============================================================

class TestCounterNarrativeGenerator:

    @pytest.fixture
    def evidence(self):
        return FactCheckEvidence(
            supporting=1,
            contradicting=1,
            supporting_excerpts=("Treasury confirmed the budget vote",),
            contradicting_excerpts=("No such vote took place",),
        )

    @pytest.mark.asyncio
    async def test_generated(self, config, evidence):
        generator = _generator("  The budget vote was held on Tuesday.  ")
        narrator = CounterNarrativeGenerator(generator, config)

        result = await narrator.generate("The budget vote was cancelled", evidence, "sw")

        assert result.text == "The budget vote was held on Tuesday."
        assert result.source == GENERATED
        prompt = generator.generate.await_args.args[0]
        assert "Jibu kwa Kiswahili" in prompt
        assert "Supporting Evidence: Treasury confirmed the budget vote" in prompt
        assert "Contradictory Evidence: No such vote took place" in prompt
        assert generator.generate.await_args.kwargs["temperature"] == narrator.TEMPERATURE

    @pytest.mark.asyncio
    async def test_without_generator(self, evidence):
        result = await CounterNarrativeGenerator().generate("claim", evidence)

        assert result.source == TEMPLATE
        assert result.text == FALLBACK_COUNTER_NARRATIVE

    @pytest.mark.asyncio
    async def test_disabled(self, evidence):
        generator = _generator("reply")
        narrator = CounterNarrativeGenerator(generator, NarrativeConfig(enabled=False))

        assert (await narrator.generate("claim", evidence)).source == TEMPLATE
        generator.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_timeout_falls_back_within_ceiling(self, config, evidence):
        async def slow(prompt, **kwargs):
            await asyncio.sleep(5)
            return "late"

        generator = MagicMock()
        generator.generate = slow

        started = time.monotonic()
        result = await CounterNarrativeGenerator(generator, config).generate("claim", evidence)

        assert result.text == FALLBACK_COUNTER_NARRATIVE
        assert time.monotonic() - started < 2.0

    @pytest.mark.parametrize("text", ["", "   ", None])
    @pytest.mark.asyncio
    async def test_empty_output_falls_back(self, config, evidence, text):
        result = await CounterNarrativeGenerator(_generator(text), config).generate("claim", evidence)

        assert result.source == TEMPLATE

    @pytest.mark.asyncio
    async def test_provider_error_falls_back(self, config):
        generator = _generator(side_effect=GenerationError("boom", provider="test"))

        result = await CounterNarrativeGenerator(generator, config).generate("claim")

        assert result.text == FALLBACK_COUNTER_NARRATIVE

    def test_unknown_language_uses_english(self):
        prompt = CounterNarrativeGenerator().build_prompt("claim", FactCheckEvidence(), "fr")

        assert "5. Respond in clear English" in prompt
        assert "Supporting Evidence: None" in prompt
        assert "Contradictory Evidence: None" in prompt

    def test_supported_languages(self):
        assert SUPPORTED_LANGUAGES == ("en", "sw", "ki", "luo")

    def test_prompt_truncates_content(self):
        prompt = CounterNarrativeGenerator().build_prompt("y" * 1000, FactCheckEvidence())

        assert "y" * CounterNarrativeGenerator.CONTENT_CHARS in prompt
        assert "y" * (CounterNarrativeGenerator.CONTENT_CHARS + 1) not in prompt


# ============================================================
# DEEPSEEK GENERATOR
# ============================================================

class TestDeepSeekTextGenerator:

    def test_from_config_requires_key(self):
        assert DeepSeekTextGenerator.from_config(NarrativeConfig()) is None
        assert DeepSeekTextGenerator.from_config(NarrativeConfig(api_key="k", enabled=False)) is None
        assert DeepSeekTextGenerator.from_config(NarrativeConfig(api_key="k")) is not None

    @pytest.mark.asyncio
    async def test_extracts_content(self):
        generator = DeepSeekTextGenerator(api_key="k", base_url="https://llm.example/")
        generator._session = _mock_session(
            200, '{"choices": [{"message": {"content": "hello"}}]}',
        )

        text = await generator.generate("prompt", temperature=0.1, max_tokens=10)

        assert text == "hello"
        url = generator._session.post.call_args.args[0]
        body = generator._session.post.call_args.kwargs["json"]
        assert url == "https://llm.example/chat/completions"
        assert body["model"] == "deepseek-chat"
        assert body["max_tokens"] == 10

    @pytest.mark.asyncio
    async def test_http_error(self):
        generator = DeepSeekTextGenerator(api_key="k")
        generator._session = _mock_session(500, "server error")

        with pytest.raises(GenerationError) as exc_info:
            await generator.generate("prompt", temperature=0.1, max_tokens=10)

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_network_error(self):
        generator = DeepSeekTextGenerator(api_key="k")
        session = MagicMock()
        session.closed = False
        session.post = MagicMock(side_effect=aiohttp.ClientConnectionError("refused"))
        generator._session = session

        with pytest.raises(GenerationError):
            await generator.generate("prompt", temperature=0.1, max_tokens=10)

    @pytest.mark.parametrize("text", ["not json", '{"choices": []}', '{"choices": [{"message": {"content": 1}}]}'])
    @pytest.mark.asyncio
    async def test_malformed_body(self, text):
        generator = DeepSeekTextGenerator(api_key="k")
        generator._session = _mock_session(200, text)

        with pytest.raises(MalformedResponseError):
            await generator.generate("prompt", temperature=0.1, max_tokens=10)
