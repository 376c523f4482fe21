"""
Early Warning Service - Request orchestration.

============================================================
PURPOSE
============================================================
Runs one monitoring request end to end:

1. Retrieve documents (concurrent fan-out, bounded)
2. Score and aggregate (synchronous engine)
3. Enrich the narrative (bounded, optional)
4. Persist the audit trail (optional, never fatal)

============================================================
COMPOSITION
============================================================
build_service() is the composition root. It constructs the
text generator, registry and persistence explicitly; nothing
here is a module-level singleton.

============================================================
"""

import asyncio
import logging
import re
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from database.engine import (
    DatabasePersistenceError,
    create_all_tables,
    create_database_engine,
    create_session_factory,
    get_database_url,
    transaction_scope,
    verify_database_connection,
)
from narrative import (
    DEFAULT_LANGUAGE,
    CounterNarrativeGenerator,
    CredibilityVerifier,
    DeepSeekTextGenerator,
    NarrativeSummarizer,
    TextGenerator,
)
from news_sources import (
    DocumentRegistry,
    GazetteNoticeSource,
    ParliamentHansardSource,
    StaticDocumentSource,
)
from risk_scoring import (
    CORRUPTION,
    CRISIS,
    MISINFORMATION,
    CredibilityAssessment,
    CredibilityAssessor,
    Document,
    FactCheckEvidence,
    IndicatorCatalog,
    MonitoringRepository,
    MonitoringResult,
    RiskScoringConfig,
    RiskScoringEngine,
    extract_key_claims,
)


logger = logging.getLogger(__name__)


DEFAULT_TIME_RANGE_HOURS = 24
MAX_TIME_RANGE_HOURS = 720

_TIMEFRAME_RE = re.compile(r"^\s*(\d+)\s*([hd])\s*$", re.IGNORECASE)


def parse_timeframe(timeframe: Optional[str]) -> int:
    """
    Convert "24h" / "7d" style timeframes to hours.

    Unrecognized values fall back to 24 hours.
    """
    if not timeframe:
        return DEFAULT_TIME_RANGE_HOURS
    match = _TIMEFRAME_RE.match(timeframe)
    if not match:
        logger.debug(f"Unrecognized timeframe {timeframe!r}, using 24h")
        return DEFAULT_TIME_RANGE_HOURS

    value, unit = int(match.group(1)), match.group(2).lower()
    hours = value * 24 if unit == "d" else value
    return max(1, min(MAX_TIME_RANGE_HOURS, hours))


class EarlyWarningService:
    """
    Orchestrates retrieval, scoring, enrichment and persistence.

    All collaborators are injected; build_service() wires the
    production set.
    """

    def __init__(
        self,
        engine: RiskScoringEngine,
        registry: DocumentRegistry,
        summarizer: Optional[NarrativeSummarizer] = None,
        verifier: Optional[CredibilityVerifier] = None,
        session_factory: Optional[async_sessionmaker] = None,
        generator: Optional[TextGenerator] = None,
        counter_narrator: Optional[CounterNarrativeGenerator] = None,
        database_engine: Optional[AsyncEngine] = None,
    ) -> None:
        self.engine = engine
        self.registry = registry
        self.summarizer = summarizer or NarrativeSummarizer(config=engine.config.narrative)
        self.verifier = verifier or CredibilityVerifier(config=engine.config.narrative)
        self.counter_narrator = counter_narrator or CounterNarrativeGenerator(config=engine.config.narrative)
        self._session_factory = session_factory
        self._database_engine = database_engine
        self._generator = generator
        self._assessor = CredibilityAssessor(
            engine.catalogs.get(MISINFORMATION),
            recommender=engine.recommender,
        )

    @property
    def config(self) -> RiskScoringConfig:
        return self.engine.config

    @property
    def persistence_enabled(self) -> bool:
        return self._session_factory is not None and self.config.persist_results

    # ---- retrieval

    async def _retrieve(self, query: str, time_range_hours: int = DEFAULT_TIME_RANGE_HOURS) -> list[Document]:
        return await self.registry.fetch_documents(
            query,
            limit=self.config.sources.documents_per_source,
            time_range_hours=time_range_hours,
        )

    # ---- enrichment and persistence

    async def _enrich(self, result: MonitoringResult, documents: Sequence[Document]) -> MonitoringResult:
        if not documents:
            return result
        narrative = await self.summarizer.summarize(result.overall, result.alerts, documents)
        return replace(result, narrative=narrative.text, narrative_source=narrative.source)

    async def _persist(self, result: MonitoringResult, requested_entity: Optional[str]) -> None:
        if not self.persistence_enabled:
            return
        try:
            async with transaction_scope(self._session_factory) as session:
                snapshot = await MonitoringRepository(session).save_result(
                    result,
                    requested_entity=requested_entity,
                    engine_version=self.config.engine_version,
                )
            logger.info(f"Persisted monitoring snapshot {snapshot.id}")
        except Exception as e:
            logger.error(f"Failed to persist monitoring result: {e}")

    # ---- operations

    async def monitor_crisis(
        self,
        county: Optional[str] = None,
        timeframe: str = "24h",
        include_preventive_measures: bool = True,
    ) -> MonitoringResult:
        """
        Crisis early warning for one county or the whole country.

        Raises:
            RiskScoringError: On catalog or profile misconfiguration
        """
        query = f"political crisis {county or 'kenya'} conflict tension security"
        documents = await self._retrieve(query, parse_timeframe(timeframe))

        result = self.engine.assess(
            documents,
            CRISIS,
            include_preventive_measures=include_preventive_measures,
            requested_entity=county,
        )
        result = await self._enrich(result, documents)
        await self._persist(result, county)
        return result

    async def assess_corruption(self, entity: str) -> MonitoringResult:
        """Corruption risk for one named public entity."""
        documents = await self._retrieve(f"{entity} corruption audit procurement")

        result = self.engine.assess(
            documents,
            CORRUPTION,
            entity_candidates=[entity],
            requested_entity=entity,
        )
        result = await self._enrich(result, documents)
        await self._persist(result, entity)
        return result

    async def detect_misinformation(
        self,
        content: str,
        source: Optional[str] = None,
        language: str = DEFAULT_LANGUAGE,
        generate_counter_narrative: bool = True,
    ) -> CredibilityAssessment:
        """
        Credibility assessment for one piece of content.

        Fact-check retrieval and AI verification run concurrently;
        each degrades to its neutral value on failure. The
        counter-narrative is drafted afterwards from the evidence.
        """
        claims = extract_key_claims(content)
        query = " ".join(claims[:2])

        if query:
            documents, verification = await asyncio.gather(
                self._retrieve(query),
                self.verifier.verify(content),
            )
        else:
            documents, verification = [], await self.verifier.verify(content)

        evidence = FactCheckEvidence.from_documents(content, documents)
        assessment = self._assessor.assess(
            content,
            source=source,
            evidence=evidence,
            ai_likelihood=verification.likelihood_accurate,
            ai_concerns=verification.key_concerns,
        )

        if not generate_counter_narrative:
            return assessment
        counter = await self.counter_narrator.generate(content, evidence, language)
        return replace(assessment, counter_narrative=counter.text)

    # ---- lifecycle

    async def prepare_storage(self) -> bool:
        """
        Verify the database and create missing tables.

        Persistence is switched off when the database cannot be
        prepared; monitoring keeps running without it.

        Returns:
            True if results will be persisted
        """
        if not self.persistence_enabled or self._database_engine is None:
            return self.persistence_enabled

        try:
            await verify_database_connection(self._database_engine)
            await create_all_tables(self._database_engine)
        except (DatabasePersistenceError, OSError) as e:
            logger.error(f"Persistence disabled: {e}")
            self._session_factory = None
            return False
        return True

    async def close(self) -> None:
        await self.registry.close()
        close = getattr(self._generator, "close", None)
        if close is not None:
            await close()
        if self._database_engine is not None:
            await self._database_engine.dispose()


# ============================================================
# COMPOSITION ROOT
# ============================================================


def build_registry(config: RiskScoringConfig) -> DocumentRegistry:
    """Registry with every configured provider."""
    sources = config.sources
    registry = DocumentRegistry(source_timeout=sources.source_timeout_seconds)

    if sources.static_documents_path:
        registry.register(StaticDocumentSource.from_yaml(Path(sources.static_documents_path)))
    registry.register(ParliamentHansardSource(base_url=sources.parliament_api_url))
    registry.register(GazetteNoticeSource(base_url=sources.gazette_api_url))
    return registry


def build_service(
    config: Optional[RiskScoringConfig] = None,
    generator: Optional[TextGenerator] = None,
    registry: Optional[DocumentRegistry] = None,
    session_factory: Optional[async_sessionmaker] = None,
) -> EarlyWarningService:
    """
    Wire the production service.

    Args:
        config: Configuration; read from the environment if None
        generator: Text generator; DeepSeek from config if None
        registry: Document registry; providers from config if None
        session_factory: Async session factory; from DATABASE_URL
            if None and persistence is enabled

    Raises:
        RiskScoringError: If a configured catalog file is malformed
    """
    config = config or RiskScoringConfig.from_env()

    catalogs = (
        IndicatorCatalog.from_yaml(Path(config.catalog_path))
        if config.catalog_path
        else IndicatorCatalog.default()
    )
    engine = RiskScoringEngine(config=config, catalogs=catalogs)

    if generator is None:
        generator = DeepSeekTextGenerator.from_config(config.narrative)
    if generator is None:
        logger.info("No text generator configured, narratives use the template")

    database_engine = None
    if session_factory is None and config.persist_results:
        database_url = get_database_url()
        if database_url:
            database_engine = create_database_engine(database_url)
            session_factory = create_session_factory(database_engine)
        else:
            logger.warning("RISK_PERSIST_RESULTS is set but DATABASE_URL is missing")

    return EarlyWarningService(
        engine=engine,
        registry=registry or build_registry(config),
        summarizer=NarrativeSummarizer(generator, config.narrative),
        verifier=CredibilityVerifier(generator, config.narrative),
        session_factory=session_factory,
        generator=generator,
        counter_narrator=CounterNarrativeGenerator(generator, config.narrative),
        database_engine=database_engine,
    )
