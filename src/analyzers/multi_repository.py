"""
Multi-Repository Insights Module.

This module coordinates the insights workflow for all repositories of the
authenticated identity:

- Repository listing
- Concurrent per-repository enrichment
- Tech stack classification
- Aggregate statistics

Listing failures abort the request; enrichment failures only degrade the
affected repository.
"""

from typing import List

from config import logger
from analyzers.models import EnrichedRepository, InsightsReport
from analyzers.plugins.stack_analyzer import StackAnalyzerPlugin
from analyzers.repository import RepositoryStatsAnalyzer
from miners.base import RepositoryMiner
from miners.enricher import RepositoryEnricher
from miners.models import RepositoryData


class MultiRepositoryAnalyzer:
    """
    Coordinates the analysis of all repositories of one identity.

    Attributes:
        miner (RepositoryMiner): Instance for listing repositories.
        enricher (RepositoryEnricher): Instance for enriching repositories.
        stack_analyzer (StackAnalyzerPlugin): Tech stack classifier.
        analyzer (RepositoryStatsAnalyzer): Statistics reducer.
    """

    def __init__(
        self,
        miner: RepositoryMiner,
        enricher: RepositoryEnricher,
        stack_analyzer: StackAnalyzerPlugin,
        analyzer: RepositoryStatsAnalyzer,
    ):
        """Initialize the multi-repository analyzer.

        Args:
            miner (RepositoryMiner): Instance for listing repositories.
            enricher (RepositoryEnricher): Instance for enriching repositories.
            stack_analyzer (StackAnalyzerPlugin): Tech stack classifier.
            analyzer (RepositoryStatsAnalyzer): Statistics reducer.
        """
        self.miner = miner
        self.enricher = enricher
        self.stack_analyzer = stack_analyzer
        self.analyzer = analyzer

    def classify(self, data: RepositoryData) -> EnrichedRepository:
        """Attach the tech stack classification to mined repository data."""
        tech_stack = self.stack_analyzer.categorize(
            data.manifest, data.languages, data.summary.description
        )
        return EnrichedRepository(**dict(data), tech_stack=tech_stack)

    async def analyze_repositories(self) -> InsightsReport:
        """
        Build the insights report for the authenticated identity.

        Returns:
            InsightsReport: Enriched repositories and aggregate statistics.

        Raises:
            Unauthorized: If the access token is missing or rejected.
            UpstreamUnavailable: If the repository listing cannot be fetched.
        """
        owner = await self.miner.get_owner()
        logger.info({"message": "Analyzing repositories", "owner": owner})

        summaries = await self.miner.list_repositories()
        mined = await self.enricher.enrich_all(summaries)

        repositories: List[EnrichedRepository] = [self.classify(data) for data in mined]
        stats = self.analyzer.analyze(repositories)

        logger.info(
            {
                "message": "Repository insights ready",
                "owner": owner,
                "repositories": len(repositories),
                "total_stars": stats.total_stars,
            }
        )
        return InsightsReport(
            owner=owner,
            repositories=repositories,
            stats=stats,
            total_repos=len(repositories),
        )
