"""
Main Application Entry Point.

This module serves as the primary entry point for the repository insights system.
It orchestrates the insights workflow, including:
- Repository listing and enrichment
- Tech stack classification and statistics
- Snapshot persistence
- Dashboard report generation
- Error handling and logging

The application can be run directly to build insights for the repositories of
the configured GitHub token.
"""

import asyncio
import os
import sys

from config import settings, logger
from analyzers.multi_repository import MultiRepositoryAnalyzer
from analyzers.plugins.stack_analyzer import RuleBasedStackAnalyzerPlugin
from analyzers.repository import RepositoryStatsAnalyzer
from miners.enricher import RepositoryEnricher
from miners.exceptions import Unauthorized, UpstreamUnavailable
from miners.github_miner import GitHubMiner
from storage.insights_store import InsightsStore
from report.pdf_generator import PDFReportGenerator
from visualization.plotter import InsightsPlotter


async def main() -> None:
    """
    Execute the main application workflow.

    Performs the following steps:
    1. Creates output directory for reports if it doesn't exist
    2. Builds the insights report for the authenticated user
    3. Stores the report snapshot
    4. Generates the PDF dashboard including historical trends

    Raises:
        Unauthorized: If the GitHub token is missing or rejected
        UpstreamUnavailable: If GitHub cannot serve the repository listing
        OSError: If unable to create output directory

    Note:
        - Repositories whose details cannot be fetched are reported with
          summary data only and do not stop execution
    """
    logger.info("Starting repository insights...")

    os.makedirs(settings.report_output_dir, exist_ok=True)

    logger.debug("initializing github miner...")
    github_miner = GitHubMiner(settings.token)
    enricher = RepositoryEnricher(
        github_miner,
        settings.max_concurrency,
        settings.enrichment_timeout,
        settings.fanout_timeout,
    )

    logger.debug("initializing analyzers...")
    multi_analyzer = MultiRepositoryAnalyzer(
        github_miner,
        enricher,
        RuleBasedStackAnalyzerPlugin(),
        RepositoryStatsAnalyzer(),
    )

    logger.info("analyzing repositories...")
    try:
        report = await multi_analyzer.analyze_repositories()
    finally:
        github_miner.close()

    store = InsightsStore(settings.data_dir)
    store.save_report(report)

    logger.info("loading historical data from data store...")
    history = store.load_reports(report.owner, settings.history_limit)

    logger.info("generating reports...")
    temp_plot_dir = os.path.join(settings.report_output_dir, "temp_plots")
    os.makedirs(temp_plot_dir, exist_ok=True)

    plotter = InsightsPlotter(temp_plot_dir)
    pdf_generator = PDFReportGenerator(plotter)
    pdf_generator.generate_report(
        report, history, settings.report_output_dir, temp_plot_dir
    )

    plotter.delete_old_plots(settings.plot_retention_days)

    logger.info("application finished")


def run() -> None:
    """Console entry point, maps request failures to exit codes."""
    try:
        asyncio.run(main())
    except Unauthorized as e:
        logger.critical(
            {"message": "Re-authentication with GitHub required", "error": str(e)}
        )
        sys.exit(1)
    except UpstreamUnavailable as e:
        logger.error({"message": "GitHub is unavailable", "error": str(e)})
        sys.exit(2)


if __name__ == "__main__":
    logger.info("Starting application ...")
    run()
