"""
Per-Repository Enrichment Module.

Fans out the detail lookups for every listed repository and joins them back in
listing order. A repository whose lookups fail or run past the deadline is kept
in its summary-only form so that it still counts towards the aggregate.
"""

import asyncio
from typing import List, Optional, Set, Tuple

from config import settings, logger
from miners.base import RepositoryMiner
from miners.models import RepositoryData, RepositorySummary


class RepositoryEnricher:
    """
    Concurrently enriches repository summaries with manifest, languages and
    latest commit.

    Attributes:
        miner (RepositoryMiner): Source of the per-repository details.
        max_concurrency (int): Repositories enriched at the same time.
        timeout (float): Deadline in seconds for enriching a single repository.
        fanout_timeout (float): Deadline in seconds for enriching all repositories.
    """

    def __init__(
        self,
        miner: RepositoryMiner,
        max_concurrency: Optional[int] = None,
        timeout: Optional[float] = None,
        fanout_timeout: Optional[float] = None,
    ):
        """Initialize the enricher.

        Args:
            miner (RepositoryMiner): Source of the per-repository details.
            max_concurrency (Optional[int]): Concurrency bound, defaults to settings.
            timeout (Optional[float]): Per-repository deadline, defaults to settings.
            fanout_timeout (Optional[float]): Overall deadline, defaults to settings.
        """
        self.miner = miner
        self.max_concurrency = max_concurrency or settings.max_concurrency
        self.timeout = timeout or settings.enrichment_timeout
        self.fanout_timeout = fanout_timeout or settings.fanout_timeout

    def _degraded(self, repo: RepositorySummary) -> RepositoryData:
        return RepositoryData(summary=repo, degraded=True)

    async def _fetch(
        self, repo: RepositorySummary
    ) -> Tuple[RepositoryData, Set[asyncio.Task]]:
        """
        Run the three lookups of one repository against its deadline.

        Lookups still running at the deadline are not cancelled, since a
        worker thread cannot be interrupted. They are returned so the caller
        can wait for them before starting another repository.

        Returns:
            Tuple[RepositoryData, Set[asyncio.Task]]: Record and unfinished lookups.
        """
        manifest_task = asyncio.create_task(self.miner.fetch_manifest(repo))
        languages_task = asyncio.create_task(self.miner.fetch_languages(repo))
        commit_task = asyncio.create_task(self.miner.fetch_latest_commit(repo))
        tasks = (manifest_task, languages_task, commit_task)

        try:
            _, pending = await asyncio.wait(tasks, timeout=self.timeout)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise

        if pending:
            logger.warning(
                {
                    "message": "Repository enrichment timed out",
                    "repository": repo.full_name,
                    "timeout_seconds": self.timeout,
                }
            )
            # Superseded by the timeout
            for task in tasks:
                if task.done():
                    task.exception()
            return self._degraded(repo), pending

        failures = {
            name: task.exception()
            for name, task in (("languages", languages_task), ("last_commit", commit_task))
            if task.exception() is not None
        }
        if failures:
            logger.warning(
                {
                    "message": "Repository enrichment failed, using summary only",
                    "repository": repo.full_name,
                    "error": {name: str(e) for name, e in failures.items()},
                }
            )
            manifest_task.exception()
            return self._degraded(repo), pending

        manifest = (
            None if manifest_task.exception() is not None else manifest_task.result()
        )

        return (
            RepositoryData(
                summary=repo,
                languages=languages_task.result(),
                manifest=manifest,
                last_commit=commit_task.result(),
            ),
            pending,
        )

    async def _release(self, pending: Set[asyncio.Task]) -> None:
        """Wait until lookups that missed the deadline give back their workers."""
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def enrich(self, repo: RepositorySummary) -> RepositoryData:
        """
        Fetch manifest, languages and latest commit of one repository concurrently.

        Args:
            repo (RepositorySummary): Repository to enrich.

        Returns:
            RepositoryData: Enriched record, or the summary-only record flagged
                as degraded when languages or the latest commit are unavailable.
        """
        data, pending = await self._fetch(repo)
        await self._release(pending)
        return data

    async def enrich_all(self, repos: List[RepositorySummary]) -> List[RepositoryData]:
        """
        Enrich all repositories concurrently.

        A repository holds its concurrency slot until its lookups have
        returned, even past its deadline, so at most max_concurrency
        repositories ever occupy the miner's workers. Repositories still
        without a record when the overall deadline expires are degraded.

        Args:
            repos (List[RepositorySummary]): Repositories in listing order.

        Returns:
            List[RepositoryData]: One record per input repository, same order.
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)
        results: List[Optional[RepositoryData]] = [None] * len(repos)

        async def bounded_enrich(index: int, repo: RepositorySummary) -> None:
            async with semaphore:
                results[index], pending = await self._fetch(repo)
                await self._release(pending)

        tasks = [
            asyncio.create_task(bounded_enrich(index, repo))
            for index, repo in enumerate(repos)
        ]
        if tasks:
            try:
                _, unfinished = await asyncio.wait(tasks, timeout=self.fanout_timeout)
            finally:
                for task in tasks:
                    if not task.done():
                        task.cancel()
            if unfinished:
                await asyncio.gather(*unfinished, return_exceptions=True)
            for task in tasks:
                if not task.cancelled():
                    task.result()

        missing = [repo.full_name for repo, data in zip(repos, results) if data is None]
        if missing:
            logger.warning(
                {
                    "message": "Enrichment deadline expired, using summary only",
                    "timeout_seconds": self.fanout_timeout,
                    "repositories": missing,
                }
            )

        enriched = [
            data if data is not None else self._degraded(repo)
            for repo, data in zip(repos, results)
        ]

        logger.info(
            {
                "message": "Repository enrichment completed",
                "repositories": len(enriched),
                "degraded": sum(1 for r in enriched if r.degraded),
            }
        )
        return enriched
