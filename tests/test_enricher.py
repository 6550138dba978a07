"""
Repository Enricher Test Suite.

Covers concurrent enrichment:
- Successful enrichment
- Degradation on language or commit failures
- Manifest absence
- Per-repository and overall deadlines
- Ordering and concurrency bounds
- Isolation of repositories sharing the miner's worker threads
"""

import asyncio
import time
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from miners.enricher import RepositoryEnricher
from miners.github_miner import GitHubMiner
from miners.models import CommitInfo, Manifest


@pytest.fixture
def mock_miner(sample_commit):
    """Mock repository miner returning full details."""
    miner = Mock()
    miner.fetch_manifest = AsyncMock(
        return_value=Manifest(dependencies={"react": "^18.0.0"})
    )
    miner.fetch_languages = AsyncMock(return_value={"JavaScript": 1200})
    miner.fetch_latest_commit = AsyncMock(return_value=sample_commit)
    return miner


@pytest.mark.asyncio
async def test_enrich_success(mock_miner, summary_factory, sample_commit):
    """Test that all three lookups end up in the record."""
    enricher = RepositoryEnricher(mock_miner, max_concurrency=2, timeout=5)
    repo = summary_factory(1, "web")

    data = await enricher.enrich(repo)

    assert data.summary == repo
    assert data.languages == {"JavaScript": 1200}
    assert data.manifest.dependencies == {"react": "^18.0.0"}
    assert data.last_commit == sample_commit
    assert data.degraded is False
    mock_miner.fetch_manifest.assert_awaited_once_with(repo)
    mock_miner.fetch_languages.assert_awaited_once_with(repo)
    mock_miner.fetch_latest_commit.assert_awaited_once_with(repo)


@pytest.mark.asyncio
async def test_missing_manifest_is_not_degradation(mock_miner, summary_factory):
    mock_miner.fetch_manifest.return_value = None
    enricher = RepositoryEnricher(mock_miner, timeout=5)

    data = await enricher.enrich(summary_factory())

    assert data.manifest is None
    assert data.languages == {"JavaScript": 1200}
    assert data.degraded is False


@pytest.mark.asyncio
async def test_manifest_error_is_treated_as_absent(mock_miner, summary_factory):
    mock_miner.fetch_manifest.side_effect = ValueError("broken json")
    enricher = RepositoryEnricher(mock_miner, timeout=5)

    data = await enricher.enrich(summary_factory())

    assert data.manifest is None
    assert data.degraded is False


@pytest.mark.asyncio
async def test_language_failure_degrades_repository(mock_miner, summary_factory):
    mock_miner.fetch_languages.side_effect = Exception("502 Bad Gateway")
    enricher = RepositoryEnricher(mock_miner, timeout=5)
    repo = summary_factory(7, "api", size=42, stars=3)

    data = await enricher.enrich(repo)

    assert data.degraded is True
    assert data.summary == repo
    assert data.languages is None
    assert data.last_commit is None
    assert data.manifest is None


@pytest.mark.asyncio
async def test_commit_failure_degrades_repository(mock_miner, summary_factory):
    mock_miner.fetch_latest_commit.side_effect = LookupError("empty repository")
    enricher = RepositoryEnricher(mock_miner, timeout=5)

    data = await enricher.enrich(summary_factory())

    assert data.degraded is True
    assert data.languages is None


@pytest.mark.asyncio
async def test_timeout_degrades_repository(mock_miner, summary_factory):
    async def slow_languages(repo):
        await asyncio.sleep(0.3)
        return {"Go": 1}

    mock_miner.fetch_languages.side_effect = slow_languages
    enricher = RepositoryEnricher(mock_miner, timeout=0.05)

    data = await enricher.enrich(summary_factory())

    assert data.degraded is True


@pytest.mark.asyncio
async def test_enrich_all_preserves_order_and_isolates_failures(
    mock_miner, summary_factory
):
    """Test that one failing repository does not affect the others."""
    repos = [summary_factory(i, f"repo{i}") for i in range(5)]

    async def languages(repo):
        if repo.id == 2:
            raise Exception("boom")
        # Finish in reverse order
        await asyncio.sleep(0.01 * (5 - repo.id))
        return {"Python": repo.id}

    mock_miner.fetch_languages.side_effect = languages
    enricher = RepositoryEnricher(mock_miner, max_concurrency=5, timeout=5)

    results = await enricher.enrich_all(repos)

    assert [r.summary.id for r in results] == [0, 1, 2, 3, 4]
    assert [r.degraded for r in results] == [False, False, True, False, False]
    assert results[4].languages == {"Python": 4}


@pytest.mark.asyncio
async def test_enrich_all_respects_concurrency_bound(mock_miner, summary_factory):
    active = 0
    peak = 0

    async def languages(repo):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.01)
        active -= 1
        return {"Go": 1}

    mock_miner.fetch_languages.side_effect = languages
    enricher = RepositoryEnricher(mock_miner, max_concurrency=2, timeout=5)

    results = await enricher.enrich_all([summary_factory(i, f"r{i}") for i in range(6)])

    assert len(results) == 6
    assert peak == 2


@pytest.mark.asyncio
async def test_enrich_all_empty(mock_miner):
    enricher = RepositoryEnricher(mock_miner, timeout=5)

    assert await enricher.enrich_all([]) == []
    mock_miner.fetch_languages.assert_not_awaited()


@pytest.mark.asyncio
async def test_enrich_all_overall_deadline_degrades_unfinished(
    mock_miner, summary_factory
):
    async def languages(repo):
        await asyncio.sleep(0.3)
        return {"Go": 1}

    mock_miner.fetch_languages.side_effect = languages
    enricher = RepositoryEnricher(
        mock_miner, max_concurrency=1, timeout=5, fanout_timeout=0.5
    )
    repos = [summary_factory(i, f"r{i}") for i in range(4)]

    started = time.monotonic()
    results = await enricher.enrich_all(repos)
    elapsed = time.monotonic() - started

    assert elapsed < 1.0
    assert [r.summary.id for r in results] == [0, 1, 2, 3]
    assert [r.degraded for r in results] == [False, True, True, True]
    assert results[0].languages == {"Go": 1}


class BlockingMiner(GitHubMiner):
    """GitHub miner whose PyGithub calls are replaced by blocking sleeps."""

    def __init__(self, slow_repos, **kwargs):
        super().__init__(github_token="test-token", **kwargs)
        self.slow_repos = slow_repos

    def _get_manifest(self, repo):
        time.sleep(0.05)
        return None

    def _get_languages(self, repo):
        time.sleep(0.8 if repo.name in self.slow_repos else 0.05)
        return {"Go": 1}

    def _get_latest_commit(self, repo):
        time.sleep(0.05)
        return CommitInfo(
            repository=repo.name,
            date=datetime(2024, 3, 1, tzinfo=timezone.utc),
            message="Initial commit",
        )


@pytest.mark.asyncio
async def test_slow_repositories_do_not_starve_fast_ones(summary_factory):
    """Test that worker threads left behind by timed out repositories are not
    taken from repositories enriched after them."""
    miner = BlockingMiner({"r0", "r1", "r2"}, max_workers=6)
    enricher = RepositoryEnricher(
        miner, max_concurrency=2, timeout=0.3, fanout_timeout=10
    )
    repos = [summary_factory(i, f"r{i}") for i in range(6)]

    try:
        results = await enricher.enrich_all(repos)
    finally:
        miner.close()

    degraded = {r.summary.name for r in results if r.degraded}
    assert degraded == {"r0", "r1", "r2"}
    assert all(r.languages == {"Go": 1} for r in results[3:])
