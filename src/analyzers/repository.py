"""
Repository Statistics Analysis Module.

Folds enriched repositories into aggregate statistics:
- Size, star and fork totals
- Most recent commit across all repositories
- Languages ranked by total bytes
- Tech stack occurrence counts per category
- Monthly push activity

The fold is pure and order-sensitive only where ties are broken, so the same
input sequence always produces the same statistics.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

import pandas as pd

from config import logger
from analyzers.models import UNKNOWN_MONTH, AggregateStats, EnrichedRepository
from miners.models import CommitInfo


def as_utc(value: datetime) -> datetime:
    """Return value in UTC, treating naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def month_key(value: datetime) -> str:
    """Calendar year-month of value in UTC, e.g. '2024-03'."""
    return as_utc(value).strftime("%Y-%m")


class RepositoryStatsAnalyzer:
    """
    Reduces enriched repositories to a single AggregateStats object.
    """

    def _latest_commit(
        self, current: Optional[CommitInfo], candidate: Optional[CommitInfo]
    ) -> Optional[CommitInfo]:
        if candidate is None:
            return current
        if current is None or as_utc(candidate.date) > as_utc(current.date):
            return candidate
        return current

    def _rank_languages(self, repos: List[EnrichedRepository]) -> Dict[str, int]:
        """
        Sum bytes per language and rank them, largest first.

        Args:
            repos (List[EnrichedRepository]): Repositories to fold

        Returns:
            Dict[str, int]: Ordered mapping; equal totals keep first-seen order.
        """
        totals: Dict[str, int] = {}
        for repo in repos:
            for language, size in (repo.languages or {}).items():
                totals[language] = totals.get(language, 0) + size

        if not totals:
            return {}

        # stable sort keeps discovery order among equal totals
        ranked = pd.Series(totals, dtype="int64").sort_values(
            ascending=False, kind="stable"
        )
        return {str(language): int(size) for language, size in ranked.items()}

    def analyze(self, repos: List[EnrichedRepository]) -> AggregateStats:
        """
        Compute aggregate statistics over all repositories.

        Repositories without enrichment data still contribute their size,
        stars, forks and push month.

        Args:
            repos (List[EnrichedRepository]): Repositories in listing order

        Returns:
            AggregateStats: Aggregate statistics
        """
        logger.info(
            {"message": "Starting statistics aggregation", "repositories": len(repos)}
        )
        try:
            stats = AggregateStats()

            for repo in repos:
                summary = repo.summary
                stats.total_size += summary.size or 0
                stats.total_stars += summary.stars or 0
                stats.total_forks += summary.forks or 0

                stats.last_commit = self._latest_commit(
                    stats.last_commit, repo.last_commit
                )

                for category, tag in repo.tech_stack.items():
                    counts = stats.tech_stacks[category.value]
                    counts[tag] = counts.get(tag, 0) + 1

                pushed_at = summary.pushed_at or summary.created_at
                if pushed_at is None:
                    logger.warning(
                        {
                            "message": "Repository has no push date",
                            "repository": summary.full_name,
                            "bucket": UNKNOWN_MONTH,
                        }
                    )
                    month = UNKNOWN_MONTH
                else:
                    month = month_key(pushed_at)
                stats.activity_by_month[month] = (
                    stats.activity_by_month.get(month, 0) + 1
                )

            stats.top_languages = self._rank_languages(repos)

            logger.info(
                {
                    "message": "Statistics aggregation completed",
                    "languages": len(stats.top_languages),
                    "months": len(stats.activity_by_month),
                }
            )
            return stats

        except Exception as e:
            logger.error(
                {
                    "message": "Statistics aggregation failed",
                    "error": str(e),
                }
            )
            raise
