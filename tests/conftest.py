"""Shared test fixtures."""

from datetime import datetime, timezone

import pytest

from analyzers.models import EnrichedRepository, TechStackTags
from miners.models import CommitInfo, Manifest, RepositorySummary


def build_summary(repo_id: int = 1, name: str = "repo", **overrides) -> RepositorySummary:
    """Create a RepositorySummary with sensible defaults."""
    fields = {
        "id": repo_id,
        "name": name,
        "full_name": f"octocat/{name}",
        "description": None,
        "html_url": f"https://github.com/octocat/{name}",
        "created_at": datetime(2023, 1, 10, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 3, 2, tzinfo=timezone.utc),
        "pushed_at": datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
        "default_branch": "main",
        "size": 0,
        "stars": 0,
        "forks": 0,
        "is_private": False,
    }
    fields.update(overrides)
    return RepositorySummary(**fields)


def build_repository(
    repo_id: int = 1,
    name: str = "repo",
    languages=None,
    manifest=None,
    last_commit=None,
    tech_stack=None,
    degraded: bool = False,
    **summary_fields,
) -> EnrichedRepository:
    """Create an EnrichedRepository with sensible defaults."""
    return EnrichedRepository(
        summary=build_summary(repo_id, name, **summary_fields),
        languages=languages,
        manifest=manifest,
        last_commit=last_commit,
        tech_stack=tech_stack or TechStackTags(),
        degraded=degraded,
    )


@pytest.fixture
def summary_factory():
    return build_summary


@pytest.fixture
def repository_factory():
    return build_repository


@pytest.fixture
def react_manifest():
    """Manifest of a typical React + Express project."""
    return Manifest(
        dependencies={"react": "^18.2.0", "express": "^4.18.2", "mongoose": "^7.0.0"},
        dev_dependencies={"jest": "^29.0.0", "typescript": "^5.0.0"},
    )


@pytest.fixture
def sample_commit():
    return CommitInfo(
        repository="repo",
        date=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
        message="Initial commit",
        author="The Octocat",
    )
