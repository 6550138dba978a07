"""
Repository Insights Data Models.

Defines the tech stack classification and aggregate statistics models produced
from mined repository data.
Uses Pydantic for validation and serialization.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterator, List, Optional, Set, Tuple

from pydantic import BaseModel, Field, field_serializer

from miners.models import CommitInfo, RepositoryData


class TechCategory(Enum):
    """
    Tech stack categories.

    Attributes:
        FRONTEND: UI frameworks
        BACKEND: Server frameworks and languages
        DATABASE: Datastores, drivers and ORMs
        TOOLS: Build, typing and testing tools
    """

    FRONTEND = "frontend"
    BACKEND = "backend"
    DATABASE = "database"
    TOOLS = "tools"


class TechStackTags(BaseModel):
    """Tags attributed to one repository, grouped by category."""

    frontend: Set[str] = Field(default_factory=set)
    backend: Set[str] = Field(default_factory=set)
    database: Set[str] = Field(default_factory=set)
    tools: Set[str] = Field(default_factory=set)

    def add(self, category: TechCategory, tag: str) -> None:
        getattr(self, category.value).add(tag)

    def get(self, category: TechCategory) -> Set[str]:
        return getattr(self, category.value)

    def items(self) -> Iterator[Tuple[TechCategory, str]]:
        """Yield (category, tag) pairs, categories in enum order, tags sorted."""
        for category in TechCategory:
            for tag in sorted(self.get(category)):
                yield category, tag

    def is_empty(self) -> bool:
        return not any(self.get(category) for category in TechCategory)

    @field_serializer("frontend", "backend", "database", "tools")
    def serialize_tags(self, tags: Set[str]) -> List[str]:
        return sorted(tags)


class EnrichedRepository(RepositoryData):
    """Mined repository data with its tech stack classification."""

    tech_stack: TechStackTags = Field(default_factory=TechStackTags)

    @property
    def primary_language(self) -> Optional[str]:
        """Language with the most bytes, first listed wins on ties."""
        if not self.languages:
            return None
        return max(self.languages, key=self.languages.get)


# Activity bucket of repositories without any push or creation date
UNKNOWN_MONTH = "unknown"


def _empty_tech_stacks() -> Dict[str, Dict[str, int]]:
    return {category.value: {} for category in TechCategory}


class AggregateStats(BaseModel):
    """Statistics folded over all repositories of one identity."""

    total_size: int = 0
    total_stars: int = 0
    total_forks: int = 0
    last_commit: Optional[CommitInfo] = None
    top_languages: Dict[str, int] = Field(default_factory=dict)
    tech_stacks: Dict[str, Dict[str, int]] = Field(default_factory=_empty_tech_stacks)
    activity_by_month: Dict[str, int] = Field(default_factory=dict)


class InsightsReport(BaseModel):
    """Insights for one identity: enriched repositories plus aggregate stats."""

    owner: str
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    repositories: List[EnrichedRepository]
    stats: AggregateStats
    total_repos: int
