"""
Repository Mining Data Models.

Defines the common data models used across different repository mining implementations.
Uses Pydantic for validation and serialization.
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

# Language name -> bytes of code
LanguageBreakdown = Dict[str, int]


class RepositorySummary(BaseModel):
    """Repository listing entry, as returned by the hosting service."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    full_name: str
    description: Optional[str] = None
    html_url: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pushed_at: Optional[datetime] = None
    default_branch: str = "main"
    size: int = 0
    stars: int = 0
    forks: int = 0
    is_private: bool = False


class Manifest(BaseModel):
    """Dependencies declared in a repository manifest."""

    dependencies: Dict[str, str] = Field(default_factory=dict)
    dev_dependencies: Dict[str, str] = Field(default_factory=dict)

    @property
    def all_dependencies(self) -> Dict[str, str]:
        """Runtime and development dependencies merged, dev entries win."""
        return {**self.dependencies, **self.dev_dependencies}


class CommitInfo(BaseModel):
    """Most recent commit of a repository."""

    repository: str
    date: datetime
    message: str
    author: Optional[str] = None


class RepositoryData(BaseModel):
    """Container for all mined repository data."""

    summary: RepositorySummary
    languages: Optional[LanguageBreakdown] = None
    manifest: Optional[Manifest] = None
    last_commit: Optional[CommitInfo] = None
    degraded: bool = False
