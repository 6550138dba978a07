"""
Abstract Base Class for Repository Miners.

Defines the interface for repository data mining implementations.
All repository miners (GitHub, GitLab, etc.) should implement this interface.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from miners.models import CommitInfo, LanguageBreakdown, Manifest, RepositorySummary


class RepositoryMiner(ABC):
    """
    Abstract base class for repository miners.

    Defines the contract for mining repository data from different sources.
    Implementations should handle:
    - Authentication with the repository service
    - Listing the repositories of the authenticated identity
    - Fetching per-repository details
    - Data transformation to common models
    """

    @abstractmethod
    async def list_repositories(self) -> List[RepositorySummary]:
        """
        List repositories of the authenticated identity, most recently pushed first.

        Returns:
            List[RepositorySummary]: Repository summaries

        Raises:
            Unauthorized: If the credential is missing or invalid
            UpstreamUnavailable: If the service cannot be reached
        """
        pass

    @abstractmethod
    async def get_owner(self) -> str:
        """Return the login of the authenticated identity."""
        pass

    @abstractmethod
    async def fetch_manifest(self, repo: RepositorySummary) -> Optional[Manifest]:
        """
        Fetch and parse the manifest file at the repository root.

        Returns:
            Optional[Manifest]: Parsed manifest, None when absent or unreadable.
                Never raises.
        """
        pass

    @abstractmethod
    async def fetch_languages(self, repo: RepositorySummary) -> LanguageBreakdown:
        """Fetch language byte counts for a repository."""
        pass

    @abstractmethod
    async def fetch_latest_commit(self, repo: RepositorySummary) -> CommitInfo:
        """Fetch the most recent commit of a repository."""
        pass
