"""
GitHub Repository Data Mining Module.

This module handles the extraction of raw GitHub repository data for the
authenticated user: the repository listing plus per-repository manifests,
language statistics and latest commits. PyGithub is synchronous, so each call is
executed in a worker thread of the miner's own pool to let callers fan out with
asyncio.
"""

import asyncio
import functools
import json
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import List, Optional

import requests
from github import (
    Auth,
    BadCredentialsException,
    Github,
    GithubException,
    RateLimitExceededException,
)
from github.Commit import Commit
from github.Repository import Repository

from config import settings, logger
from miners.base import RepositoryMiner
from miners.exceptions import MinerError, Unauthorized, UpstreamUnavailable
from miners.models import CommitInfo, LanguageBreakdown, Manifest, RepositorySummary


class GitHubMiner(RepositoryMiner):
    """
    GitHubMiner is responsible for mining data from the authenticated user's
    GitHub repositories, transforming them into Pydantic models.
    """

    def __init__(
        self,
        github_token: Optional[str] = None,
        base_url: Optional[str] = None,
        per_page: Optional[int] = None,
        timeout: Optional[int] = None,
        manifest_file: Optional[str] = None,
        max_workers: Optional[int] = None,
    ):
        """Initialize GitHub miner with authentication and configuration.

        Args:
            github_token (Optional[str]): GitHub access token of the caller.
            base_url (Optional[str]): GitHub API base URL.
            per_page (Optional[int]): Page size for the repository listing.
            timeout (Optional[int]): Per-request timeout in seconds.
            manifest_file (Optional[str]): Manifest file read from repository roots.
            max_workers (Optional[int]): Worker threads for GitHub calls, defaults to
                three per concurrently enriched repository.
        """
        self.token = github_token or settings.token
        self.base_url = base_url or settings.github_api_url
        self.per_page = per_page or settings.repos_per_page
        self.timeout = timeout or settings.request_timeout
        self.manifest_file = manifest_file or settings.manifest_file
        self.max_workers = max_workers or 3 * settings.max_concurrency
        self.executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="github-miner"
        )

        auth = Auth.Token(self.token) if self.token else None
        self.github = Github(
            auth=auth,
            base_url=self.base_url,
            per_page=self.per_page,
            timeout=self.timeout,
            retry=None,
            seconds_between_requests=0,
        )
        # Latest commit lookups only need the first entry
        self.commit_github = Github(
            auth=auth,
            base_url=self.base_url,
            per_page=1,
            timeout=self.timeout,
            retry=None,
            seconds_between_requests=0,
        )

    async def _run(self, func, *args):
        """Run a blocking PyGithub call in the miner's worker pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, functools.partial(func, *args))

    def close(self) -> None:
        """Release the worker pool. Calls still running are allowed to finish."""
        self.executor.shutdown(wait=False)

    def _map_error(self, error: Exception, action: str) -> MinerError:
        """Translate a PyGithub or transport error into a mining error.

        Args:
            error (Exception): Original exception.
            action (str): What was being done, used in the message.

        Returns:
            MinerError: Unauthorized or UpstreamUnavailable.
        """
        if isinstance(error, BadCredentialsException):
            return Unauthorized(f"GitHub rejected the access token while {action}", 401)
        if isinstance(error, RateLimitExceededException):
            return UpstreamUnavailable(
                f"GitHub API rate limit exceeded while {action}", error.status
            )
        if isinstance(error, GithubException):
            if error.status == 401:
                return Unauthorized(
                    f"GitHub rejected the access token while {action}", 401
                )
            return UpstreamUnavailable(
                f"GitHub API error while {action}", error.status
            )
        return UpstreamUnavailable(f"GitHub API unreachable while {action}: {error}")

    def _check_rate_limit(self, check_name: str = None) -> None:
        """
        Log the GitHub API rate limit status seen on the last response.

        Args:
            check_name (Optional[str]): Identifier for the rate limit check point.
        """
        remaining, limit = self.github.rate_limiting
        reset_time = datetime.fromtimestamp(
            self.github.rate_limiting_resettime, tz=timezone.utc
        )
        now = datetime.now(timezone.utc)

        logger.info(
            {
                "message": f"{check_name} API rate limit status",
                "remaining_points": remaining,
                "total_points": limit,
                "reset_time": reset_time.isoformat(),
                "minutes_to_reset": (reset_time - now).total_seconds() / 60,
            }
        )

        if remaining < (limit * 0.1) and remaining > 0:
            logger.warning(
                {
                    "message": "GitHub API rate limit running low",
                    "remaining_points": remaining,
                    "reset_time": reset_time.isoformat(),
                }
            )

        if remaining == 0:
            logger.critical(
                {
                    "message": "GitHub API rate limit exhausted, enrichment will degrade",
                    "reset_time": reset_time.isoformat(),
                }
            )

    def _get_summary(self, repo: Repository) -> RepositorySummary:
        """Convert a GitHub Repository object to a Pydantic model.

        Args:
            repo (Repository): The GitHub Repository object.

        Returns:
            RepositorySummary: A Pydantic model representing the listing entry.
        """
        return RepositorySummary(
            id=repo.id,
            name=repo.name,
            full_name=repo.full_name,
            description=repo.description,
            html_url=repo.html_url,
            created_at=repo.created_at,
            updated_at=repo.updated_at,
            pushed_at=repo.pushed_at,
            default_branch=repo.default_branch or "main",
            size=repo.size or 0,
            stars=repo.stargazers_count or 0,
            forks=repo.forks_count or 0,
            is_private=bool(repo.private),
        )

    def _get_commit_info(self, repo_name: str, commit: Commit) -> CommitInfo:
        """Convert a GitHub Commit object to a Pydantic model.

        Args:
            repo_name (str): Name of the repository the commit belongs to.
            commit (Commit): The GitHub Commit object.

        Returns:
            CommitInfo: A Pydantic model representing the commit.
        """
        git_author = commit.commit.author
        return CommitInfo(
            repository=repo_name,
            date=git_author.date,
            message=commit.commit.message,
            author=git_author.name,
        )

    def _parse_manifest(self, raw: bytes) -> Optional[Manifest]:
        """Parse package.json style content into a Manifest."""
        data = json.loads(raw.decode("utf-8"))
        if not isinstance(data, dict):
            return None

        def deps(key: str) -> dict:
            section = data.get(key) or {}
            if not isinstance(section, dict):
                return {}
            return {str(name): str(version) for name, version in section.items()}

        return Manifest(
            dependencies=deps("dependencies"),
            dev_dependencies=deps("devDependencies"),
        )

    def _list_repositories(self) -> List[RepositorySummary]:
        repos = self.github.get_user().get_repos(sort="pushed", direction="desc")
        summaries = [self._get_summary(repo) for repo in repos.get_page(0)]
        self._check_rate_limit("Repository listing")
        return summaries

    def _get_owner(self) -> str:
        return self.github.get_user().login

    def _get_manifest(self, repo: RepositorySummary) -> Optional[Manifest]:
        gh_repo = self.github.get_repo(repo.full_name, lazy=True)
        content = gh_repo.get_contents(self.manifest_file, ref=repo.default_branch)
        if isinstance(content, list):
            # The manifest path is a directory
            return None
        return self._parse_manifest(content.decoded_content)

    def _get_languages(self, repo: RepositorySummary) -> LanguageBreakdown:
        gh_repo = self.github.get_repo(repo.full_name, lazy=True)
        return {name: int(size) for name, size in gh_repo.get_languages().items()}

    def _get_latest_commit(self, repo: RepositorySummary) -> CommitInfo:
        gh_repo = self.commit_github.get_repo(repo.full_name, lazy=True)
        commits = gh_repo.get_commits().get_page(0)
        if not commits:
            raise LookupError(f"No commits found for {repo.full_name}")
        return self._get_commit_info(repo.name, commits[0])

    async def list_repositories(self) -> List[RepositorySummary]:
        """
        List the authenticated user's repositories, most recently pushed first.

        Only the first page is requested, with the configured page size.

        Returns:
            List[RepositorySummary]: Repository summaries in listing order.

        Raises:
            Unauthorized: If no token is configured or GitHub rejects it.
            UpstreamUnavailable: If GitHub is unreachable or rate limited.
        """
        if not self.token:
            raise Unauthorized("GitHub access token is missing")

        logger.info({"message": "Listing repositories", "per_page": self.per_page})
        try:
            summaries = await self._run(self._list_repositories)
        except (GithubException, requests.exceptions.RequestException) as e:
            error = self._map_error(e, "listing repositories")
            logger.error(
                {
                    "message": "Repository listing failed",
                    "error": str(error),
                }
            )
            raise error from e

        logger.info({"message": "Repositories listed", "count": len(summaries)})
        return summaries

    async def get_owner(self) -> str:
        """
        Get the login of the authenticated user.

        Raises:
            Unauthorized: If no token is configured or GitHub rejects it.
            UpstreamUnavailable: If GitHub is unreachable or rate limited.
        """
        if not self.token:
            raise Unauthorized("GitHub access token is missing")
        try:
            return await self._run(self._get_owner)
        except (GithubException, requests.exceptions.RequestException) as e:
            raise self._map_error(e, "resolving the authenticated user") from e

    async def fetch_manifest(self, repo: RepositorySummary) -> Optional[Manifest]:
        """
        Fetch and parse the manifest at the repository root.

        A missing or malformed manifest is normal for repositories outside the
        manifest's ecosystem, so every failure yields None.

        Args:
            repo (RepositorySummary): Repository to inspect.

        Returns:
            Optional[Manifest]: Parsed manifest or None.
        """
        try:
            return await self._run(self._get_manifest, repo)
        except Exception as e:
            logger.debug(
                {
                    "message": "Manifest not available",
                    "repository": repo.full_name,
                    "manifest": self.manifest_file,
                    "error": str(e),
                }
            )
            return None

    async def fetch_languages(self, repo: RepositorySummary) -> LanguageBreakdown:
        """
        Fetch language byte counts for a repository.

        Args:
            repo (RepositorySummary): Repository to inspect.

        Returns:
            LanguageBreakdown: Mapping of language name to bytes.
        """
        return await self._run(self._get_languages, repo)

    async def fetch_latest_commit(self, repo: RepositorySummary) -> CommitInfo:
        """
        Fetch the most recent commit on the default branch.

        Args:
            repo (RepositorySummary): Repository to inspect.

        Returns:
            CommitInfo: Latest commit.

        Raises:
            LookupError: If the repository has no commits.
        """
        return await self._run(self._get_latest_commit, repo)
