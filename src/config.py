"""
Application Configuration Module.

Manages application settings and environment variables using Pydantic for validation.
Provides centralized configuration management with type safety and validation.

Features:
- Environment variable loading and validation
- Secure credential management
- Upstream API limits and timeouts
- Path normalization for output directories
"""

import os
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from logger import LogManager


class Settings(BaseSettings):
    """
    Application configuration settings with validation.

    Manages and validates all application settings including:
    - Application identification
    - GitHub authentication and API endpoint
    - Enrichment concurrency and timeouts
    - Logging settings
    - Output directory configurations

    Attributes:
        app_name (str): Name of the application
        dev (bool): Debug mode flag
        log_dir (str): Directory for log files
        log_level (int): Logging level (default: debug)
        github_token (Optional[SecretStr]): GitHub access token of the caller
        github_api_url (str): Base URL of the GitHub REST API
        repos_per_page (int): Page size used when listing repositories
        manifest_file (str): Manifest file read from each repository root
        request_timeout (int): Per-call HTTP timeout in seconds
        enrichment_timeout (float): Deadline for enriching one repository
        fanout_timeout (float): Deadline for enriching all repositories
        max_concurrency (int): Repositories enriched at the same time
        data_dir (str): Directory for insight snapshots
        report_output_dir (str): Directory for generated reports
        history_limit (int): Snapshots used for trend charts
        plot_retention_days (int): Age in days after which plots are deleted
    """

    # Application settings
    app_name: str = Field(default="RepoLens", description="Application name")
    dev: bool = Field(default=False, description="Debug mode")
    log_dir: str = Field(default="logs", description="Logging directory")
    log_level: int = Field(default=10, description="Logging level, default debug")

    # GitHub configuration
    github_token: Optional[SecretStr] = Field(
        default=None, description="GitHub access token"
    )
    github_api_url: str = Field(
        default="https://api.github.com", description="GitHub API base URL"
    )
    repos_per_page: int = Field(
        default=100, ge=1, le=100, description="Repositories requested per page"
    )
    manifest_file: str = Field(
        default="package.json", description="Manifest file used for stack detection"
    )

    # Enrichment configuration
    request_timeout: int = Field(default=15, gt=0, description="HTTP timeout (s)")
    enrichment_timeout: float = Field(
        default=30.0, gt=0, description="Per-repository enrichment deadline (s)"
    )
    fanout_timeout: float = Field(
        default=120.0, gt=0, description="Overall enrichment deadline (s)"
    )
    max_concurrency: int = Field(
        default=10, ge=1, description="Maximum repositories enriched concurrently"
    )

    # Output configuration
    data_dir: str = Field(default="data", description="Data output directory")
    report_output_dir: str = Field(
        default="reports", description="Report output directory"
    )
    history_limit: int = Field(
        default=30, ge=1, description="Snapshots included in trend charts"
    )
    plot_retention_days: int = Field(
        default=30, ge=1, description="Days generated plots are kept"
    )

    @property
    def token(self) -> Optional[str]:
        """
        Get the raw GitHub token.

        Returns:
            Optional[str]: Token value, None when not configured or blank
        """
        if self.github_token is None:
            return None
        return self.github_token.get_secret_value().strip() or None

    @field_validator("report_output_dir")
    def ensure_absolute_path(cls, v: str) -> str:
        """
        Ensure report directory path is absolute.

        Args:
            v (str): Directory path to validate

        Returns:
            str: Absolute path to report directory
        """
        if not os.path.isabs(v):
            return os.path.abspath(v)
        return v

    # Configure env file loading
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
    )


# Create global settings instance
settings = Settings()

# Initialize logging configuration
logger = LogManager(
    app_name=settings.app_name.lower(),
    log_dir=settings.log_dir,
    development=settings.dev,
    level=settings.log_level,
).logger
