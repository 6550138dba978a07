"""
Insights Storage Module.

This module handles the persistent storage and retrieval of insights reports.
Every run appends a snapshot so that trends (stars, forks, size) can be charted
over time.
"""

import json
import os
from pathlib import Path
from typing import List, Optional

from config import logger
from analyzers.models import InsightsReport


class InsightsStore:
    """
    Manages persistent storage of insights report snapshots.
    Handles both saving and loading of historical snapshots per owner.
    """

    def __init__(self, data_dir: str):
        """Initialize the insights storage system.

        Args:
            data_dir (str): Base directory path for storing snapshots.
        """
        self.storage_dir = Path(data_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _get_insights_file_path(self, owner: str, file_type: str = "json") -> str:
        """Generate the file path for an owner's insight snapshots.

        Args:
            owner (str): Login of the repository owner.
            file_type (str): File extension for the storage format. Defaults to "json".

        Returns:
            str: Complete file path for storing snapshots.
        """
        safe_name = owner.replace("/", "_").replace("\\", "_")
        return os.path.join(self.storage_dir, f"{safe_name}_insights.{file_type}")

    def save_report(self, report: InsightsReport) -> None:
        """Save an insights report while maintaining history.

        Args:
            report (InsightsReport): Report to save.

        Raises:
            Exception: If save operation fails.
        """
        file_path = self._get_insights_file_path(report.owner)

        try:
            existing_data = []
            if os.path.exists(file_path):
                with open(file_path, "r", encoding="utf-8") as f:
                    try:
                        existing_data = json.load(f)
                        if not isinstance(existing_data, list):
                            existing_data = [existing_data]
                    except json.JSONDecodeError:
                        # Handle corrupted file by starting fresh
                        logger.error(
                            {
                                "message": "Corrupted insights file",
                                "owner": report.owner,
                                "file": file_path,
                            }
                        )
                        existing_data = []

            existing_data.append(report.model_dump(mode="json"))

            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(existing_data, f, indent=2)

            logger.info(
                {
                    "message": "Insights report saved successfully",
                    "owner": report.owner,
                    "file": file_path,
                    "snapshots": len(existing_data),
                }
            )

        except Exception as e:
            logger.error(
                {
                    "message": "Failed to save insights report",
                    "owner": report.owner,
                    "error": str(e),
                }
            )
            raise

    def load_reports(
        self, owner: str, limit: Optional[int] = None
    ) -> Optional[List[InsightsReport]]:
        """Load insight snapshots of an owner.

        Args:
            owner (str): Login of the repository owner.
            limit (Optional[int]): Maximum number of snapshots to return.

        Returns:
            Optional[List[InsightsReport]]: Snapshots sorted by date descending,
                None if nothing was stored yet.

        Raises:
            Exception: If load operation fails.
        """
        file_path = self._get_insights_file_path(owner)
        if not os.path.exists(file_path):
            return None

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data_list = json.load(f)

            if isinstance(data_list, dict):
                data_list = [data_list]

            reports = [InsightsReport.model_validate(data) for data in data_list]
            reports.sort(key=lambda r: r.generated_at, reverse=True)
            if limit:
                reports = reports[:limit]
            return reports

        except Exception as e:
            logger.error(
                {
                    "message": "Failed to load insights reports",
                    "owner": owner,
                    "error": str(e),
                }
            )
            raise
