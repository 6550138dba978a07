"""
Repository Insights Visualization Module.

Provides functionality for creating and managing charts of repository insights,
including:
- Language distribution
- Monthly push activity
- Tech stack usage per category
- Historical trends of stars and forks

The module uses matplotlib for creating the charts and handles file management
for generated plots.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
import os

import matplotlib.pyplot as plt

from analyzers.models import UNKNOWN_MONTH, AggregateStats, InsightsReport, TechCategory


class InsightsPlotter:
    """
    Specialized plotter for repository insights visualizations.

    Attributes:
        output_dir (str): Directory for saving generated plots
    """

    def __init__(self, output_dir: str = "plots"):
        """
        Initialize insights plotter with output configuration.

        Args:
            output_dir (str): Directory path for saving generated plots.
                Defaults to "plots"
        """
        self.output_dir = output_dir
        os.makedirs(output_dir, exist_ok=True)

    def create_language_plot(self, stats: AggregateStats, top_n: int = 10) -> plt.Figure:
        """Create bar chart of the languages with the most bytes.

        Args:
            stats (AggregateStats): Aggregate statistics
            top_n (int): Number of languages to show

        Returns:
            plt.Figure: Generated figure
        """
        languages = list(stats.top_languages.items())[:top_n]
        fig, ax = plt.subplots(figsize=(10, 6))

        if languages:
            names = [name for name, _ in languages]
            kilobytes = [size / 1024 for _, size in languages]
            ax.bar(names, kilobytes, color="steelblue")
            plt.setp(ax.xaxis.get_majorticklabels(), rotation=45, ha="right")
        else:
            ax.text(0.5, 0.5, "No language data", ha="center", va="center")

        ax.set_title(f"Top {top_n} Languages")
        ax.set_xlabel("Language")
        ax.set_ylabel("Code size (KB)")
        ax.grid(True, axis="y")

        plt.tight_layout()
        return fig

    def create_activity_plot(self, stats: AggregateStats) -> plt.Figure:
        """Create timeline of repositories by month of last push.

        Months without pushes are not filled in. Repositories without a date
        are left out of the timeline.

        Args:
            stats (AggregateStats): Aggregate statistics

        Returns:
            plt.Figure: Generated figure
        """
        months = sorted(m for m in stats.activity_by_month if m != UNKNOWN_MONTH)
        counts = [stats.activity_by_month[month] for month in months]

        fig, ax = plt.subplots(figsize=(12, 6))
        if months:
            ax.plot(months, counts, marker="o")
            plt.setp(ax.xaxis.get_majorticklabels(), rotation=45)
        else:
            ax.text(0.5, 0.5, "No push activity", ha="center", va="center")

        ax.set_title("Repository Activity by Month of Last Push")
        ax.set_xlabel("Month")
        ax.set_ylabel("Repositories")
        ax.grid(True)

        plt.tight_layout()
        return fig

    def create_tech_stack_plot(self, stats: AggregateStats) -> plt.Figure:
        """Create one bar panel per tech stack category.

        Args:
            stats (AggregateStats): Aggregate statistics

        Returns:
            plt.Figure: Generated figure
        """
        fig, axes = plt.subplots(2, 2, figsize=(12, 10))

        for ax, category in zip(axes.flat, TechCategory):
            counts = stats.tech_stacks.get(category.value, {})
            ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
            if ranked:
                ax.barh(
                    [tag for tag, _ in ranked],
                    [count for _, count in ranked],
                    color="seagreen",
                )
                ax.invert_yaxis()
            else:
                ax.text(0.5, 0.5, "Not detected", ha="center", va="center")
            ax.set_title(category.value.capitalize())
            ax.set_xlabel("Repositories")
            ax.grid(True, axis="x")

        plt.tight_layout()
        return fig

    def create_history_plot(self, history: List[InsightsReport]) -> Optional[plt.Figure]:
        """Create historical trend plot for stars and forks.

        Args:
            history (List[InsightsReport]): Stored snapshots, any order

        Returns:
            Optional[plt.Figure]: Generated figure, None without history
        """
        if not history:
            return None

        snapshots = sorted(history, key=lambda r: r.generated_at)
        dates = [r.generated_at for r in snapshots]

        fig, ax = plt.subplots(figsize=(12, 6))
        ax.plot(dates, [r.stats.total_stars for r in snapshots], marker="o", label="Stars")
        ax.plot(dates, [r.stats.total_forks for r in snapshots], marker="o", label="Forks")
        ax.set_title("Stars and Forks Over Time")
        ax.set_xlabel("Date")
        ax.set_ylabel("Count")
        ax.legend()
        ax.grid(True)
        plt.setp(ax.xaxis.get_majorticklabels(), rotation=45)

        plt.tight_layout()
        return fig

    def create_dashboard_plots(
        self, report: InsightsReport, history: Optional[List[InsightsReport]] = None
    ) -> Dict[str, plt.Figure]:
        """Create all dashboard plots.

        Args:
            report (InsightsReport): Current report
            history (Optional[List[InsightsReport]]): Stored snapshots

        Returns:
            Dict[str, plt.Figure]: Dictionary of plot name to figure
        """
        plots = {
            "languages": self.create_language_plot(report.stats),
            "activity": self.create_activity_plot(report.stats),
            "tech_stack": self.create_tech_stack_plot(report.stats),
        }
        history_plot = self.create_history_plot(history or [])
        if history_plot is not None:
            plots["history"] = history_plot
        return plots

    def delete_old_plots(self, days: int):
        """Delete plots generated more than the given number of days ago.

        Plot files are named <owner>_<plot>_<YYYY-MM-DD>.png.

        Args:
            days (int): Age in days after which plots are deleted
        """
        cutoff = (datetime.now(timezone.utc) - timedelta(days=days)).date()
        for file in os.listdir(self.output_dir):
            if not file.endswith(".png"):
                continue
            try:
                plot_date = datetime.strptime(file[:-4].split("_")[-1], "%Y-%m-%d").date()
            except ValueError:
                continue
            if plot_date < cutoff:
                os.remove(os.path.join(self.output_dir, file))
