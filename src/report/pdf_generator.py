"""
PDF Report Generation Module.

This module renders a repository insights dashboard as a PDF document.
Features include:
- Overview of totals and the most recent commit
- Ranked language table with percentage share
- Tech stack usage per category
- Per-repository table
- Charts for languages, activity, tech stack and historical trends

Uses ReportLab for PDF generation and handles both tabular data and graphical elements.
"""

from typing import List, Optional
from xml.sax.saxutils import escape
import os

import matplotlib.pyplot as plt
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    Image,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from config import logger
from analyzers.models import AggregateStats, InsightsReport, TechCategory
from visualization.plotter import InsightsPlotter

HEADER_STYLE = [
    ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
    ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
    ("ALIGN", (0, 0), (-1, -1), "CENTER"),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("BACKGROUND", (0, 1), (-1, -1), colors.beige),
    ("GRID", (0, 0), (-1, -1), 1, colors.black),
]

PLOT_TITLES = {
    "languages": "Language Distribution",
    "activity": "Activity Timeline",
    "tech_stack": "Tech Stack Usage",
    "history": "Historical Trends",
}


class PDFReportGenerator:
    """
    Generates formatted PDF dashboards from repository insights.

    Attributes:
        styles (getSampleStyleSheet): ReportLab styles for document formatting.
        plotter (InsightsPlotter): Instance for creating data visualizations.
    """

    def __init__(self, plotter: InsightsPlotter):
        """Initialize the PDF generator with visualization capabilities.

        Args:
            plotter (InsightsPlotter): Instance for creating data visualizations.
        """
        self.styles = getSampleStyleSheet()
        self.plotter = plotter

    def _create_overview_table(self, report: InsightsReport) -> Table:
        """Create a formatted table with the report totals.

        Args:
            report (InsightsReport): Report to display.

        Returns:
            Table: Formatted ReportLab table with totals.
        """
        stats = report.stats
        data = [
            ["Metric", "Value"],
            ["Repositories", report.total_repos],
            ["Total Size (KB)", stats.total_size],
            ["Total Stars", stats.total_stars],
            ["Total Forks", stats.total_forks],
            ["Languages", len(stats.top_languages)],
            ["Generated", report.generated_at.strftime("%Y-%m-%d %H:%M:%S")],
        ]

        table = Table(data, colWidths=[3 * inch, 2 * inch])
        table.setStyle(TableStyle(HEADER_STYLE))
        return table

    def _create_last_commit(self, stats: AggregateStats) -> Paragraph:
        commit = stats.last_commit
        if commit is None:
            return Paragraph("No commits found.", self.styles["Normal"])
        # Only the subject line of the commit message
        subject = commit.message.splitlines()[0] if commit.message else ""
        return Paragraph(
            f"<b>{escape(commit.repository)}</b> on {commit.date.strftime('%Y-%m-%d %H:%M')}"
            f" by {escape(commit.author or 'unknown')}: {escape(subject)}",
            self.styles["Normal"],
        )

    def _create_languages_table(self, stats: AggregateStats, top_n: int = 10) -> Table:
        """Create a formatted table of the top languages.

        Args:
            stats (AggregateStats): Aggregate statistics.
            top_n (int): Number of languages to list.

        Returns:
            Table: Formatted ReportLab table with language sizes and shares.
        """
        total = sum(stats.top_languages.values()) or 1
        data = [["Language", "Bytes", "Share"]]
        for language, size in list(stats.top_languages.items())[:top_n]:
            data.append([language, f"{size:,}", f"{size / total:.1%}"])

        table = Table(data, colWidths=[2.5 * inch, 1.5 * inch, 1 * inch])
        table.setStyle(TableStyle(HEADER_STYLE))
        return table

    def _create_tech_stack_table(self, stats: AggregateStats) -> Table:
        """Create a formatted table of tech stack tags per category.

        Args:
            stats (AggregateStats): Aggregate statistics.

        Returns:
            Table: Formatted ReportLab table, one row per category.
        """
        data = [["Category", "Technologies (repositories)"]]
        for category in TechCategory:
            counts = stats.tech_stacks.get(category.value, {})
            ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
            text = ", ".join(f"{tag} ({count})" for tag, count in ranked) or "-"
            data.append(
                [
                    category.value.capitalize(),
                    Paragraph(escape(text), self.styles["Normal"]),
                ]
            )

        table = Table(data, colWidths=[1.5 * inch, 5 * inch])
        table.setStyle(
            TableStyle(
                HEADER_STYLE
                + [
                    ("ALIGN", (1, 1), (1, -1), "LEFT"),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ]
            )
        )
        return table

    def _create_repositories_table(self, report: InsightsReport) -> Table:
        """Create a formatted table listing every repository.

        Args:
            report (InsightsReport): Report to display.

        Returns:
            Table: Formatted ReportLab table with one row per repository.
        """
        data = [["Repository", "Stars", "Forks", "Language", "Stack", "Last Push"]]
        for repo in report.repositories:
            summary = repo.summary
            name = f"{summary.name} *" if repo.degraded else summary.name
            tags = ", ".join(tag for _, tag in repo.tech_stack.items()) or "-"
            data.append(
                [
                    Paragraph(escape(name), self.styles["Normal"]),
                    summary.stars,
                    summary.forks,
                    repo.primary_language or "-",
                    Paragraph(escape(tags), self.styles["Normal"]),
                    summary.pushed_at.strftime("%Y-%m-%d") if summary.pushed_at else "-",
                ]
            )

        table = Table(
            data,
            colWidths=[
                1.8 * inch,
                0.6 * inch,
                0.6 * inch,
                1 * inch,
                2 * inch,
                1 * inch,
            ],
            repeatRows=1,
        )
        table.setStyle(
            TableStyle(
                HEADER_STYLE
                + [
                    ("FONTSIZE", (0, 0), (-1, -1), 8),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ]
            )
        )
        return table

    def safe_name(self, name: str) -> str:
        """Convert an owner or repository name to a safe filename.

        Args:
            name (str): Original name.

        Returns:
            str: Safe filename.
        """
        return name.replace("/", "_").replace("\\", "_")

    def generate_report(
        self,
        report: InsightsReport,
        history: Optional[List[InsightsReport]],
        output_path: str,
        plots_dir: str,
    ) -> str:
        """Generate the insights dashboard PDF.

        Args:
            report (InsightsReport): Insights for the authenticated identity.
            history (Optional[List[InsightsReport]]): Stored snapshots for trends.
            output_path (str): Directory where the PDF report should be saved.
            plots_dir (str): Directory where the plots should be saved.

        Returns:
            str: Path of the generated PDF.

        Raises:
            Exception: If report generation fails.
        """
        logger.info(
            {
                "message": "Starting PDF report generation",
                "owner": report.owner,
                "output_path": output_path,
            }
        )
        try:
            safe_owner = self.safe_name(report.owner)
            report_date = report.generated_at.strftime("%Y-%m-%d")
            pdf_path = os.path.join(output_path, f"{safe_owner}_insights_{report_date}.pdf")
            doc = SimpleDocTemplate(pdf_path, pagesize=letter)
            elements = []

            elements.extend(
                [
                    Paragraph(
                        f"GitHub Repository Insights: {report.owner}",
                        self.styles["Heading1"],
                    ),
                    Spacer(1, 20),
                    Paragraph("Overview", self.styles["Heading2"]),
                    Spacer(1, 10),
                    self._create_overview_table(report),
                    Spacer(1, 20),
                    Paragraph("Latest Commit", self.styles["Heading2"]),
                    Spacer(1, 10),
                    self._create_last_commit(report.stats),
                    Spacer(1, 30),
                ]
            )

            elements.extend(
                [
                    Paragraph("Top Languages", self.styles["Heading2"]),
                    Spacer(1, 10),
                    self._create_languages_table(report.stats),
                    Spacer(1, 30),
                    Paragraph("Tech Stack", self.styles["Heading2"]),
                    Spacer(1, 10),
                    self._create_tech_stack_table(report.stats),
                    Spacer(1, 30),
                    Paragraph("Repositories", self.styles["Heading2"]),
                    Spacer(1, 10),
                    self._create_repositories_table(report),
                    Spacer(1, 10),
                ]
            )
            if any(repo.degraded for repo in report.repositories):
                elements.append(
                    Paragraph(
                        "* details could not be fetched for this repository",
                        self.styles["Italic"],
                    )
                )
            elements.append(Spacer(1, 30))

            plots = self.plotter.create_dashboard_plots(report, history)
            for name, fig in plots.items():
                plot_path = os.path.join(plots_dir, f"{safe_owner}_{name}_{report_date}.png")
                fig.savefig(plot_path, format="png", dpi=150, bbox_inches="tight")
                plt.close(fig)

                elements.extend(
                    [
                        Paragraph(PLOT_TITLES.get(name, name), self.styles["Heading3"]),
                        Spacer(1, 10),
                        Image(plot_path, width=6.5 * inch, height=4.5 * inch),
                        Spacer(1, 20),
                    ]
                )

            doc.build(elements)
            logger.info(
                {
                    "message": "PDF report generated successfully",
                    "output_path": pdf_path,
                }
            )
            return pdf_path

        except Exception as e:
            logger.error(
                {
                    "message": "PDF report generation failed",
                    "error": str(e),
                    "output_path": output_path,
                }
            )
            raise
