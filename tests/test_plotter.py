"""
Insights Plotter Test Suite.
"""

import os
from datetime import datetime, timedelta, timezone

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402

from analyzers.models import AggregateStats, InsightsReport  # noqa: E402
from visualization.plotter import InsightsPlotter  # noqa: E402


@pytest.fixture
def plotter(tmp_path):
    return InsightsPlotter(str(tmp_path / "plots"))


@pytest.fixture
def stats():
    return AggregateStats(
        total_stars=7,
        total_forks=2,
        top_languages={"JavaScript": 1500, "Python": 200},
        tech_stacks={
            "frontend": {"React": 2},
            "backend": {"Python": 1},
            "database": {},
            "tools": {"Jest": 1},
        },
        activity_by_month={"2024-03": 2, "2023-11": 1},
    )


def test_language_plot(plotter, stats):
    fig = plotter.create_language_plot(stats, top_n=1)

    ax = fig.axes[0]
    assert len(ax.patches) == 1
    assert ax.get_title() == "Top 1 Languages"
    plt.close(fig)


def test_activity_plot_is_chronological(plotter, stats):
    fig = plotter.create_activity_plot(stats)

    line = fig.axes[0].get_lines()[0]
    assert list(line.get_ydata()) == [1, 2]
    plt.close(fig)


def test_tech_stack_plot_has_panel_per_category(plotter, stats):
    fig = plotter.create_tech_stack_plot(stats)

    assert [ax.get_title() for ax in fig.axes] == [
        "Frontend",
        "Backend",
        "Database",
        "Tools",
    ]
    plt.close(fig)


def test_empty_stats_still_plot(plotter):
    empty = AggregateStats()
    for fig in (
        plotter.create_language_plot(empty),
        plotter.create_activity_plot(empty),
        plotter.create_tech_stack_plot(empty),
    ):
        assert fig is not None
        plt.close(fig)


def test_dashboard_plots_include_history_only_when_available(plotter, stats):
    report = InsightsReport(owner="octocat", repositories=[], stats=stats, total_repos=0)

    without_history = plotter.create_dashboard_plots(report)
    with_history = plotter.create_dashboard_plots(report, [report, report])

    assert set(without_history) == {"languages", "activity", "tech_stack"}
    assert set(with_history) == {"languages", "activity", "tech_stack", "history"}
    for fig in list(without_history.values()) + list(with_history.values()):
        plt.close(fig)


def test_delete_old_plots(plotter):
    today = datetime.now(timezone.utc).date()
    old = today - timedelta(days=40)
    keep = os.path.join(plotter.output_dir, f"octocat_languages_{today:%Y-%m-%d}.png")
    stale = os.path.join(plotter.output_dir, f"octocat_languages_{old:%Y-%m-%d}.png")
    other = os.path.join(plotter.output_dir, "notes.png")
    for path in (keep, stale, other):
        open(path, "wb").close()

    plotter.delete_old_plots(30)

    assert os.path.exists(keep)
    assert not os.path.exists(stale)
    assert os.path.exists(other)


def test_activity_plot_leaves_out_unknown_bucket(plotter):
    stats = AggregateStats(activity_by_month={"2024-03": 2, "unknown": 1})

    fig = plotter.create_activity_plot(stats)

    line = fig.axes[0].get_lines()[0]
    assert list(line.get_ydata()) == [2]
    plt.close(fig)
