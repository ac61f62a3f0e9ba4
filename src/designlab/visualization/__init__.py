"""
Visualization module for Design Lab runs.

Renders designs and ranking results as Markdown.
"""

from designlab.visualization.markdown_exporter import (
    ResultsReportData,
    render_design_markdown,
    render_results_markdown,
)

__all__ = ["ResultsReportData", "render_design_markdown", "render_results_markdown"]
