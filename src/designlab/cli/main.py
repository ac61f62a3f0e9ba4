"""
design-lab command line interface.

Commands:
    run        Generate, review, score and rank designs for a task
    aggregate  Recompute ranking and report for a persisted run
    init       Write a starter .designlab/design-lab.jsonc
    schemas    Export JSON Schemas for config and agent output
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import click

from designlab import __version__
from designlab.application import DesignLabOrchestrator, DesignTask, RunAggregator
from designlab.cli.console import (
    console,
    print_error,
    print_failures,
    print_header,
    print_rankings,
    print_run_info,
    print_success,
)
from designlab.cli.logging_setup import setup_logging
from designlab.cli.options import config_options
from designlab.config import DesignLabConfig, load_config, write_config_template
from designlab.config.template import DEFAULT_MODELS
from designlab.domain.exceptions import (
    CompletionCancelled,
    ConfigurationError,
    DesignLabError,
    DuplicateRunError,
)
from designlab.infrastructure import (
    AgentClientRegistry,
    FilesystemRunStore,
    find_most_recent_run,
)
from designlab.schemas import export_schemas

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def _output_dir(config: DesignLabConfig, project_dir: str) -> Path:
    base = Path(config.output.base_dir)
    return base if base.is_absolute() else Path(project_dir) / base


def _client_kwargs(config: DesignLabConfig, base_url: str | None) -> dict[str, Any]:
    provider = config.provider
    return {
        "base_url": base_url or provider.base_url,
        "api_key_env": provider.api_key_env,
        "timeout": provider.request_timeout,
    }


def _read_requirements(requirements: str | None, requirements_file: str | None) -> str:
    if requirements_file:
        text = Path(requirements_file).read_text(encoding="utf-8")
    else:
        text = requirements or ""
    if not text.strip():
        raise click.UsageError("Provide REQUIREMENTS or --requirements-file")
    return text


@click.group()
@click.version_option(__version__, prog_name="design-lab")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose (DEBUG) logging to console")
@click.option("--log-file", default=None, type=click.Path(), help="Path to log file")
def main(verbose: bool, log_file: str | None) -> None:
    """Design Lab - competing design proposals, reviewed and ranked."""
    setup_logging("designlab", log_file, verbose)


@main.command()
@click.argument("requirements", required=False)
@click.option(
    "--requirements-file",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Read requirements from a file instead of the argument",
)
@click.option("--topic", default=None, help="Run topic; generated by a model when omitted")
@click.option("--constraints", default="", help="Constraints every design must respect")
@click.option("--nfr", "non_functional", default="", help="Non-functional requirements")
@click.option(
    "--client",
    "client_name",
    default="openai",
    show_default=True,
    help="Agent client to use (see the designlab.agent_clients entry points)",
)
@click.option("--base-url", default=None, help="Override provider.base_url")
@config_options
def run(
    requirements: str | None,
    requirements_file: str | None,
    topic: str | None,
    constraints: str,
    non_functional: str,
    client_name: str,
    base_url: str | None,
    project_dir: str,
    config_file: str | None,
    no_user_config: bool,
) -> None:
    """Run the full design lab for REQUIREMENTS."""
    task = DesignTask(
        requirements=_read_requirements(requirements, requirements_file),
        constraints=constraints,
        non_functional_requirements=non_functional,
    )

    try:
        config = load_config(project_dir, config_file, include_user=not no_user_config)
        client = AgentClientRegistry.create(client_name, **_client_kwargs(config, base_url))
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        print_error(str(e), "Run 'design-lab init' or pass --config.")
        sys.exit(1)
    except KeyError as e:
        print_error(str(e.args[0]))
        sys.exit(1)

    output_dir = _output_dir(config, project_dir)
    print_header("Design Lab", subtitle=topic)
    print_run_info(
        {
            "Design models": ", ".join(config.design_models),
            "Review models": ", ".join(config.qualitative_models) or "(disabled)",
            "Scoring models": ", ".join(config.scoring_models) or "(disabled)",
            "Output": str(output_dir),
        }
    )

    orchestrator = DesignLabOrchestrator.from_config(config, client, FilesystemRunStore(output_dir))
    try:
        summary = orchestrator.run(task, topic=topic)
    except DuplicateRunError as e:
        print_error(str(e), "Pass a different --topic or remove the existing run.")
        sys.exit(1)
    except (KeyboardInterrupt, CompletionCancelled):
        logger.warning("Interrupted by user")
        click.echo("\n\nInterrupted by user.")
        sys.exit(EXIT_INTERRUPTED)
    except DesignLabError as e:
        logger.error("Run failed: %s: %s", type(e).__name__, e)
        print_error(str(e))
        sys.exit(1)

    print_rankings(summary.rankings)
    print_failures(summary.failures)
    if not summary.rankings:
        print_error("No design was generated successfully", "Check the log for model errors.")
        sys.exit(1)
    print_success(f"Results written to {summary.run_dir}")


@main.command()
@click.argument("run_dir", required=False, type=click.Path(exists=True, file_okay=False))
@config_options
def aggregate(
    run_dir: str | None,
    project_dir: str,
    config_file: str | None,
    no_user_config: bool,
) -> None:
    """Recompute ranking.json and results.md for RUN_DIR (default: latest run)."""
    try:
        config = load_config(project_dir, config_file, include_user=not no_user_config)
    except ConfigurationError as e:
        print_error(str(e), "Run 'design-lab init' or pass --config.")
        sys.exit(1)

    output_dir = _output_dir(config, project_dir)
    if run_dir is None:
        latest = find_most_recent_run(output_dir)
        if latest is None:
            print_error(f"No runs found in {output_dir}")
            sys.exit(1)
        run_dir = str(latest)

    aggregator = RunAggregator(config, FilesystemRunStore(output_dir))
    try:
        rankings = aggregator.aggregate_run(run_dir)
    except (OSError, ValueError) as e:
        print_error(f"Cannot aggregate {run_dir}: {e}")
        sys.exit(1)

    print_rankings(rankings)
    print_success(f"Results written to {Path(run_dir) / 'results'}")


@main.command()
@click.option(
    "--model",
    "models",
    multiple=True,
    help=f"Design model (repeatable; default: {', '.join(DEFAULT_MODELS)})",
)
@click.option("--review-model", "review_models", multiple=True, help="Review model (repeatable)")
@click.option(
    "--project-dir",
    default=".",
    show_default=True,
    type=click.Path(file_okay=False),
    help="Project root to write .designlab/ into",
)
def init(models: tuple[str, ...], review_models: tuple[str, ...], project_dir: str) -> None:
    """Write a starter .designlab/design-lab.jsonc."""
    try:
        path = write_config_template(
            project_dir,
            design_models=models or DEFAULT_MODELS,
            review_models=review_models or None,
        )
    except ConfigurationError as e:
        print_error(str(e))
        sys.exit(1)
    print_success(f"Created {path}")


@main.command()
@click.argument("out_dir", type=click.Path(file_okay=False))
def schemas(out_dir: str) -> None:
    """Export JSON Schemas for config, designs, reviews and scores to OUT_DIR."""
    paths = export_schemas(out_dir)
    for path in paths:
        console.print(f"  {path}")
    print_success(f"Wrote {len(paths)} schemas to {out_dir}")

