"""
GroupWeaver CLI - group a project's files into context-sized bundles
"""

import os
import click
import sys
from pathlib import Path
import logging

from ..config.settings import SettingsManager
from ..core.errors import ApiError, ConfigError
from ..core.grouping_engine import GroupingEngine
from ..core.json_utils import safe_json_dumps, serialize_graph, serialize_groups
from ..core.models import GroupingStrategy, RelationshipType
from ..core.project_loader import ProjectLoader
from ..core.relationship_detector import RelationshipDetector
from ..core.token_budget import TokenBudgetOptimizer
from ..core.tokenizer import suggest_token_limit

# Setup basic logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)

STRATEGY_CHOICES = [s.value for s in GroupingStrategy]
RELATIONSHIP_CHOICES = [t.value for t in RelationshipType]


@click.group(context_settings=dict(help_option_names=['-h', '--help']))
@click.version_option(package_name="groupweaver")
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging.')
def main(verbose):
    """
    GroupWeaver CLI: relationship-aware file grouping for LLM context windows.

    Detects how a project's files relate, clusters them with one of several
    strategies and reshapes the clusters to fit a token budget.
    """
    # Let GitPython load where no git executable is installed
    os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _load_settings(config_file):
    try:
        return SettingsManager(Path(config_file) if config_file else None).config
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(2)


def _load_files(path, ignore_patterns, size_limit_mb):
    loader = ProjectLoader(Path(path), ignore_patterns=ignore_patterns, size_limit_mb=size_limit_mb)
    files = loader.load()
    if not files:
        logger.error("No files found to group.")
        sys.exit(1)
    return files


@main.command()
@click.argument('path', type=click.Path(exists=True, file_okay=False, resolve_path=True))
@click.option('--strategy', '-s', type=click.Choice(STRATEGY_CHOICES), help='Grouping strategy (default from config: mixed).')
@click.option('--max-group-size', type=click.IntRange(min=1), help='Maximum files per initial group.')
@click.option('--min-strength', type=click.FloatRange(0.0, 1.0), help='Minimum relationship strength to follow.')
@click.option('--priority-threshold', type=float, help='Minimum importance for mixed-strategy seeds.')
@click.option('--token-limit', '-l', type=click.IntRange(min=1), help='Token budget per group.')
@click.option('--model', '-m', help='Derive the token budget from a model context window (e.g. gpt-4o).')
@click.option('--reserve-ratio', type=click.FloatRange(0.0, 0.95), default=0.2, show_default=True,
              help='Share of the model context kept free for the response.')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True, dir_okay=False), help='YAML or JSON settings file.')
@click.option('--project-id', type=int, default=0, show_default=True, help='Project id stamped on every group.')
@click.option('--exclude', '-e', multiple=True, help='Extra ignore patterns (e.g. "*/fixtures/*").')
@click.option('--format', '-f', 'output_format', type=click.Choice(['text', 'json']), default='text', show_default=True)
def group(path, strategy, max_group_size, min_strength, priority_threshold, token_limit, model,
          reserve_ratio, config_file, project_id, exclude, output_format):
    """Group the files under PATH."""
    if token_limit and model:
        raise click.UsageError("Use either --token-limit or --model, not both.")

    config = _load_settings(config_file)
    if strategy:
        config.strategy = strategy
    if max_group_size is not None:
        config.max_group_size = max_group_size
    if min_strength is not None:
        config.min_relationship_strength = min_strength
    if priority_threshold is not None:
        config.priority_threshold = priority_threshold

    if model:
        try:
            token_limit = suggest_token_limit(model, reserve_ratio)
        except KeyError:
            raise click.BadParameter(f"Unknown model '{model}'", param_hint='--model')
    token_limit = token_limit or config.token_limit

    files = _load_files(path, config.ignore_patterns + list(exclude), config.size_limit_mb)
    logger.info(f"Grouping {len(files)} files with '{config.strategy}' strategy")

    try:
        groups = GroupingEngine().group(files, config.strategy, project_id, config.to_options())
        if token_limit:
            groups = TokenBudgetOptimizer().optimize(groups, files, token_limit)
    except ApiError as e:
        logger.error(f"Grouping failed: {e}")
        sys.exit(1)

    if output_format == 'json':
        click.echo(safe_json_dumps(serialize_groups(groups), indent=2))
        return

    for g in groups:
        tokens = f", ~{g.estimated_tokens:,} tokens" if g.estimated_tokens is not None else ""
        click.echo(f"[{g.id}] {g.name} ({g.strategy.value}, {g.size} files, priority {g.priority:.2f}{tokens})")
        for file_id in g.file_ids:
            click.echo(f"  - {file_id}")
    click.echo(f"\n{len(groups)} groups, {len(files)} files")


@main.command()
@click.argument('path', type=click.Path(exists=True, file_okay=False, resolve_path=True))
@click.option('--type', '-t', 'types', multiple=True, type=click.Choice(RELATIONSHIP_CHOICES),
              help='Only show these relationship types (repeatable).')
@click.option('--min-strength', type=click.FloatRange(0.0, 1.0), default=0.0, show_default=True)
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True, dir_okay=False), help='YAML or JSON settings file.')
@click.option('--exclude', '-e', multiple=True, help='Extra ignore patterns.')
@click.option('--format', '-f', 'output_format', type=click.Choice(['text', 'json']), default='text', show_default=True)
def relationships(path, types, min_strength, config_file, exclude, output_format):
    """Show the relationship graph detected for PATH."""
    config = _load_settings(config_file)
    files = _load_files(path, config.ignore_patterns + list(exclude), config.size_limit_mb)

    graph = RelationshipDetector().detect(files)
    wanted = {RelationshipType(t) for t in types} if types else set(RelationshipType)
    graph.edges = [e for e in graph.edges if e.type in wanted and e.strength >= min_strength]

    if output_format == 'json':
        click.echo(safe_json_dumps(serialize_graph(graph), indent=2))
        return

    for edge in graph.edges:
        click.echo(f"{edge.source_file_id} -> {edge.target_file_id} [{edge.type.value} {edge.strength:.2f}]")
    click.echo(f"\n{len(graph.edges)} relationships, {len(graph.nodes)} files")


if __name__ == '__main__':
    main()
