"""CLI entry point: z-detect.

Subcommands:
    z-detect scan /path/to/project     # Detect ecosystems and extract graphs
    z-detect rules                     # List the built-in detector rules
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from z_detector.core.config import DetectorSettings
from z_detector.core.logging import setup_logging
from z_detector.detectables.registry import create_default_rule_set
from z_detector.environment import ExtractionEnvironmentProvider
from z_detector.exceptions import DirectoryListError
from z_detector.executable import ExecutableResolver, ExecutableRunner
from z_detector.finder import DetectorFinderOptions
from z_detector.models.detector import DetectorType, StatusType
from z_detector.tool import DetectorTool

_SETTINGS = DetectorSettings.from_env()

_DETECTOR_TYPES = [t.name for t in DetectorType]


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """Z-Detector: find package-manager ecosystems and extract dependency graphs."""
    setup_logging("DEBUG" if verbose else None)


@main.command("scan")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--max-depth",
    type=int,
    default=_SETTINGS.max_depth,
    show_default=True,
    help="Deepest directory level to search (root = 0)",
)
@click.option(
    "--exclude",
    multiple=True,
    help="Directory name or glob to skip (repeatable)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.option(
    "--project-detector",
    type=click.Choice(_DETECTOR_TYPES, case_sensitive=False),
    default=_SETTINGS.project_detector,
    help="Detector type whose project name/version is preferred",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=str(_SETTINGS.output_dir) if _SETTINGS.output_dir else None,
    help="Base directory for extraction scratch output",
)
@click.option("--keep-output", is_flag=True, help="Do not delete extraction output")
def scan(
    path: str,
    max_depth: int,
    exclude: tuple[str, ...],
    as_json: bool,
    project_detector: str | None,
    output_dir: str | None,
    keep_output: bool,
) -> None:
    """Detect ecosystems under PATH and extract their dependency graphs."""
    options = DetectorFinderOptions(
        max_depth=max_depth,
        excluded_directory_names=list(_SETTINGS.excluded_directory_names),
        excluded_path_patterns=list(exclude),
        follow_symlinks=_SETTINGS.follow_symlinks,
    )
    rule_set = create_default_rule_set(
        runner=ExecutableRunner(timeout=_SETTINGS.process_timeout),
        resolver=ExecutableResolver({"go": _SETTINGS.go_path}),
    )
    preferred = DetectorType[project_detector.upper()] if project_detector else None
    base_dir = Path(output_dir) if output_dir else None

    with ExtractionEnvironmentProvider(base_dir=base_dir, keep=keep_output) as provider:
        tool = DetectorTool(rule_set, provider)
        try:
            result = tool.run(path, options, preferred_detector_type=preferred)
        except DirectoryListError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(2)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if result.root_tree is None:
        click.echo(f"Nothing to search in {path}")
        return

    source_root = Path(path)
    click.echo("Search results:")
    for node in result.root_tree.as_flat_list():
        if not node.evaluations:
            continue
        click.echo(f"  {node.relative_path(source_root)}")
        applied = [e for e in node.evaluations if e.is_applicable()]
        not_applied = [e for e in node.evaluations if not e.is_applicable()]
        if applied:
            click.echo("    APPLIED:")
            for evaluation in applied:
                click.echo(f"      {evaluation.rule.descriptive_name}")
        if not_applied:
            click.echo("    DID NOT APPLY:")
            for evaluation in not_applied:
                reason = (
                    evaluation.searchability_message
                    if not evaluation.is_searchable()
                    else evaluation.applicability_message
                )
                click.echo(f"      {evaluation.rule.descriptive_name}: {reason}")

    click.echo(f"\nExtractions: {result.extraction_count}")
    for evaluation in result.evaluations:
        if evaluation.is_applicable() and not evaluation.is_extractable():
            click.echo(
                f"  [!] {evaluation.rule.descriptive_name}: "
                f"{evaluation.extractability_message}"
            )
        elif evaluation.extraction is not None and not evaluation.was_extraction_successful():
            extraction = evaluation.extraction
            detail = extraction.description or (
                str(extraction.error) if extraction.error else extraction.result.value
            )
            click.echo(f"  [!] {evaluation.rule.descriptive_name}: {detail}")

    click.echo("\nStatus:")
    if not result.status_map:
        click.echo("  (no detectors applied)")
    for detector_type, status in sorted(result.status_map.items(), key=lambda i: i[0].name):
        icon = "+" if status is StatusType.SUCCESS else "!"
        click.echo(f"  [{icon}] {detector_type.name}: {status.value}")

    if result.code_location_map:
        click.echo("\nCode locations:")
        for key, location in result.code_location_map.items():
            graph = location.graph
            click.echo(
                f"  {key}  roots={len(graph.roots)}  "
                f"components={len(graph.nodes)}  relationships={len(graph.edges)}"
            )

    if result.project_name_version:
        nv = result.project_name_version
        click.echo(f"\nProject: {nv.name}" + (f" {nv.version}" if nv.version else ""))


@main.command("rules")
def rules() -> None:
    """List the built-in detector rules in evaluation order."""
    for rule in create_default_rule_set():
        flags = []
        if rule.max_depth is not None:
            flags.append(f"max_depth={rule.max_depth}")
        if not rule.nestable:
            flags.append("not nestable")
        if rule.yields_to:
            flags.append("yields to " + ", ".join(sorted(t.name for t in rule.yields_to)))
        if rule.nested is not None:
            flags.append("nested: " + ", ".join(r.name for r in rule.nested))
        suffix = f"  ({'; '.join(flags)})" if flags else ""
        click.echo(f"  {rule.descriptive_name}{suffix}")


if __name__ == "__main__":
    main()
