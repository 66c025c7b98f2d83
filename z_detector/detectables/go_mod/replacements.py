"""Replacement directives from ``go list -m -u -json all`` output.

The listing is a stream of JSON objects separated by blank lines::

    {
        "Path": "github.com/codegangsta/negroni",
        "Version": "v1.0.0",
        "Replace": {
            "Path": "github.com/codegangsta/negroni",
            "Version": "v2.0.0"
        }
    }

Modules with a ``Replace`` record yield ``path@version -> path@version``;
a replacement without a version (e.g. a local directory) maps to the bare
replacement path.
"""

from __future__ import annotations

import json
import logging
import re

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s*")


def _module_token(path: object, version: object) -> str | None:
    if not isinstance(path, str) or not path:
        return None
    if isinstance(version, str) and version:
        return f"{path}@{version}"
    return path


def iter_json_records(lines: list[str]) -> list[dict]:
    """Decode a stream of concatenated JSON objects.

    Raises:
        json.JSONDecodeError: the stream is not valid JSON.
    """
    text = "\n".join(lines)
    decoder = json.JSONDecoder()
    records: list[dict] = []
    pos = _WHITESPACE.match(text, 0).end()
    while pos < len(text):
        record, pos = decoder.raw_decode(text, pos)
        if isinstance(record, dict):
            records.append(record)
        else:
            logger.debug("Ignoring non-object module record: %r", record)
        pos = _WHITESPACE.match(text, pos).end()
    return records


def extract_replacements(list_json_output: list[str]) -> dict[str, str]:
    """Map ``original -> replacement`` tokens, in listing order."""
    replacements: dict[str, str] = {}
    for record in iter_json_records(list_json_output):
        replace = record.get("Replace")
        if not isinstance(replace, dict):
            continue
        original = _module_token(record.get("Path"), record.get("Version"))
        replacement = _module_token(replace.get("Path"), replace.get("Version"))
        if original is None or replacement is None:
            logger.debug("Skipping incomplete replace record: %r", record)
            continue
        if original != replacement:
            replacements[original] = replacement
    return replacements


def apply_replacements(graph_lines: list[str], replacements: dict[str, str]) -> list[str]:
    """
    Substitute replacement tokens into ``go mod graph`` lines.

    Every directive whose original token occurs in a line is applied, in
    mapping order, to the already-substituted line. Lines are located by
    value: the line at each position is looked up again with ``index``, so
    textually identical lines resolve to the first one still carrying that
    text. Tokens match as plain substrings, so ``a@v1.0.0`` also matches
    inside ``a@v1.0.0-rc1``.
    """
    lines = list(graph_lines)
    if not replacements:
        return lines
    for position in range(len(lines)):
        line = lines[position]
        index = lines.index(line)
        updated = line
        for original, replacement in replacements.items():
            if original in updated:
                updated = updated.replace(original, replacement)
        if updated != line:
            lines[index] = updated
    return lines
