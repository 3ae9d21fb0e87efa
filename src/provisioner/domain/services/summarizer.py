"""Structured summaries extracted from OpenTofu's human-readable output.

Both extractors are pure: they only read the text they are given.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from provisioner.domain.models.execution import (
    ApplySummary,
    DestroySummary,
    NoSummary,
    PlanChanges,
    PlanReport,
    PlanSummary,
    ResourceChange,
    Summary,
)


PLAN_PATTERN = re.compile(
    r"Plan:\s+(\d+)\s+to add,\s+(\d+)\s+to change,\s+(\d+)\s+to destroy"
)
APPLY_PATTERN = re.compile(
    r"Apply complete! Resources:\s+(\d+)\s+added,\s+(\d+)\s+changed,\s+(\d+)\s+destroyed"
)
DESTROY_PATTERN = re.compile(r"Destroy complete! Resources:\s+(\d+)\s+destroyed")

RESOURCE_MARKER_PATTERN = re.compile(r"^[+~-]\s+resource\s+")
RESOURCE_DECLARATION_PATTERN = re.compile(r'resource\s+"([^"]+)"\s+"([^"]+)"')

NO_CHANGES_PHRASE = "No changes"

CHANGE_ACTIONS: dict[str, str] = {
    "+": "create",
    "~": "update",
    "-": "delete",
}


def _counts(match: re.Match[str]) -> list[int]:
    return [int(group) for group in match.groups()]


# Tried in order against each line; the first hit ends the scan.
SUMMARY_RULES: list[tuple[re.Pattern[str], Callable[[list[int]], Summary]]] = [
    (
        PLAN_PATTERN,
        lambda n: PlanSummary(to_add=n[0], to_change=n[1], to_destroy=n[2]),
    ),
    (
        APPLY_PATTERN,
        lambda n: ApplySummary(added=n[0], changed=n[1], destroyed=n[2]),
    ),
    (
        DESTROY_PATTERN,
        lambda n: DestroySummary(destroyed=n[0]),
    ),
]


def summarize(text: str) -> Summary:
    """Return the first plan/apply/destroy tally found in ``text``.

    Lines are scanned in order and every rule is tried per line, so the
    earliest matching line wins regardless of which rule it matches.
    Returns ``NoSummary`` when nothing matches.
    """
    for line in text.split("\n"):
        for pattern, build in SUMMARY_RULES:
            match = pattern.search(line)
            if match:
                return build(_counts(match))
    return NoSummary()


def extract_plan_report(text: str) -> PlanReport:
    """Build the presentation view of a plan: tally, resource changes, no-op flag."""
    changes = None
    plan_match = PLAN_PATTERN.search(text)
    if plan_match:
        add, change, destroy = _counts(plan_match)
        changes = PlanChanges(add=add, change=change, destroy=destroy)

    resource_changes: list[ResourceChange] = []
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not RESOURCE_MARKER_PATTERN.match(line):
            continue
        declaration = RESOURCE_DECLARATION_PATTERN.search(line)
        if declaration:
            resource_changes.append(ResourceChange(
                action=CHANGE_ACTIONS[line[0]],
                type=declaration.group(1),
                name=declaration.group(2),
            ))

    return PlanReport(
        changes=changes,
        resource_changes=resource_changes,
        no_changes=NO_CHANGES_PHRASE in text,
    )
