"""Unit tests for the tool output summarizer."""

from __future__ import annotations

from provisioner.domain.models.execution import (
    ApplySummary,
    DestroySummary,
    NoSummary,
    PlanChanges,
    PlanSummary,
)
from provisioner.domain.services.summarizer import extract_plan_report, summarize


class TestSummarize:
    def test_plan_tally(self, plan_output: str) -> None:
        assert summarize(plan_output) == PlanSummary(to_add=1, to_change=1, to_destroy=1)

    def test_apply_tally(self, apply_output: str) -> None:
        assert summarize(apply_output) == ApplySummary(added=1, changed=1, destroyed=1)

    def test_destroy_tally(self) -> None:
        text = "aws_eip.legacy: Destroying...\nDestroy complete! Resources: 4 destroyed.\n"
        assert summarize(text) == DestroySummary(destroyed=4)

    def test_no_match(self) -> None:
        assert summarize("Initializing the backend...\n") == NoSummary()
        assert summarize("") == NoSummary()

    def test_first_matching_line_wins(self) -> None:
        text = (
            "Apply complete! Resources: 2 added, 0 changed, 0 destroyed.\n"
            "Plan: 9 to add, 9 to change, 9 to destroy.\n"
        )
        assert summarize(text) == ApplySummary(added=2, changed=0, destroyed=0)

    def test_multi_digit_counts(self) -> None:
        text = "Plan: 12 to add, 0 to change, 305 to destroy."
        assert summarize(text) == PlanSummary(to_add=12, to_change=0, to_destroy=305)


class TestExtractPlanReport:
    def test_full_report(self, plan_output: str) -> None:
        report = extract_plan_report(plan_output)

        assert report.changes == PlanChanges(add=1, change=1, destroy=1)
        assert [(c.action, c.type, c.name) for c in report.resource_changes] == [
            ("create", "aws_s3_bucket", "assets"),
            ("update", "aws_instance", "web"),
            ("delete", "aws_eip", "legacy"),
        ]
        assert report.no_changes is False

    def test_no_changes(self) -> None:
        text = "No changes. Your infrastructure matches the configuration.\n"
        report = extract_plan_report(text)
        assert report.changes is None
        assert report.resource_changes == []
        assert report.no_changes is True

    def test_attribute_lines_are_not_resources(self) -> None:
        text = '  + bucket = "resource \\"a\\" \\"b\\""\n'
        assert extract_plan_report(text).resource_changes == []
