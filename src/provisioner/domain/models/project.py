"""Project reference resolved from the project directory."""

from __future__ import annotations

import re

from provisioner.domain.errors import ValidationError
from provisioner.domain.models.base import ValueObject


# A path segment holding one of these cannot be passed to ``cd`` unchanged
CONTROL_CHARACTER_PATTERN = re.compile(r"[\x00-\x1f\x7f]")


def check_path_segment(value: str, field: str) -> str:
    if CONTROL_CHARACTER_PATTERN.search(value):
        raise ValidationError(f"{field} must not contain control characters")
    return value


class Project(ValueObject):
    project_id: str
    project_name: str

    def workspace_path(self, root: str, space_name: str) -> str:
        """Absolute workspace directory for ``space_name`` under ``root``."""
        check_path_segment(self.project_name, "projectName")
        check_path_segment(space_name, "spaceName")
        return f"{root.rstrip('/')}/{self.project_name}/{space_name}"
