import re
from typing import Any, Iterable, Iterator

import config
from helpdesk.models import DepartmentProfile

from .contexts import EVALUATOR_CONTEXTS, lookup

UNKNOWN_DEPARTMENT = "Unknown Department"


def department_context(department: DepartmentProfile) -> str:
    """Caller-supplied responsibility text, else the built-in context for that name."""
    if department.responsibility and department.responsibility.strip():
        return department.responsibility.strip()
    return lookup(EVALUATOR_CONTEXTS, department.name)


class DepartmentDirectory:
    """Caller-supplied departments for one request; the only source of department ids."""

    def __init__(
        self,
        departments: Iterable[DepartmentProfile | dict[str, Any]],
        default_name: str | None = None,
        id_pattern: str | None = None,
    ):
        self.departments = [
            d if isinstance(d, DepartmentProfile) else DepartmentProfile.model_validate(d)
            for d in departments
        ]
        if not self.departments:
            raise ValueError("At least one department is required.")
        self.id_pattern = re.compile(id_pattern or config.DEPARTMENT_ID_PATTERN)
        well_formed = [d for d in self.departments if self.is_valid_id(d.id)]
        if not well_formed:
            raise ValueError("No department has a well-formed id.")
        self.default_name = default_name or config.DEFAULT_DEPARTMENT
        self.default = self.resolve(self.default_name) or well_formed[0]

    def __iter__(self) -> Iterator[DepartmentProfile]:
        return iter(self.departments)

    def __len__(self) -> int:
        return len(self.departments)

    @property
    def ids(self) -> set[str]:
        return {d.id for d in self.departments}

    @property
    def names(self) -> list[str]:
        return [d.name for d in self.departments]

    def by_name(self, name: str | None) -> DepartmentProfile | None:
        if not isinstance(name, str):
            return None
        wanted = name.strip().casefold()
        for d in self.departments:
            if d.name.strip().casefold() == wanted:
                return d
        return None

    def by_id(self, department_id: str | None) -> DepartmentProfile | None:
        for d in self.departments:
            if d.id == department_id:
                return d
        return None

    def name_for_id(self, department_id: str | None) -> str:
        d = self.by_id(department_id)
        return d.name if d else UNKNOWN_DEPARTMENT

    def is_valid_id(self, department_id: Any) -> bool:
        if not isinstance(department_id, str):
            return False
        return bool(self.id_pattern.match(department_id)) and department_id in self.ids

    def resolve(self, name: str | None) -> DepartmentProfile | None:
        """First department named `name` whose id is well formed, or None."""
        if not isinstance(name, str):
            return None
        wanted = name.strip().casefold()
        for d in self.departments:
            if d.name.strip().casefold() == wanted and self.is_valid_id(d.id):
                return d
        return None
