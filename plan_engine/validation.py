"""
IRH Selection Validator
=======================

Checks a selection against the module catalog.

Problems are returned as data, never raised. Selections built by the
resolver always pass; this exists for selections arriving from outside,
such as a saved plan that predates a catalog change.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .modules.registry import ModuleCatalog


@dataclass(frozen=True)
class Violation:
    """A module whose requirement is missing from the selection.

    missing_requirement is None when module_id itself is not in the catalog.
    A selection without the baseline gets one violation naming the baseline,
    with missing_baseline set.
    """
    module_id: str
    missing_requirement: Optional[str]
    missing_baseline: bool = False

    @property
    def unknown(self) -> bool:
        return self.missing_requirement is None and not self.missing_baseline

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module_id": self.module_id,
            "missing_requirement": self.missing_requirement,
            "unknown_module": self.unknown,
            "missing_baseline": self.missing_baseline,
        }


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    violations: Tuple[Violation, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "violations": [v.to_dict() for v in self.violations],
        }


def validate(catalog: ModuleCatalog, module_ids: Iterable[str]) -> ValidationResult:
    """
    Validate a selection.

    A missing baseline is reported first. Other violations are ordered
    by the catalog position of the offending module, then of the missing
    requirement. Unknown ids come last.
    """
    selected = set(module_ids)
    violations: List[Violation] = []

    if catalog.baseline_id not in selected:
        violations.append(Violation(
            module_id=catalog.baseline_id,
            missing_requirement=None,
            missing_baseline=True,
        ))

    for mod_id in sorted(selected, key=lambda m: (catalog.declaration_key(m), m)):
        module = catalog.find_module(mod_id)
        if module is None:
            violations.append(Violation(module_id=mod_id, missing_requirement=None))
            continue

        missing = sorted(module.requires - selected, key=catalog.declaration_key)
        for dep in missing:
            violations.append(Violation(module_id=mod_id, missing_requirement=dep))

    return ValidationResult(valid=not violations, violations=tuple(violations))
