"""
IRH Dependency Resolver
=======================

Computes the dependency closure of a module selection.

The closure is the smallest superset of the selection that:
- contains the baseline module
- contains every module required by any module it contains

Resolution runs to a fixed point, so chains of any depth resolve:
selecting Pipeline pulls in CRM, and CRM pulls in Contacts.
"""

from typing import FrozenSet, Iterable

from ..modules.registry import ModuleCatalog


def closure(catalog: ModuleCatalog, module_ids: Iterable[str]) -> FrozenSet[str]:
    """
    Resolve a candidate selection to its dependency closure.

    Raises UnknownModule if a candidate id is not in the catalog.
    """
    result = set(module_ids)
    result.add(catalog.baseline_id)

    while True:
        added = set()
        for mod_id in result:
            added.update(catalog.requirements_of(mod_id) - result)
        if not added:
            return frozenset(result)
        result |= added


def toggle(
    catalog: ModuleCatalog,
    module_ids: Iterable[str],
    module_id: str,
) -> FrozenSet[str]:
    """
    Flip one module in a selection and re-resolve the closure.

    Toggling the baseline is a no-op. Toggling a module off leaves its
    own requirements in place; if another selected module still needs
    it, the closure puts it straight back.
    """
    catalog.get_module(module_id)

    current = set(module_ids)
    if module_id == catalog.baseline_id:
        return closure(catalog, current)

    if module_id in current:
        current.discard(module_id)
    else:
        current.add(module_id)

    return closure(catalog, current)
