"""
IRH Module Registry
===================

Catalog of the add-on modules a customer can subscribe to.

Each module is a priced feature unit of the CRM. Modules may require
other modules (the Pipeline board is useless without the CRM activity
log, for instance). Exactly one module is the baseline: it is free and
present in every plan.

The catalog checks itself on construction:
- ids are unique
- exactly one free baseline module
- no self-dependency, no unknown requirement, no dependency cycle

Prices are integer cents throughout.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from ..errors import ConfigurationError, UnknownModule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Module:
    """
    A subscribable CRM module.

    Attributes:
        id: Unique module identifier
        name: Human-readable name
        description: What this module does
        monthly_price: Price in cents per month
        features: Feature bullet points, in display order
        requires: Module IDs this module depends on (direct only)
        popular: Highlight in the store
        baseline: The always-included free module
        stripe_price_id: Price handle used by the billing service
    """
    id: str
    name: str
    description: str = ""
    monthly_price: int = 0
    features: Tuple[str, ...] = ()
    requires: FrozenSet[str] = field(default_factory=frozenset)
    popular: bool = False
    baseline: bool = False
    stripe_price_id: str = ""

    @property
    def is_free(self) -> bool:
        return self.monthly_price == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "monthly_price": self.monthly_price,
            "features": list(self.features),
            "requires": sorted(self.requires),
            "popular": self.popular,
            "baseline": self.baseline,
        }

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> "Module":
        """Build a module from one catalog config entry."""
        module_id = data.get("id")
        if not module_id or not isinstance(module_id, str):
            raise ConfigurationError(f"Module entry without a valid id: {data!r}")
        if "name" not in data:
            raise ConfigurationError(f"Module '{module_id}' has no name")

        price = data.get("monthly_price", 0)
        if not isinstance(price, int) or isinstance(price, bool) or price < 0:
            raise ConfigurationError(
                f"Module '{module_id}' price must be a non-negative integer of cents, got {price!r}"
            )

        return cls(
            id=module_id,
            name=data["name"],
            description=data.get("description", ""),
            monthly_price=price,
            features=tuple(data.get("features", ())),
            requires=frozenset(data.get("requires", ())),
            popular=bool(data.get("popular", False)),
            baseline=bool(data.get("baseline", False)),
            stripe_price_id=data.get("stripe_price_id", ""),
        )


def _install_order(
    modules: Mapping[str, Module],
    declared: List[str],
    module_ids: Iterable[str],
) -> Tuple[List[str], List[str]]:
    """
    Order module_ids so each module follows its requirements.

    Requirements outside module_ids are ignored. Ties are broken by
    declaration order. Returns (ordered, stuck) where stuck holds the
    modules that could not be placed because of a cycle.
    """
    wanted = set(module_ids)
    remaining = [m for m in declared if m in wanted]
    placed: set = set()
    ordered: List[str] = []

    while remaining:
        ready = [
            mod_id for mod_id in remaining
            if all(d in placed or d not in wanted for d in modules[mod_id].requires)
        ]
        if not ready:
            return ordered, remaining

        for mod_id in ready:
            ordered.append(mod_id)
            placed.add(mod_id)
        remaining = [m for m in remaining if m not in placed]

    return ordered, []


class ModuleCatalog:
    """
    Immutable registry of module definitions.

    Built once at startup; every lookup afterwards is read-only.
    """

    def __init__(self, modules: Iterable[Module]):
        ordered: List[Module] = []
        by_id: Dict[str, Module] = {}

        for module in modules:
            if module.id in by_id:
                raise ConfigurationError(f"Duplicate module id: {module.id}")
            by_id[module.id] = module
            ordered.append(module)

        self._modules: Tuple[Module, ...] = tuple(ordered)
        self._by_id: Mapping[str, Module] = MappingProxyType(by_id)
        self._declared: List[str] = [m.id for m in ordered]
        self._position: Mapping[str, int] = MappingProxyType(
            {mod_id: i for i, mod_id in enumerate(self._declared)}
        )
        self._baseline = self._check_baseline()
        self._check_requirements()

    # ============================================
    # LOAD-TIME CHECKS
    # ============================================

    def _check_baseline(self) -> Module:
        baselines = [m for m in self._modules if m.baseline]
        if len(baselines) != 1:
            found = ", ".join(m.id for m in baselines) or "none"
            raise ConfigurationError(
                f"Catalog must declare exactly one baseline module (found: {found})"
            )

        baseline = baselines[0]
        if not baseline.is_free:
            raise ConfigurationError(
                f"Baseline module '{baseline.id}' must be free, costs {baseline.monthly_price}"
            )
        return baseline

    def _check_requirements(self) -> None:
        for module in self._modules:
            if module.id in module.requires:
                raise ConfigurationError(f"Module '{module.id}' requires itself")
            for dep in sorted(module.requires):
                if dep not in self._by_id:
                    raise ConfigurationError(
                        f"Module '{module.id}' requires unknown module '{dep}'"
                    )

        _, stuck = _install_order(self._by_id, self._declared, self._declared)
        if stuck:
            raise ConfigurationError(
                f"Dependency cycle involving modules: {', '.join(stuck)}"
            )

    # ============================================
    # QUERIES
    # ============================================

    @property
    def baseline(self) -> Module:
        return self._baseline

    @property
    def baseline_id(self) -> str:
        return self._baseline.id

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._by_id

    def __len__(self) -> int:
        return len(self._modules)

    def get_module(self, module_id: str) -> Module:
        """Get a module by ID. Raises UnknownModule if absent."""
        try:
            return self._by_id[module_id]
        except KeyError:
            raise UnknownModule(module_id) from None

    def find_module(self, module_id: str) -> Optional[Module]:
        return self._by_id.get(module_id)

    def all_modules(self) -> Tuple[Module, ...]:
        """All modules in declaration order."""
        return self._modules

    def requirements_of(self, module_id: str) -> FrozenSet[str]:
        """Direct (non-transitive) requirements of a module."""
        return self.get_module(module_id).requires

    def declaration_key(self, module_id: str) -> int:
        """Sort key giving catalog declaration order; unknown ids sort last."""
        return self._position.get(module_id, len(self._declared))

    def dependency_order(self, module_ids: Iterable[str]) -> List[str]:
        """Get module IDs ordered so requirements come before dependents."""
        ids = list(module_ids)
        for mod_id in ids:
            self.get_module(mod_id)
        ordered, _ = _install_order(self._by_id, self._declared, ids)
        return ordered
