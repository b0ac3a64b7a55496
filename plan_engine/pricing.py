"""
IRH Price Calculator
====================

All amounts are integer cents. Sums of integers need no rounding step;
turning cents into "$9.99" is the display layer's job.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional, Tuple

from .bundles.manifests import Bundle
from .errors import ConfigurationError
from .modules.registry import ModuleCatalog
from .selection import Selection

if TYPE_CHECKING:
    from .catalog import Catalogs


@dataclass(frozen=True)
class PlanQuote:
    """
    What the billing service needs to subscribe a customer.

    Attributes:
        module_ids: Selected modules, requirements first
        monthly_price: Total in cents
        line_items: Billing price ids to subscribe to
        bundle_id: Set when the plan is a bundle
    """
    module_ids: Tuple[str, ...]
    monthly_price: int
    line_items: Tuple[str, ...] = ()
    bundle_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module_ids": list(self.module_ids),
            "monthly_price": self.monthly_price,
            "line_items": list(self.line_items),
            "bundle_id": self.bundle_id,
        }


def price(catalog: ModuleCatalog, module_ids: Iterable[str]) -> int:
    """Sum of module prices. Ids missing from the catalog cost nothing."""
    total = 0
    for mod_id in set(module_ids):
        module = catalog.find_module(mod_id)
        if module:
            total += module.monthly_price
    return total


def custom_equivalent_price(catalog: ModuleCatalog, bundle: Bundle) -> int:
    """What the bundle's modules would cost bought one by one."""
    return price(catalog, bundle.modules)


def savings(catalog: ModuleCatalog, bundle: Bundle) -> int:
    """
    Monthly savings of a bundle over its custom equivalent.

    A bundle priced above its modules is a catalog authoring error.
    """
    amount = custom_equivalent_price(catalog, bundle) - bundle.monthly_price
    if amount < 0:
        raise ConfigurationError(
            f"Bundle '{bundle.id}' costs {bundle.monthly_price}, "
            f"more than its modules ({bundle.monthly_price + amount})"
        )
    return amount


def selection_price(catalogs: "Catalogs", selection: Selection) -> int:
    """Price of a selection: the flat bundle rate in bundle mode."""
    if selection.is_bundle and selection.origin_bundle:
        return catalogs.bundles.get_bundle(selection.origin_bundle).monthly_price
    return price(catalogs.modules, selection.module_ids)


def quote(catalogs: "Catalogs", selection: Selection) -> PlanQuote:
    """Build the billing hand-off for a selection."""
    known = [m for m in selection.module_ids if m in catalogs.modules]
    ordered = tuple(catalogs.modules.dependency_order(known))

    if selection.is_bundle and selection.origin_bundle:
        bundle = catalogs.bundles.get_bundle(selection.origin_bundle)
        line_items = (bundle.stripe_price_id,) if bundle.stripe_price_id else ()
        return PlanQuote(
            module_ids=ordered,
            monthly_price=bundle.monthly_price,
            line_items=line_items,
            bundle_id=bundle.id,
        )

    line_items = tuple(
        catalogs.modules.get_module(m).stripe_price_id
        for m in ordered
        if catalogs.modules.get_module(m).stripe_price_id
    )
    return PlanQuote(
        module_ids=ordered,
        monthly_price=price(catalogs.modules, ordered),
        line_items=line_items,
    )
