"""
IRH Bundle Manifests

Named presets of modules sold at a flat monthly price.

A bundle's price is negotiated, not derived: the gap between the sum of
its modules' prices and the bundle price is the advertised savings.
Cross-checks against the module catalog (known modules, closure,
non-negative savings) run in catalog.load_catalogs.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Tuple

from ..errors import ConfigurationError, UnknownBundle


@dataclass(frozen=True)
class Bundle:
    """A pre-built module selection with a flat price (cents)."""
    id: str
    name: str
    modules: FrozenSet[str] = field(default_factory=frozenset)
    monthly_price: int = 0
    description: str = ""
    popular: bool = False
    stripe_price_id: str = ""

    def includes(self, module_id: str) -> bool:
        return module_id in self.modules

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> "Bundle":
        """Build a bundle from one catalog config entry."""
        bundle_id = data.get("id")
        if not bundle_id or not isinstance(bundle_id, str):
            raise ConfigurationError(f"Bundle entry without a valid id: {data!r}")
        if "name" not in data:
            raise ConfigurationError(f"Bundle '{bundle_id}' has no name")
        if not data.get("modules"):
            raise ConfigurationError(f"Bundle '{bundle_id}' lists no modules")

        price = data.get("monthly_price")
        if not isinstance(price, int) or isinstance(price, bool) or price < 0:
            raise ConfigurationError(
                f"Bundle '{bundle_id}' price must be a non-negative integer of cents, got {price!r}"
            )

        return cls(
            id=bundle_id,
            name=data["name"],
            modules=frozenset(data["modules"]),
            monthly_price=price,
            description=data.get("description", ""),
            popular=bool(data.get("popular", False)),
            stripe_price_id=data.get("stripe_price_id", ""),
        )


class BundleCatalog:
    """Immutable registry of bundles, in declaration order."""

    def __init__(self, bundles: Iterable[Bundle]):
        ordered: List[Bundle] = []
        by_id: Dict[str, Bundle] = {}

        for bundle in bundles:
            if bundle.id in by_id:
                raise ConfigurationError(f"Duplicate bundle id: {bundle.id}")
            by_id[bundle.id] = bundle
            ordered.append(bundle)

        self._bundles: Tuple[Bundle, ...] = tuple(ordered)
        self._by_id: Mapping[str, Bundle] = MappingProxyType(by_id)

    def __contains__(self, bundle_id: object) -> bool:
        return bundle_id in self._by_id

    def __len__(self) -> int:
        return len(self._bundles)

    def get_bundle(self, bundle_id: str) -> Bundle:
        """Get bundle definition. Raises UnknownBundle if absent."""
        try:
            return self._by_id[bundle_id]
        except KeyError:
            raise UnknownBundle(bundle_id) from None

    def all_bundles(self) -> Tuple[Bundle, ...]:
        return self._bundles
