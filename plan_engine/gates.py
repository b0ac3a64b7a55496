"""
IRH Feature Gates
=================

Maps product features to the modules that unlock them.

The CRM screens ask "can this customer see the pipeline board?"
rather than "did they buy module X?".
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, FrozenSet, Iterable, List, Mapping

from .errors import ConfigurationError, UnknownFeature

if TYPE_CHECKING:
    from .catalog import Catalogs


@dataclass(frozen=True)
class FeatureGate:
    """A feature and the modules it needs."""
    feature: str
    required_modules: FrozenSet[str] = field(default_factory=frozenset)
    description: str = ""

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> "FeatureGate":
        feature = data.get("feature")
        if not feature or not isinstance(feature, str):
            raise ConfigurationError(f"Feature gate without a valid feature name: {data!r}")
        return cls(
            feature=feature,
            required_modules=frozenset(data.get("required_modules", ())),
            description=data.get("description", ""),
        )


def is_feature_enabled(catalogs: "Catalogs", feature: str, module_ids: Iterable[str]) -> bool:
    """Check whether a selection unlocks a feature."""
    gate = catalogs.feature_gates.get(feature)
    if gate is None:
        raise UnknownFeature(feature)
    return gate.required_modules <= set(module_ids)


def enabled_features(catalogs: "Catalogs", module_ids: Iterable[str]) -> List[str]:
    """All features a selection unlocks, in declaration order."""
    selected = set(module_ids)
    return [
        name for name, gate in catalogs.feature_gates.items()
        if gate.required_modules <= selected
    ]
