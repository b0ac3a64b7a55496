"""
IRH Catalog Loader
==================

Builds the module and bundle catalogs from configuration data, once,
at startup.

A catalog that fails any consistency check raises ConfigurationError
and the engine refuses to start. Nothing is auto-repaired.

Config file format (JSON):

    {
        "modules": [{"id": ..., "name": ..., "monthly_price": 999, "requires": [...]}],
        "bundles": [{"id": ..., "name": ..., "modules": [...], "monthly_price": 2299}],
        "feature_gates": [{"feature": ..., "required_modules": [...]}]
    }
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from .bundles.manifests import Bundle, BundleCatalog
from .errors import ConfigurationError
from .gates import FeatureGate
from .modules.registry import Module, ModuleCatalog
from .pricing import savings
from .validation import validate

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "default_catalog.json"


@dataclass(frozen=True)
class Catalogs:
    """The loaded, checked catalogs. Read-only after load."""
    modules: ModuleCatalog
    bundles: BundleCatalog
    feature_gates: Mapping[str, FeatureGate] = field(
        default_factory=lambda: MappingProxyType({})
    )


def _check_bundles(modules: ModuleCatalog, bundles: BundleCatalog) -> None:
    for bundle in bundles.all_bundles():
        if modules.baseline_id not in bundle.modules:
            raise ConfigurationError(
                f"Bundle '{bundle.id}' does not include baseline module '{modules.baseline_id}'"
            )

        result = validate(modules, bundle.modules)
        if not result.valid:
            problems = ", ".join(
                f"unknown module '{v.module_id}'" if v.unknown
                else f"'{v.module_id}' needs '{v.missing_requirement}'"
                for v in result.violations
            )
            raise ConfigurationError(f"Bundle '{bundle.id}' is not a valid selection: {problems}")

        savings(modules, bundle)


def _check_gates(modules: ModuleCatalog, gates: Iterable[FeatureGate]) -> Dict[str, FeatureGate]:
    by_feature: Dict[str, FeatureGate] = {}
    for gate in gates:
        if gate.feature in by_feature:
            raise ConfigurationError(f"Duplicate feature gate: {gate.feature}")
        for mod_id in sorted(gate.required_modules):
            if mod_id not in modules:
                raise ConfigurationError(
                    f"Feature gate '{gate.feature}' requires unknown module '{mod_id}'"
                )
        by_feature[gate.feature] = gate
    return by_feature


def load_catalogs(
    module_config: Iterable[Mapping[str, Any]],
    bundle_config: Iterable[Mapping[str, Any]],
    gate_config: Optional[Iterable[Mapping[str, Any]]] = None,
) -> Catalogs:
    """
    Build and check the catalogs.

    Args:
        module_config: Module entries, in display order
        bundle_config: Bundle entries, in display order
        gate_config: Optional feature gate entries

    Raises:
        ConfigurationError: The catalog is inconsistent
    """
    modules = ModuleCatalog(Module.from_config(entry) for entry in module_config)
    bundles = BundleCatalog(Bundle.from_config(entry) for entry in bundle_config)
    _check_bundles(modules, bundles)
    gates = _check_gates(modules, (FeatureGate.from_config(g) for g in gate_config or ()))

    logger.info(
        f"Catalog loaded: {len(modules)} modules, {len(bundles)} bundles, "
        f"{len(gates)} feature gates (baseline: {modules.baseline_id})"
    )
    return Catalogs(
        modules=modules,
        bundles=bundles,
        feature_gates=MappingProxyType(gates),
    )


def load_catalog_file(path: Union[str, Path]) -> Catalogs:
    """Load catalogs from a JSON config file."""
    path = Path(path)
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Catalog file not found: {path}") from None
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Catalog file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Catalog file {path} must contain a JSON object")

    return load_catalogs(
        data.get("modules", []),
        data.get("bundles", []),
        data.get("feature_gates", []),
    )


def default_catalog() -> Catalogs:
    """Load the catalog shipped with the package."""
    return load_catalog_file(DEFAULT_CATALOG_PATH)


def list_modules(catalogs: Catalogs) -> Tuple[Module, ...]:
    return catalogs.modules.all_modules()


def list_bundles(catalogs: Catalogs) -> Tuple[Bundle, ...]:
    return catalogs.bundles.all_bundles()
