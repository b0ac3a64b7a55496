"""
IRH Plan Selection
==================

The customer's current set of modules and how it was reached.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional


class SelectionMode(str, Enum):
    """How the selection was built."""
    BUNDLE = "bundle"    # Picked a pre-built bundle
    CUSTOM = "custom"    # Built module by module


@dataclass(frozen=True)
class Selection:
    module_ids: FrozenSet[str]
    mode: SelectionMode = SelectionMode.CUSTOM
    origin_bundle: Optional[str] = None

    @classmethod
    def custom(cls, module_ids) -> "Selection":
        return cls(module_ids=frozenset(module_ids), mode=SelectionMode.CUSTOM)

    @classmethod
    def from_bundle(cls, bundle) -> "Selection":
        return cls(
            module_ids=bundle.modules,
            mode=SelectionMode.BUNDLE,
            origin_bundle=bundle.id,
        )

    @property
    def is_bundle(self) -> bool:
        return self.mode == SelectionMode.BUNDLE

    def to_dict(self, order_key=None) -> Dict[str, Any]:
        return {
            "module_ids": sorted(self.module_ids, key=order_key),
            "mode": self.mode.value,
            "origin_bundle": self.origin_bundle,
        }
