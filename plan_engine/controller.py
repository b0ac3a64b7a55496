"""
IRH Selection Controller
========================

State machine behind the plan builder.

States:
- Custom(module_ids): built module by module
- Bundle(bundle_id): a pre-built bundle, at its flat price

Events:
- Toggle(module_id): any state -> Custom (from a bundle, starts from its modules)
- SelectBundle(bundle_id): any state -> Bundle
- Reset(): any state -> Custom({baseline})

reduce() is the pure transition function. SelectionController is a thin
holder of the current selection for one configuration session; it is not
safe to share between concurrent callers.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from .catalog import Catalogs
from .pricing import PlanQuote, quote, selection_price
from .resolvers.dependencies import toggle
from .selection import Selection
from .validation import ValidationResult, validate

logger = logging.getLogger(__name__)


# ============================================
# EVENTS
# ============================================

@dataclass(frozen=True)
class Toggle:
    module_id: str


@dataclass(frozen=True)
class SelectBundle:
    bundle_id: str


@dataclass(frozen=True)
class Reset:
    pass


Event = Union[Toggle, SelectBundle, Reset]


# ============================================
# RESULTS
# ============================================

@dataclass(frozen=True)
class SelectionResult:
    """What every transition hands back to the UI."""
    selection: Selection
    price: int
    validation: ValidationResult

    def to_dict(self, catalogs: Optional[Catalogs] = None) -> Dict[str, Any]:
        order_key = catalogs.modules.declaration_key if catalogs else None
        return {
            "selection": self.selection.to_dict(order_key),
            "price": self.price,
            "validation": self.validation.to_dict(),
        }


@dataclass(frozen=True)
class ModuleState:
    """How one catalog module should render in the plan builder."""
    module_id: str
    selected: bool
    available: bool  # every direct requirement is already selected
    locked: bool     # baseline, cannot be toggled off

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module_id": self.module_id,
            "selected": self.selected,
            "available": self.available,
            "locked": self.locked,
        }


def evaluate(catalogs: Catalogs, selection: Selection) -> SelectionResult:
    """Price and validate a selection."""
    return SelectionResult(
        selection=selection,
        price=selection_price(catalogs, selection),
        validation=validate(catalogs.modules, selection.module_ids),
    )


def initial_selection(catalogs: Catalogs) -> Selection:
    return Selection.custom({catalogs.modules.baseline_id})


def _known_modules(catalogs: Catalogs, selection: Selection, extra: Dict[str, Any]) -> List[str]:
    known = [m for m in selection.module_ids if m in catalogs.modules]
    retired = selection.module_ids - set(known)
    if retired:
        logger.warning(
            f"Dropping modules no longer in catalog: {', '.join(sorted(retired))}",
            extra=extra,
        )
    return known


def reduce(
    catalogs: Catalogs,
    selection: Selection,
    event: Event,
    extra: Optional[Dict[str, Any]] = None,
) -> SelectionResult:
    """
    Apply one event to a selection.

    Raises UnknownModule / UnknownBundle for ids not in the catalog.
    """
    extra = extra or {}

    if isinstance(event, Toggle):
        base = _known_modules(catalogs, selection, extra)
        new = Selection.custom(toggle(catalogs.modules, base, event.module_id))
        message = f"Toggled {event.module_id}"
        extra = {**extra, "module_id": event.module_id}

    elif isinstance(event, SelectBundle):
        bundle = catalogs.bundles.get_bundle(event.bundle_id)
        new = Selection.from_bundle(bundle)
        message = f"Selected bundle {bundle.id}"

    elif isinstance(event, Reset):
        new = initial_selection(catalogs)
        message = "Selection reset to baseline"

    else:
        raise TypeError(f"Unknown selection event: {event!r}")

    result = evaluate(catalogs, new)
    logger.debug(message, extra={**extra, "selection": new, "price_cents": result.price})
    return result


# ============================================
# CONTROLLER
# ============================================

class SelectionController:
    """
    Holds one session's selection and routes UI events through reduce().
    """

    def __init__(
        self,
        catalogs: Catalogs,
        initial: Optional[Selection] = None,
        session_id: str = "",
    ):
        self.catalogs = catalogs
        self.session_id = session_id

        if initial is None:
            initial = initial_selection(catalogs)
        else:
            initial = self._seed(initial)

        self._result = evaluate(catalogs, initial)

    def _seed(self, saved: Selection) -> Selection:
        """
        Accept a saved selection.

        A bundle plan keeps its flat price only while its modules are
        exactly the bundle's; otherwise it is priced as a custom plan.
        The baseline is always added.
        """
        if saved.is_bundle:
            if saved.origin_bundle not in self.catalogs.bundles:
                logger.warning(
                    f"Saved bundle {saved.origin_bundle} no longer offered; treating plan as custom",
                    extra={**self._extra, "selection": saved},
                )
                saved = Selection.custom(saved.module_ids)
            elif saved.module_ids != self.catalogs.bundles.get_bundle(saved.origin_bundle).modules:
                logger.warning(
                    f"Saved plan modules differ from bundle {saved.origin_bundle}; treating plan as custom",
                    extra={**self._extra, "selection": saved},
                )
                saved = Selection.custom(saved.module_ids)

        baseline_id = self.catalogs.modules.baseline_id
        if baseline_id not in saved.module_ids:
            logger.warning(
                f"Saved plan was missing baseline module {baseline_id}; adding it",
                extra={**self._extra, "selection": saved},
            )
            saved = Selection.custom(saved.module_ids | {baseline_id})

        return saved

    @property
    def _extra(self) -> Dict[str, Any]:
        return {"session_id": self.session_id} if self.session_id else {}

    @property
    def selection(self) -> Selection:
        return self._result.selection

    def current(self) -> SelectionResult:
        return self._result

    def dispatch(self, event: Event) -> SelectionResult:
        self._result = reduce(self.catalogs, self.selection, event, self._extra)
        return self._result

    def toggle(self, module_id: str) -> SelectionResult:
        return self.dispatch(Toggle(module_id))

    def select_bundle(self, bundle_id: str) -> SelectionResult:
        return self.dispatch(SelectBundle(bundle_id))

    def reset(self) -> SelectionResult:
        return self.dispatch(Reset())

    def quote(self) -> PlanQuote:
        return quote(self.catalogs, self.selection)

    def module_states(self) -> List[ModuleState]:
        """Per-module render state, in catalog order."""
        selected = self.selection.module_ids
        baseline_id = self.catalogs.modules.baseline_id
        return [
            ModuleState(
                module_id=module.id,
                selected=module.id in selected,
                available=module.requires <= selected,
                locked=module.id == baseline_id,
            )
            for module in self.catalogs.modules.all_modules()
        ]
