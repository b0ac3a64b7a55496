"""
IRH Plan Builder API
====================

FastAPI routes the CRM store and billing pages call.

Endpoints:
- GET /api/v1/modules - Module catalog
- GET /api/v1/bundles - Bundles with custom price and savings
- POST /api/v1/plans - Start a configuration session
- GET /api/v1/plans/{session_id} - Current selection, price, validation
- DELETE /api/v1/plans/{session_id} - Drop a session
- POST /api/v1/plans/{session_id}/toggle/{module_id} - Toggle a module
- POST /api/v1/plans/{session_id}/bundle/{bundle_id} - Pick a bundle
- POST /api/v1/plans/{session_id}/reset - Back to the baseline plan
- GET /api/v1/plans/{session_id}/modules - Per-module render state
- GET /api/v1/plans/{session_id}/quote - Billing hand-off
- POST /api/v1/plans/validate - Validate a saved selection
- GET /api/v1/features/{feature} - Feature gate check

Amounts are cents; "display_price" strings are for rendering only.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, field_validator

from .catalog import Catalogs, list_bundles, list_modules
from .controller import SelectionController, evaluate
from .errors import UnknownBundle, UnknownFeature, UnknownModule
from .gates import enabled_features, is_feature_enabled
from .pricing import custom_equivalent_price, savings
from .selection import Selection
from .sessions import PlanSessionStore, SessionNotFound

logger = logging.getLogger(__name__)


# ============================================
# PYDANTIC MODELS
# ============================================

class CreatePlanRequest(BaseModel):
    """Start a session, optionally from a saved plan."""
    module_ids: Optional[List[str]] = None
    bundle_id: Optional[str] = None

    @field_validator("module_ids")
    @classmethod
    def strip_ids(cls, v):
        if v is None:
            return v
        return [m.strip() for m in v if m and m.strip()]


class ValidateSelectionRequest(BaseModel):
    module_ids: List[str]


# ============================================
# HELPERS
# ============================================

def format_price(cents: int) -> str:
    """Render cents for display: 999 -> "$9.99"."""
    if cents == 0:
        return "Free"
    return f"${cents // 100}.{cents % 100:02d}"


def _result_payload(controller: SelectionController) -> Dict[str, Any]:
    result = controller.current()
    payload = result.to_dict(controller.catalogs)
    payload["session_id"] = controller.session_id
    payload["display_price"] = format_price(result.price)
    payload["features"] = enabled_features(controller.catalogs, result.selection.module_ids)
    return payload


def create_plan_api(
    catalogs: Catalogs,
    store: PlanSessionStore,
    limiter=None,
    session_rate_limit: str = "30/minute",
) -> APIRouter:
    """
    Create FastAPI routes for the plan builder.

    Args:
        catalogs: Loaded catalogs
        store: Session store holding one controller per session
        limiter: Optional slowapi Limiter for session creation
        session_rate_limit: Limit string applied to session creation
    """
    router = APIRouter(tags=["plans"])

    def get_controller(session_id: str) -> SelectionController:
        try:
            return store.get(session_id)
        except SessionNotFound:
            raise HTTPException(status_code=404, detail=f"Unknown plan session: {session_id}")

    # ============================================
    # CATALOG
    # ============================================

    @router.get("/api/v1/modules")
    async def get_modules():
        """List modules in catalog order."""
        return {
            "baseline": catalogs.modules.baseline_id,
            "modules": [
                {**module.to_dict(), "display_price": format_price(module.monthly_price)}
                for module in list_modules(catalogs)
            ],
        }

    @router.get("/api/v1/bundles")
    async def get_bundles():
        """List bundles with what they save over buying modules singly."""
        bundles = []
        for bundle in list_bundles(catalogs):
            saved = savings(catalogs.modules, bundle)
            bundles.append({
                "id": bundle.id,
                "name": bundle.name,
                "description": bundle.description,
                "modules": catalogs.modules.dependency_order(bundle.modules),
                "monthly_price": bundle.monthly_price,
                "display_price": format_price(bundle.monthly_price),
                "custom_price": custom_equivalent_price(catalogs.modules, bundle),
                "savings": saved,
                "display_savings": format_price(saved) if saved else None,
                "popular": bundle.popular,
            })
        return {"bundles": bundles}

    # ============================================
    # SESSIONS
    # ============================================

    async def create_plan(request: Request, body: Optional[CreatePlanRequest] = None):
        """Start a configuration session."""
        initial = None
        if body and body.bundle_id:
            try:
                bundle = catalogs.bundles.get_bundle(body.bundle_id)
            except UnknownBundle as e:
                raise HTTPException(status_code=404, detail=str(e))
            if body.module_ids and frozenset(body.module_ids) != bundle.modules:
                raise HTTPException(
                    status_code=422,
                    detail=f"module_ids do not match bundle {bundle.id}",
                )
            initial = Selection.from_bundle(bundle)
        elif body and body.module_ids:
            initial = Selection.custom(body.module_ids)

        controller = store.create(initial)
        logger.info("Plan session started", extra={"session_id": controller.session_id})
        return _result_payload(controller)

    if limiter is not None:
        create_plan = limiter.limit(session_rate_limit)(create_plan)
    router.post("/api/v1/plans")(create_plan)

    @router.post("/api/v1/plans/validate")
    async def validate_selection(body: ValidateSelectionRequest):
        """Validate a selection from outside the builder, e.g. a saved plan."""
        result = evaluate(catalogs, Selection.custom(body.module_ids))
        return result.to_dict(catalogs)

    @router.get("/api/v1/plans/{session_id}")
    async def get_plan(session_id: str):
        return _result_payload(get_controller(session_id))

    @router.delete("/api/v1/plans/{session_id}")
    async def delete_plan(session_id: str):
        if not store.discard(session_id):
            raise HTTPException(status_code=404, detail=f"Unknown plan session: {session_id}")
        return {"deleted": True}

    @router.post("/api/v1/plans/{session_id}/toggle/{module_id}")
    async def toggle_module(session_id: str, module_id: str):
        controller = get_controller(session_id)
        try:
            controller.toggle(module_id)
        except UnknownModule as e:
            raise HTTPException(status_code=404, detail=str(e))
        return _result_payload(controller)

    @router.post("/api/v1/plans/{session_id}/bundle/{bundle_id}")
    async def select_bundle(session_id: str, bundle_id: str):
        controller = get_controller(session_id)
        try:
            controller.select_bundle(bundle_id)
        except UnknownBundle as e:
            raise HTTPException(status_code=404, detail=str(e))
        return _result_payload(controller)

    @router.post("/api/v1/plans/{session_id}/reset")
    async def reset_plan(session_id: str):
        controller = get_controller(session_id)
        controller.reset()
        return _result_payload(controller)

    @router.get("/api/v1/plans/{session_id}/modules")
    async def get_module_states(session_id: str):
        controller = get_controller(session_id)
        return {"modules": [state.to_dict() for state in controller.module_states()]}

    @router.get("/api/v1/plans/{session_id}/quote")
    async def get_quote(session_id: str):
        """The {module_ids, price} pair the billing service subscribes."""
        controller = get_controller(session_id)
        plan_quote = controller.quote()
        return {
            **plan_quote.to_dict(),
            "display_price": format_price(plan_quote.monthly_price),
            "valid": controller.current().validation.valid,
        }

    # ============================================
    # FEATURE GATES
    # ============================================

    @router.get("/api/v1/features/{feature}")
    async def check_feature(feature: str, modules: str = ""):
        """Check a feature gate against ?modules=crm,pipeline"""
        module_ids = [m.strip() for m in modules.split(",") if m.strip()]
        try:
            enabled = is_feature_enabled(catalogs, feature, module_ids)
        except UnknownFeature as e:
            raise HTTPException(status_code=404, detail=str(e))

        gate = catalogs.feature_gates[feature]
        return {
            "feature": feature,
            "enabled": enabled,
            "required_modules": catalogs.modules.dependency_order(gate.required_modules),
            "description": gate.description,
        }

    return router
