"""
Tests for the Dependency Resolver
=================================

Tests closure properties and toggle policy.
"""

from itertools import combinations

import pytest

from plan_engine.errors import UnknownModule
from plan_engine.resolvers import closure, toggle


def all_subsets(ids):
    for size in range(len(ids) + 1):
        for combo in combinations(ids, size):
            yield frozenset(combo)


class TestClosure:
    """Test fixed-point dependency closure."""

    def test_empty_selection_gets_baseline(self, catalogs):
        assert closure(catalogs.modules, []) == frozenset({"baseline"})

    def test_transitive_chain(self, catalogs):
        """Selecting reports alone pulls in pipeline, leads and baseline."""
        assert closure(catalogs.modules, ["reports"]) == frozenset(
            {"baseline", "leads", "pipeline", "reports"}
        )

    def test_independent_module(self, catalogs):
        assert closure(catalogs.modules, ["qr"]) == frozenset({"baseline", "qr"})

    def test_unknown_module(self, catalogs):
        with pytest.raises(UnknownModule):
            closure(catalogs.modules, ["ghost"])

    def test_properties_hold_for_every_subset(self, catalogs):
        """Idempotence, baseline inclusion and dependency satisfaction."""
        ids = [m.id for m in catalogs.modules.all_modules()]
        for subset in all_subsets(ids):
            closed = closure(catalogs.modules, subset)
            assert closure(catalogs.modules, closed) == closed
            assert "baseline" in closed
            assert subset <= closed
            for mod_id in closed:
                assert catalogs.modules.requirements_of(mod_id) <= closed

    def test_shipped_catalog_pipeline(self, shipped_catalogs):
        assert closure(shipped_catalogs.modules, ["pipeline"]) == frozenset(
            {"contacts", "crm", "pipeline"}
        )


class TestToggle:
    """Test toggle policy."""

    def test_toggle_on(self, catalogs):
        result = toggle(catalogs.modules, {"baseline"}, "pipeline")
        assert result == frozenset({"baseline", "leads", "pipeline"})

    def test_toggle_off_keeps_orphans(self, catalogs):
        """Removing pipeline leaves leads in place."""
        result = toggle(catalogs.modules, {"baseline", "leads", "pipeline"}, "pipeline")
        assert result == frozenset({"baseline", "leads"})

    def test_toggle_baseline_is_noop(self, catalogs):
        result = toggle(catalogs.modules, {"baseline", "qr"}, "baseline")
        assert result == frozenset({"baseline", "qr"})

    def test_toggle_off_required_module_is_restored(self, catalogs):
        """Leads is still needed by pipeline, so the closure puts it back."""
        current = {"baseline", "leads", "pipeline"}
        assert toggle(catalogs.modules, current, "leads") == frozenset(current)

    def test_toggle_unknown(self, catalogs):
        with pytest.raises(UnknownModule):
            toggle(catalogs.modules, {"baseline"}, "ghost")
