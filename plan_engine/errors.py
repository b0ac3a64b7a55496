"""
Plan Engine Errors
==================

ConfigurationError is fatal at catalog load time.
Unknown* errors mean a caller asked for an id the catalog does not have.

Selection problems are never raised - see validation.py.
"""


class PlanEngineError(Exception):
    """Base class for plan engine errors."""


class ConfigurationError(PlanEngineError):
    """The module/bundle catalog is internally inconsistent."""


class UnknownModule(PlanEngineError, KeyError):
    """Module id is not in the catalog."""

    def __init__(self, module_id: str):
        self.module_id = module_id
        super().__init__(f"Unknown module: {module_id}")

    def __str__(self) -> str:
        return self.args[0]


class UnknownBundle(PlanEngineError, KeyError):
    """Bundle id is not in the catalog."""

    def __init__(self, bundle_id: str):
        self.bundle_id = bundle_id
        super().__init__(f"Unknown bundle: {bundle_id}")

    def __str__(self) -> str:
        return self.args[0]


class UnknownFeature(PlanEngineError, KeyError):
    """Feature has no gate defined."""

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f"Unknown feature: {feature}")

    def __str__(self) -> str:
        return self.args[0]
