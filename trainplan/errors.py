from __future__ import annotations


class TrainPlanError(ValueError):
    pass


class UnknownMethodologyError(TrainPlanError):
    pass


class TemplateNotFoundError(TrainPlanError):
    pass


class FoundationValueError(TrainPlanError):
    """Raised when a pace foundation (VDOT, LT pace) is outside its valid range."""


class ConfigurationError(TrainPlanError):
    """Raised when a static lookup table is incomplete or inconsistent."""
