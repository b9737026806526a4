"""
Exceptions raised while loading mechanisms and solving their kinematics.

All of them inherit from MechanismError. Joint range violations are not
exceptions: they are reported in ``KinematicSolution.errors``.
"""

from typing import Any, Dict, Optional


class MechanismError(Exception):
    """Base exception for all jax_mechanisms errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(MechanismError):
    """Raised when a mechanism description or library configuration is invalid."""

    pass


class AssetNotFoundError(MechanismError):
    """Raised when the geometry store has no usable shapes for a model."""

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.model = model


class StructuralSolveError(MechanismError):
    """Raised when a solve call cannot produce a structurally valid solution."""

    pass
