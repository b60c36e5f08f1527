"""
gicp_reg: Generalized-ICP point cloud registration.

Subpackages:
- common/: SE(3) geometry, numerics, parameters
- points/: point clouds, covariances, KD-tree
- registration/: factors, reductions, optimizers
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "align",
    "RegistrationParams",
    "RegistrationResult",
]

_LAZY_ATTRS: dict[str, tuple[str, str]] = {
    "align": ("gicp_reg.registration.registration", "align"),
    "RegistrationParams": ("gicp_reg.common.param_models", "RegistrationParams"),
    "RegistrationResult": ("gicp_reg.registration.result", "RegistrationResult"),
}


def __getattr__(name: str) -> Any:
    target = _LAZY_ATTRS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    return getattr(import_module(module_name), attr_name)


def __dir__() -> list[str]:
    return sorted(set(globals().keys()) | set(_LAZY_ATTRS.keys()))
