"""
Common package for GICP registration.

Shared geometry, numerics and configuration used by points/ and registration/.

Modules:
- constants: defaults and numerical epsilons
- se3: SE(3) geometry on homogeneous matrices
- primitives: damped symmetric solves and small linear-algebra helpers
- param_models: pydantic parameter models
"""

from gicp_reg.common import constants
from gicp_reg.common.param_models import RegistrationParams, load_registration_params

__all__ = [
    "RegistrationParams",
    "constants",
    "load_registration_params",
]
