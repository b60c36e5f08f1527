"""Pydantic parameter models for GICP registration."""

from __future__ import annotations

import os
from typing import Any, Dict, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field

from gicp_reg.common import constants


class RegistrationParams(BaseModel):
    """Every tunable of a single registration call."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    optimizer: Literal["gauss_newton", "levenberg_marquardt"] = "levenberg_marquardt"
    rejector: Literal["distance", "none"] = "distance"
    max_correspondence_distance: float = Field(constants.MAX_CORRESPONDENCE_DISTANCE_DEFAULT, gt=0.0)

    num_neighbors: int = Field(constants.COVARIANCE_NUM_NEIGHBORS_DEFAULT, ge=constants.COVARIANCE_MIN_NEIGHBORS)

    max_iterations: int = Field(constants.MAX_ITERATIONS_DEFAULT, ge=1)
    max_inner_iterations: int = Field(constants.LM_MAX_INNER_ITERATIONS_DEFAULT, ge=1)
    gn_damping: float = Field(constants.GN_DAMPING_DEFAULT, ge=0.0)
    lm_init_damping: float = Field(constants.LM_INIT_DAMPING_DEFAULT, gt=0.0)
    lm_damping_factor: float = Field(constants.LM_DAMPING_FACTOR_DEFAULT, gt=1.0)

    translation_eps: float = Field(constants.TRANSLATION_EPS_DEFAULT, gt=0.0)
    rotation_eps: float = Field(constants.ROTATION_EPS_DEFAULT, gt=0.0)

    num_threads: int = Field(constants.NUM_THREADS_DEFAULT, ge=1)
    verbose: bool = False


def _load_yaml_file(path: Union[str, os.PathLike]) -> Dict[str, Any]:
    """Load a YAML mapping, unwrapping an optional top-level 'registration' key."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a YAML mapping, got {type(data).__name__}")
    if "registration" in data and isinstance(data["registration"], dict):
        return data["registration"]
    return data


def load_registration_params(path: Union[str, os.PathLike]) -> RegistrationParams:
    """
    Load RegistrationParams from a YAML file.

    Both of these layouts are accepted:

        registration:
          optimizer: gauss_newton

        optimizer: gauss_newton
    """
    return RegistrationParams(**_load_yaml_file(path))
