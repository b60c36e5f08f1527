"""
Unit tests for SE(3) maps on homogeneous matrices.
"""

import math

import numpy as np
import pytest

from gicp_reg.common.se3 import (
    as_pose,
    make_pose,
    se3_exp,
    se3_inverse,
    skew,
    so3_exp,
    so3_log,
)


class TestSkew:
    def test_cross_product(self):
        """skew(a) @ b == a x b."""
        a = np.array([0.3, -1.2, 2.0])
        b = np.array([1.0, 0.5, -0.7])
        assert np.allclose(skew(a) @ b, np.cross(a, b))

    def test_antisymmetric(self):
        S = skew([1.0, 2.0, 3.0])
        assert np.allclose(S, -S.T)


class TestSO3:
    def test_exp_identity(self):
        assert np.allclose(so3_exp(np.zeros(3)), np.eye(3))

    def test_exp_quarter_turn_z(self):
        """90 deg about z maps x onto y."""
        R = so3_exp([0.0, 0.0, math.pi / 2])
        assert np.allclose(R @ [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], atol=1e-12)

    def test_exp_is_rotation(self):
        R = so3_exp([0.4, -0.2, 1.1])
        assert np.allclose(R @ R.T, np.eye(3), atol=1e-12)
        assert abs(np.linalg.det(R) - 1.0) < 1e-12

    def test_log_inverts_exp(self):
        for w in ([0.01, 0.02, 0.03], [0.4, -0.2, 1.1], [1e-12, 0.0, 0.0]):
            w = np.asarray(w)
            assert np.allclose(so3_log(so3_exp(w)), w, atol=1e-9)

    def test_log_near_pi(self):
        """Angle is preserved near the pi singularity."""
        w = np.array([math.pi - 1e-7, 0.0, 0.0])
        R = so3_exp(w)
        w_rec = so3_log(R)
        assert abs(np.linalg.norm(w_rec) - np.linalg.norm(w)) < 1e-6
        assert np.allclose(so3_exp(w_rec), R, atol=1e-6)


class TestSE3:
    def test_exp_zero_is_identity(self):
        assert np.allclose(se3_exp(np.zeros(6)), np.eye(4))

    def test_exp_pure_translation(self):
        """No rotation: translation part equals v."""
        T = se3_exp([0.0, 0.0, 0.0, 1.0, -2.0, 0.5])
        assert np.allclose(T[:3, :3], np.eye(3))
        assert np.allclose(T[:3, 3], [1.0, -2.0, 0.5])

    def test_exp_rotation_block_matches_so3(self):
        xi = np.array([0.2, -0.1, 0.3, 0.5, 0.0, -0.4])
        T = se3_exp(xi)
        assert np.allclose(T[:3, :3], so3_exp(xi[:3]))
        assert np.allclose(T[3], [0.0, 0.0, 0.0, 1.0])

    def test_exp_screw_motion(self):
        """Half turn about z with unit z velocity advances exactly v along the axis."""
        T = se3_exp([0.0, 0.0, math.pi, 0.0, 0.0, 1.0])
        assert np.allclose(T[:3, 3], [0.0, 0.0, 1.0], atol=1e-12)

    def test_exp_small_angle_continuity(self):
        """Small-angle branch agrees with the general formula."""
        v = np.array([0.3, 0.2, -0.1])
        T_small = se3_exp(np.concatenate([[1e-11, 0.0, 0.0], v]))
        T_general = se3_exp(np.concatenate([[1e-6, 0.0, 0.0], v]))
        assert np.allclose(T_small, T_general, atol=1e-5)

    def test_inverse(self):
        T = make_pose(rotvec=[0.1, 0.2, -0.3], translation=[1.0, 2.0, 3.0])
        assert np.allclose(T @ se3_inverse(T), np.eye(4), atol=1e-12)

    def test_as_pose_none_is_identity(self):
        assert np.allclose(as_pose(None), np.eye(4))

    def test_as_pose_copies(self):
        T = np.eye(4)
        out = as_pose(T)
        out[0, 3] = 5.0
        assert T[0, 3] == 0.0

    def test_as_pose_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            as_pose(np.eye(3))
