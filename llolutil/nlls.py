"""A small dense Levenberg-Marquardt least squares solver."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import numpy as np


class CostBase(ABC):
    """A residual function with an optional Jacobian.

    ``compute`` returns ``(residuals, jacobian)`` where ``jacobian`` has shape
    ``(num_residuals, num_parameters)`` and is ``None`` when not requested.
    It returns ``None`` if the evaluation failed.
    """

    def __call__(self, x, with_jacobian: bool = True):
        return self.compute(x, with_jacobian)

    @abstractmethod
    def compute(self, x, with_jacobian: bool = True):
        """Evaluate residuals, and the Jacobian if ``with_jacobian``."""

    @abstractmethod
    def num_residuals(self) -> int:
        """Number of residuals."""

    @abstractmethod
    def num_parameters(self) -> int:
        """Number of parameters."""


class NllsStatus(Enum):
    GRADIENT_TOO_SMALL = 0  # eps > max(J'*f(x))
    RELATIVE_STEP_SIZE_TOO_SMALL = 1  # eps > ||dx|| / (||x|| + eps)
    COST_TOO_SMALL = 2  # eps > ||f(x)||^2 / 2
    HIT_MAX_ITERATIONS = 3


_STATUS_NAMES = {
    NllsStatus.COST_TOO_SMALL: "COST_TOO_SMALL",
    NllsStatus.GRADIENT_TOO_SMALL: "GRAD_TOO_SMALL",
    NllsStatus.RELATIVE_STEP_SIZE_TOO_SMALL: "REL_STEP_SIZE_TOO_SMALL",
    NllsStatus.HIT_MAX_ITERATIONS: "HIT_MAX_ITERS",
}


def status_repr(status: NllsStatus) -> str:
    """Short text form of a solver status."""
    return _STATUS_NAMES.get(status, "UNKNOWN")


@dataclass
class NllsOptions:
    gradient_tolerance: float = 1e-10
    parameter_tolerance: float = 1e-8
    cost_threshold: float = sys.float_info.epsilon
    initial_trust_region_radius: float = 1e4
    max_num_iterations: int = 50
    min_eigenvalue: float = 0.0


@dataclass
class NllsSummary:
    initial_cost: float = -1.0
    final_cost: float = -1.0
    gradient_max_norm: float = -1.0
    iterations: int = -1
    degenerate_directions: int = 0
    status: NllsStatus = NllsStatus.HIT_MAX_ITERATIONS

    def report(self) -> str:
        return (
            f"init_cost={self.initial_cost:.6e}, final_cost={self.final_cost:.6e}, "
            f"grad_max_norm={self.gradient_max_norm:.6e}, iters={self.iterations}, "
            f"status={status_repr(self.status)}"
        )

    def is_converged(self) -> bool:
        return self.status in (
            NllsStatus.GRADIENT_TOO_SMALL,
            NllsStatus.RELATIVE_STEP_SIZE_TOO_SMALL,
            NllsStatus.COST_TOO_SMALL,
        )


def _solve_linear(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    try:
        return np.linalg.solve(a, b)
    except np.linalg.LinAlgError:
        return np.linalg.lstsq(a, b, rcond=None)[0]


class NllsSolver:
    """Levenberg-Marquardt with Jacobi scaling and optional solution remapping."""

    def __init__(self, options: NllsOptions | None = None) -> None:
        self.options = NllsOptions() if options is None else options
        self.summary = NllsSummary()
        self._cost = 0.0
        self._error = np.zeros(0)
        self._jacobian = np.zeros((0, 0))
        self._jacobi_scaling = np.zeros(0)
        self._jtj = np.zeros((0, 0))
        self._g = np.zeros(0)

    def update(self, function: CostBase, x) -> bool:
        """Evaluate at ``x`` and refresh the normal equations.

        Returns False if the cost function failed to evaluate.
        """
        result = function(np.asarray(x, dtype=float), True)
        if result is None:
            return False
        residuals, jacobian = result
        self._error = -np.asarray(residuals, dtype=float).reshape(-1)
        jac = np.asarray(jacobian, dtype=float).reshape(
            self._error.size, -1
        )

        if self.summary.iterations == 0:
            # 1 is added to regularize small column norms.
            self._jacobi_scaling = 1.0 / (1.0 + np.linalg.norm(jac, axis=0))

        self._jacobian = jac * self._jacobi_scaling
        self._jtj = self._jacobian.T @ self._jacobian
        self._g = self._jacobian.T @ self._error
        self.summary.gradient_max_norm = (
            float(np.max(np.abs(self._g))) if self._g.size else 0.0
        )
        self._cost = float(self._error @ self._error) / 2.0
        return True

    def solve(self, function: CostBase, x: np.ndarray) -> NllsSummary:
        """Minimise starting from ``x``, which is overwritten with the result."""
        if not isinstance(x, np.ndarray) or x.dtype != np.float64:
            raise TypeError("x must be a float64 numpy array")
        if x.size != function.num_parameters():
            raise ValueError(
                f"expected {function.num_parameters()} parameters, got {x.size}"
            )
        opts = self.options
        self.summary = summary = NllsSummary()
        summary.iterations = 0

        self.update(function, x)
        summary.initial_cost = self._cost
        summary.final_cost = self._cost

        if summary.gradient_max_norm < opts.gradient_tolerance:
            summary.status = NllsStatus.GRADIENT_TOO_SMALL
            return summary

        if self._cost < opts.cost_threshold:
            summary.status = NllsStatus.COST_TOO_SMALL
            return summary

        remap = None
        if opts.min_eigenvalue > 0:
            eigvals, eigvecs = np.linalg.eigh(self._jtj)
            n = eigvals.size
            m = next(
                (i for i, ev in enumerate(eigvals) if ev >= opts.min_eigenvalue), n
            )
            summary.degenerate_directions = m
            if m > 0:
                vu = np.zeros_like(eigvecs)
                vu[:, m:] = eigvecs[:, m:]
                remap = np.linalg.inv(eigvecs) @ vu

        u = 1.0 / opts.initial_trust_region_radius
        v = 2.0

        summary.iterations = 1
        while summary.iterations < opts.max_num_iterations:
            diag = np.clip(np.diag(self._jtj), 1e-6, 1e32)
            lm_diag = np.sqrt(u * diag)
            jtj_reg = self._jtj + np.diag(lm_diag * lm_diag)

            lm_step = _solve_linear(jtj_reg, self._g)
            dx = self._jacobi_scaling * lm_step

            # Adding the tolerance to ||x|| keeps this working near zero.
            tol = opts.parameter_tolerance * (
                float(np.linalg.norm(x)) + opts.parameter_tolerance
            )
            if float(np.linalg.norm(dx)) < tol:
                summary.status = NllsStatus.RELATIVE_STEP_SIZE_TOO_SMALL
                break

            if remap is not None:
                dx = remap @ dx
            x_new = x + dx

            f_x_new = np.asarray(function(x_new, False)[0], dtype=float)
            cost_change = np.float64(2 * self._cost - float(f_x_new @ f_x_new))
            model_cost_change = np.float64(
                lm_step @ (2 * self._g - self._jtj @ lm_step)
            )
            with np.errstate(divide="ignore", invalid="ignore"):
                rho = float(cost_change / model_cost_change)

            if rho > 0:
                x[...] = x_new
                self.update(function, x)
                if summary.gradient_max_norm < opts.gradient_tolerance:
                    summary.status = NllsStatus.GRADIENT_TOO_SMALL
                    break
                if self._cost < opts.cost_threshold:
                    summary.status = NllsStatus.COST_TOO_SMALL
                    break
                tmp = 2 * rho - 1
                u *= max(1 / 3.0, 1 - tmp * tmp * tmp)
                v = 2.0
            else:
                # Poor model fit: move closer to gradient descent.
                u *= v
                v *= 2
            summary.iterations += 1

        summary.final_cost = self._cost
        return summary

    def get_jtj(self) -> np.ndarray:
        """A copy of the scaled normal matrix J'J from the last evaluation."""
        return self._jtj.copy()