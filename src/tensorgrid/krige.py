"""One-dimensional Kriging (Gaussian-process) interpolation.

:class:`KrigeInterpolator` interpolates ``(x, y)`` data with a
user-supplied covariance function ``covar(x1, x2)``. The prediction at
``x0`` is

    f(x0) = sum_i covar(x0, x_i) * (K^-1 y)_i,   K_ij = covar(x_i, x_j)

with an optional noise variance added to the diagonal of ``K``.
:class:`KrigeOptimInterpolator` chooses the amplitude and length scale
of a squared-exponential covariance by leave-one-out cross-validation.

References
----------
- Rasmussen & Williams (2006), "Gaussian Processes for Machine
  Learning", MIT Press, Chapter 2 and Section 5.4.2.
"""

from __future__ import annotations

import warnings
from typing import Callable, Optional, Tuple

import numpy as np
from scipy.integrate import quad
from scipy.linalg import LinAlgWarning, lu_factor, lu_solve

CovarFunc = Callable[[float, float], float]


def _check_data(x, y, where: str, min_points: int = 2) -> Tuple[np.ndarray, np.ndarray]:
    x = np.asarray(x, dtype=float).ravel()
    y = np.asarray(y, dtype=float).ravel()
    if len(x) != len(y):
        raise ValueError(
            f"x has length {len(x)} but y has length {len(y)} in {where}."
        )
    if len(x) < min_points:
        raise ValueError(
            f"At least {min_points} points are required, got {len(x)} in {where}."
        )
    return x, y


def _factor(K: np.ndarray, where: str):
    """LU-factor the covariance matrix *K*, raising on a zero pivot."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", LinAlgWarning)
        lu, piv = lu_factor(K)
    if np.any(np.diag(lu) == 0.0):
        raise np.linalg.LinAlgError(f"Singular covariance matrix in {where}.")
    return lu, piv


class KrigeInterpolator:
    """Kriging interpolation with a user-specified covariance function.

    Examples
    --------
    >>> import numpy as np
    >>> k = KrigeInterpolator()
    >>> x = np.linspace(0.0, 3.0, 7)
    >>> k.set_covar(x, np.sin(x), lambda a, b: np.exp(-(a - b) ** 2))
    >>> abs(k.eval(x[2]) - np.sin(x[2])) < 1e-8
    True
    """

    def __init__(self):
        self.x: Optional[np.ndarray] = None
        self.y: Optional[np.ndarray] = None
        self.covar: Optional[CovarFunc] = None
        self.noise_var: float = 0.0
        self.Kinvf: Optional[np.ndarray] = None
        self._lu = None

    def set_covar(self, x, y, covar: CovarFunc) -> None:
        """Fit the data ``(x, y)`` exactly using covariance *covar*."""
        self.set_covar_noise(x, y, covar, 0.0)

    def set_covar_noise(self, x, y, covar: CovarFunc, noise_var: float) -> None:
        """Fit ``(x, y)`` with *noise_var* added to the covariance diagonal.

        Raises
        ------
        ValueError
            If fewer than two points are given or the lengths differ.
        numpy.linalg.LinAlgError
            If the covariance matrix is singular.
        """
        x, y = _check_data(x, y, "KrigeInterpolator.set_covar_noise()")
        n = len(x)
        K = np.empty((n, n))
        for i in range(n):
            for j in range(n):
                K[i, j] = covar(x[i], x[j])
        K[np.diag_indices(n)] += noise_var
        lu = _factor(K, "KrigeInterpolator.set_covar_noise()")

        self.x, self.y = x, y
        self.covar = covar
        self.noise_var = float(noise_var)
        self._lu = lu
        self.Kinvf = lu_solve(lu, y)

    def _check_set(self, where: str) -> None:
        if self.Kinvf is None:
            raise RuntimeError(
                f"No data in KrigeInterpolator.{where}(). Call set_covar() first."
            )

    def _k0(self, x0: float) -> np.ndarray:
        return np.array([self.covar(x0, xi) for xi in self.x])

    def _eval_scalar(self, x0: float) -> float:
        return float(np.dot(self._k0(x0), self.Kinvf))

    def eval(self, x0):
        """Kriging mean at *x0* (scalar or array)."""
        self._check_set("eval")
        if np.ndim(x0) == 0:
            return self._eval_scalar(float(x0))
        x0 = np.asarray(x0, dtype=float)
        return np.array([self._eval_scalar(v) for v in x0.ravel()]).reshape(x0.shape)

    def __call__(self, x0):
        return self.eval(x0)

    def sigma(self, x0: float) -> float:
        """Predictive standard deviation at *x0*."""
        self._check_set("sigma")
        k0 = self._k0(float(x0))
        var = self.covar(float(x0), float(x0)) - float(np.dot(k0, lu_solve(self._lu, k0)))
        return float(np.sqrt(max(var, 0.0)))

    def _step(self) -> float:
        return 1.0e-4 * max(float(np.ptp(self.x)), 1.0e-300)

    def deriv(self, x0: float, h: Optional[float] = None) -> float:
        """First derivative of the Kriging mean by central differences."""
        self._check_set("deriv")
        h = self._step() if h is None else h
        return (self._eval_scalar(x0 + h) - self._eval_scalar(x0 - h)) / (2.0 * h)

    def deriv2(self, x0: float, h: Optional[float] = None) -> float:
        """Second derivative of the Kriging mean by central differences."""
        self._check_set("deriv2")
        h = 10.0 * self._step() if h is None else h
        return (self._eval_scalar(x0 + h) - 2.0 * self._eval_scalar(x0)
                + self._eval_scalar(x0 - h)) / (h * h)

    def integ(self, a: float, b: float) -> float:
        """Integral of the Kriging mean from *a* to *b*."""
        self._check_set("integ")
        val, _ = quad(self._eval_scalar, a, b, limit=200)
        return float(val)

    def __repr__(self) -> str:
        n = 0 if self.x is None else len(self.x)
        return f"{type(self).__name__}(n_points={n}, noise_var={self.noise_var})"


class KrigeOptimInterpolator(KrigeInterpolator):
    """Kriging with a squared-exponential covariance fitted to the data.

    The covariance is ``var * exp(-((x1 - x2) / len)**2)``. ``var`` and
    ``len`` are chosen from an ``nvar`` by ``nlen`` logarithmic grid by
    minimizing the leave-one-out squared prediction error, then the
    interpolator is refit on all of the data.

    Parameters
    ----------
    nvar : int, optional
        Number of amplitudes tried, from the sample variance of ``y`` to
        ``var_ratio`` times it. Default is 10.
    nlen : int, optional
        Number of length scales tried, from a third of the smallest
        spacing in ``x`` to three times the range of ``x``. Default is 10.
    var_ratio : float, optional
        Ratio of the largest to the smallest amplitude. Default is 100.
    verbose : int, optional
        0 is silent, 1 prints the chosen parameters, 2 prints every trial.

    Attributes
    ----------
    var : float
        Chosen amplitude.
    len : float
        Chosen length scale.
    min_qual : float
        Leave-one-out squared error of the chosen parameters.
    """

    def __init__(self, nvar: int = 10, nlen: int = 10, var_ratio: float = 100.0,
                 verbose: int = 0):
        super().__init__()
        if nvar < 1 or nlen < 1:
            raise ValueError(f"nvar and nlen must be >= 1, got {nvar} and {nlen}")
        self.nvar = nvar
        self.nlen = nlen
        self.var_ratio = var_ratio
        self.verbose = verbose
        self.var: float = 0.0
        self.len: float = 0.0
        self.min_qual: float = np.inf

    def covar_func(self, x1: float, x2: float) -> float:
        return self.var * np.exp(-((x1 - x2) / self.len) ** 2)

    @staticmethod
    def _loo_error(x: np.ndarray, y: np.ndarray, var: float, length: float,
                   noise_var: float) -> float:
        """Sum of squared leave-one-out prediction errors."""
        n = len(x)
        K = var * np.exp(-((x[:, None] - x[None, :]) / length) ** 2)
        K[np.diag_indices(n)] += noise_var
        qual = 0.0
        for k in range(n):
            keep = np.arange(n) != k
            lu = _factor(K[np.ix_(keep, keep)], "KrigeOptimInterpolator.set_noise()")
            pred = float(np.dot(K[k, keep], lu_solve(lu, y[keep])))
            qual += (y[k] - pred) ** 2
        return qual

    def set(self, x, y) -> None:
        """Choose covariance parameters for ``(x, y)`` and fit exactly."""
        self.set_noise(x, y, 0.0)

    def set_noise(self, x, y, noise_var: float) -> None:
        """Choose covariance parameters for ``(x, y)`` and fit with noise.

        Raises
        ------
        ValueError
            If fewer than three points are given, the lengths differ, or
            all ``x`` are equal.
        numpy.linalg.LinAlgError
            If every trial parameter pair gives a singular fit.
        """
        x, y = _check_data(x, y, "KrigeOptimInterpolator.set_noise()", min_points=3)

        var0 = float(np.var(y, ddof=1))
        if not var0 > 0.0:
            warnings.warn(
                "Data have zero variance; using unit covariance amplitude.",
                UserWarning,
                stacklevel=2,
            )
            var0 = 1.0
        dx = np.abs(np.diff(x))
        dx = dx[dx > 0.0]
        if len(dx) == 0:
            raise ValueError(
                "All x values are equal in KrigeOptimInterpolator.set_noise()."
            )
        len_min = float(dx.min()) / 3.0
        len_max = 3.0 * float(np.ptp(x))

        var_grid = np.geomspace(var0, var0 * self.var_ratio, self.nvar)
        len_grid = np.geomspace(len_min, len_max, self.nlen)

        best: Optional[Tuple[float, float, float]] = None
        for var in var_grid:
            for length in len_grid:
                try:
                    qual = self._loo_error(x, y, var, length, noise_var)
                except np.linalg.LinAlgError:
                    if self.verbose > 1:
                        print(f"  var={var:.6g} len={length:.6g}: singular, skipped")
                    continue
                if self.verbose > 1:
                    print(f"  var={var:.6g} len={length:.6g}: qual={qual:.6g}")
                if best is None or qual < best[0]:
                    best = (qual, float(var), float(length))

        if best is None:
            raise np.linalg.LinAlgError(
                "Covariance matrix singular for every parameter pair in "
                "KrigeOptimInterpolator.set_noise()."
            )
        self.min_qual, self.var, self.len = best
        if self.verbose > 0:
            print(f"Optimal var={self.var:.6g}, len={self.len:.6g}, "
                  f"qual={self.min_qual:.6g}")

        self.set_covar_noise(x, y, self.covar_func, noise_var)
