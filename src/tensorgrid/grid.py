"""Grid descriptors and grid formulas.

:class:`UniformGrid` describes an evenly spaced (linear or logarithmic)
set of grid points by its endpoints and number of bins, and
:func:`evaluate_grid_formula` evaluates a user expression such as
``"0.1*i**2"`` to produce one grid coordinate per index value.
"""

from __future__ import annotations

import math
import tokenize
from dataclasses import dataclass
from typing import Dict

import numpy as np
import sympy
from sympy.parsing.sympy_parser import (
    convert_xor,
    parse_expr,
    standard_transformations,
)


@dataclass(frozen=True)
class UniformGrid:
    """Evenly spaced grid from ``start`` to ``end`` with ``n_bins`` bins.

    The grid has ``n_bins + 1`` points and includes both endpoints. If
    ``log`` is True the points are spaced evenly in ``log(x)``, i.e.
    ``start * (end / start) ** (j / n_bins)``.

    Parameters
    ----------
    start : float
        First grid point.
    end : float
        Last grid point. May be smaller than ``start`` for a decreasing grid.
    n_bins : int
        Number of bins (one fewer than the number of points).
    log : bool, optional
        Logarithmic spacing. Default is False.

    Raises
    ------
    ValueError
        If ``n_bins < 1``, or if a logarithmic grid has a zero endpoint or
        endpoints of opposite sign.
    """

    start: float
    end: float
    n_bins: int
    log: bool = False

    def __post_init__(self):
        if not isinstance(self.n_bins, (int, np.integer)) or self.n_bins < 1:
            raise ValueError(f"n_bins must be an int >= 1, got {self.n_bins}")
        if self.log and (self.start == 0.0 or self.end == 0.0
                         or (self.start > 0.0) != (self.end > 0.0)):
            raise ValueError(
                f"Logarithmic grid requires endpoints of the same sign, "
                f"got [{self.start}, {self.end}]"
            )

    def get_npoints(self) -> int:
        return self.n_bins + 1

    def get_nbins(self) -> int:
        return self.n_bins

    def __len__(self) -> int:
        return self.n_bins + 1

    def __getitem__(self, j: int) -> float:
        n = self.n_bins + 1
        if j < 0:
            j += n
        if j < 0 or j >= n:
            raise IndexError(f"Grid point {j} out of range [0, {n - 1}]")
        # Endpoints are returned exactly
        if j == 0:
            return float(self.start)
        if j == self.n_bins:
            return float(self.end)
        if self.log:
            return float(self.start * (self.end / self.start) ** (j / self.n_bins))
        return float(self.start + j * (self.end - self.start) / self.n_bins)

    def to_array(self) -> np.ndarray:
        """Return all grid points as a 1-D array."""
        return np.array([self[j] for j in range(self.n_bins + 1)])

    def is_log(self) -> bool:
        return self.log


def uniform_grid_end(start: float, end: float, n_bins: int) -> UniformGrid:
    """Linear grid from *start* to *end* with *n_bins* bins."""
    return UniformGrid(float(start), float(end), n_bins)


def uniform_grid_width(start: float, width: float, n_bins: int) -> UniformGrid:
    """Linear grid starting at *start* with bin width *width*."""
    return UniformGrid(float(start), float(start + width * n_bins), n_bins)


def uniform_grid_log_end(start: float, end: float, n_bins: int) -> UniformGrid:
    """Logarithmic grid from *start* to *end* with *n_bins* bins."""
    return UniformGrid(float(start), float(end), n_bins, log=True)


def uniform_grid_log_width(start: float, width: float, n_bins: int) -> UniformGrid:
    """Logarithmic grid starting at *start* with constant ratio *width*."""
    return UniformGrid(float(start), float(start * width ** n_bins), n_bins, log=True)


_TRANSFORMATIONS = standard_transformations + (convert_xor,)


def evaluate_grid_formula(formula: str, variables: Dict[str, float]) -> float:
    """Evaluate the expression *formula* with the given variable bindings.

    The expression is parsed with SymPy on every call; ``^`` is accepted
    as an alias for ``**`` and the usual functions (``exp``, ``log``,
    ``sqrt``, ``sin``, ...) and constants (``pi``, ``E``) are available.

    Parameters
    ----------
    formula : str
        Expression to evaluate, e.g. ``"10^(i/4)"``.
    variables : dict
        Mapping from variable name to value.

    Returns
    -------
    float
        The value of the expression.

    Raises
    ------
    ValueError
        If the expression cannot be parsed, refers to a variable that is
        not bound, or does not evaluate to a finite real number.

    Examples
    --------
    >>> evaluate_grid_formula("2*i+1", {"i": 3})
    7.0
    """
    symbols = {name: sympy.Symbol(name) for name in variables}
    try:
        expr = parse_expr(formula, local_dict=symbols,
                          transformations=_TRANSFORMATIONS)
    except (SyntaxError, TypeError, tokenize.TokenError, sympy.SympifyError) as exc:
        raise ValueError(f"Could not parse grid formula '{formula}': {exc}") from exc

    free = sorted(str(s) for s in expr.free_symbols if str(s) not in variables)
    if free:
        raise ValueError(
            f"Grid formula '{formula}' uses unbound variable(s) {free}"
        )

    subs = {symbols[name]: value for name, value in variables.items()}
    value = expr.evalf(subs=subs)
    try:
        result = float(value)
    except TypeError as exc:
        raise ValueError(
            f"Grid formula '{formula}' does not evaluate to a real number "
            f"(got {value})"
        ) from exc
    if not math.isfinite(result):
        raise ValueError(f"Grid formula '{formula}' evaluated to {result}")
    return result
