# analytic.py
import sympy as sp
import numpy as np


class Analytic:
    """
    Wraps a SymPy expression or a callable f(t, X) as a space/time function.

    Calling convention: ``f(t, X)`` with X of shape (n, 3) returns an array of
    shape (n,) for a scalar expression. SymPy expressions may use the symbols
    x, y, z and t exported by this module.
    """
    _x, _y, _z, _t = sp.symbols("x y z t")
    _coords = (_x, _y, _z)

    def __init__(self, expr, degree: int | None = None):
        self.expr = expr
        self._degree = degree
        self.n_evals = 0
        if isinstance(expr, sp.Basic):
            self._sym = True
            self._func = sp.lambdify((self._t,) + self._coords, expr, "numpy")
            if degree is None and expr.free_symbols <= set(self._coords + (self._t,)):
                try:
                    self._degree = int(sp.Poly(expr, *self._coords).total_degree())
                except sp.PolynomialError:
                    self._degree = None
        elif callable(expr):
            self._sym = False
            self._func = expr
        else:
            raise TypeError(f"Analytic expects a SymPy expression or a callable, got {type(expr)!r}")

    @property
    def degree(self):
        """Polynomial degree in space, or None when not polynomial."""
        return self._degree

    def __call__(self, t, X):
        X = np.asarray(X, dtype=float).reshape(-1, 3)
        self.n_evals += X.shape[0]
        if self._sym:
            out = self._func(float(t), X[:, 0], X[:, 1], X[:, 2])
        else:
            out = self._func(float(t), X)
        # constant expressions come back as scalars
        return np.broadcast_to(np.asarray(out, dtype=float), (X.shape[0],)).copy()

    def __repr__(self):
        return f"Analytic({self.expr!r})"


# helper to avoid typing Analytic._x all the time
x, y, z, t = Analytic._x, Analytic._y, Analytic._z, Analytic._t
