"""Orthogonal polynomial basis usable inside patsy/statsmodels formulas."""

import numpy as np
from patsy import stateful_transform


class OrthogonalPoly:
    """
    Stateful patsy transform for `poly(x, degree)`.

    The training pass stores the three-term recurrence coefficients
    (`alpha_`, `norm2_`) so the same basis is rebuilt on prediction grids.
    Columns are orthonormal and orthogonal to the intercept on the training x.
    """

    def __init__(self):
        self._chunks = []
        self.degree = None
        self.alpha_ = None
        self.norm2_ = None

    def memorize_chunk(self, x, degree=1):
        self.degree = int(degree)
        self._chunks.append(np.asarray(x, dtype=float).ravel())

    def memorize_finish(self):
        x = np.concatenate(self._chunks)
        self._chunks = []
        degree = self.degree
        if degree < 1:
            raise ValueError("'degree' must be at least 1")
        if degree >= np.unique(x).size:
            raise ValueError("'degree' must be less than number of unique points")

        alpha = np.zeros(degree)
        # norm2[0] is the conventional 1 for P_{-1}; norm2[k + 1] = ||P_k||^2
        norm2 = np.ones(degree + 2)
        p_prev = np.zeros_like(x)
        p_cur = np.ones_like(x)
        norm2[1] = x.size
        for k in range(degree):
            alpha[k] = np.sum(x * p_cur ** 2) / norm2[k + 1]
            p_next = (x - alpha[k]) * p_cur - (norm2[k + 1] / norm2[k]) * p_prev
            p_prev, p_cur = p_cur, p_next
            norm2[k + 2] = np.sum(p_cur ** 2)

        self.alpha_ = alpha
        self.norm2_ = norm2

    def transform(self, x, degree=1):
        x = np.asarray(x, dtype=float).ravel()
        basis = np.empty((x.size, self.degree))
        p_prev = np.zeros_like(x)
        p_cur = np.ones_like(x)
        for k in range(self.degree):
            p_next = (x - self.alpha_[k]) * p_cur - (self.norm2_[k + 1] / self.norm2_[k]) * p_prev
            p_prev, p_cur = p_cur, p_next
            basis[:, k] = p_cur / np.sqrt(self.norm2_[k + 2])
        return basis


poly = stateful_transform(OrthogonalPoly)
