"""Magnetization vector with partial derivatives"""

import numpy as np
from . import diff

# indices of the magnetization vector
XF, YF, ZF, XS, ZS = range(5)


class Magnetization:
    """Magnetization vector [xf, yf, zf, xs, zs, 1] and its partial derivatives"""

    def __init__(self, m=None, dm=None, *, order1=None):
        """Init magnetization

        Args:
            m: 6-vector (default: [0, 0, 1, 0, 0, 1])
            dm: dict {<alias>: 6-vector} of partial derivatives
            order1: partial derivatives (cf. diff.parse_order1)
        """
        m = [0, 0, 1, 0, 0, 1] if m is None else m
        self.m = np.asarray(m, dtype=float).copy()
        if self.m.shape != (6,):
            raise ValueError(f"Invalid magnetization vector: {m}")
        self.order1 = diff.parse_order1(order1)
        dm = dm or {}
        missing = set(self.order1) - set(dm)
        if missing:
            raise ValueError(f"Missing partial derivatives: {missing}")
        self.dm = {alias: np.asarray(dm[alias], dtype=float).copy() for alias in self.order1}

    @property
    def xf(self):
        return self.m[XF]

    @property
    def yf(self):
        return self.m[YF]

    @property
    def zf(self):
        return self.m[ZF]

    @property
    def xs(self):
        return self.m[XS]

    @property
    def zs(self):
        return self.m[ZS]

    @property
    def signal(self):
        """free pool transverse magnetization"""
        return self.m[XF] + 1j * self.m[YF]

    @property
    def dsignal(self):
        return {alias: d[XF] + 1j * d[YF] for alias, d in self.dm.items()}

    def copy(self):
        return Magnetization(self.m, self.dm, order1=self.order1)

    def __repr__(self):
        values = ", ".join(f"{v:.3f}" for v in self.m[:5])
        return f"Magnetization([{values}])"


def equilibrium(tissue, order1=None):
    """thermal equilibrium magnetization of the tissue"""
    order1 = diff.parse_order1(order1)
    t = tissue
    m = [0, 0, t.M0 * t.m0f, 0, t.M0 * t.m0s, 1]
    dm = {}
    for alias, params in order1.items():
        dm[alias] = np.zeros(6)
        for param, coeff in params.items():
            if param == "M0":
                dm[alias][[ZF, ZS]] += coeff * np.array([t.m0f, t.m0s])
            elif param == "m0s":
                dm[alias][[ZF, ZS]] += coeff * np.array([-t.M0, t.M0])
    return Magnetization(m, dm, order1=order1)
