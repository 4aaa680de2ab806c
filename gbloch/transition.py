"""Transition operator (rectangular RF pulse)"""

import logging
import numpy as np
from . import bloch, common, lineshape, operator, r2sl, utils

LOGGER = logging.getLogger(__name__)

MODELS = ["generalized_bloch", "graham"]


class T(operator.Operator):
    """rectangular RF-pulse about the x axis, with relaxation and exchange"""

    def __init__(
        self,
        alpha,
        TRF,
        tissue,
        *,
        model="generalized_bloch",
        table=None,
        name=None,
        duration=None,
    ):
        """Init RF-pulse operator

        Args:
            alpha: nominal flip angle (degree), scaled by tissue.B1
            TRF: pulse duration (s)
            tissue: Tissue object
            model: semi-solid pool model during the pulse
                "generalized_bloch": linearized generalized Bloch model (R2sl)
                "graham": Graham's saturation rate (super-Lorentzian lineshape)
            table: R2slTable (generalized_bloch model only).
                Defaults to `r2sl.precompute_R2sl()`
            duration: operator's duration, or True to use `TRF`
            cf. Operator for other keyword arguments
        """
        alpha = common.asfloat(alpha, "alpha")
        TRF = common.asfloat(TRF, "TRF")
        if TRF <= 0:
            raise ValueError(f"Pulse duration must be > 0, not {TRF}")
        elif not model in MODELS:
            raise ValueError(f"Unknown model: {model}, must be one of {MODELS}")

        if not name:
            name = common.repr_operator(
                "T", ["alpha", "TRF"], [alpha, TRF * 1e3], [".1f", ".2f"]
            )

        self.alpha = alpha
        self.TRF = TRF
        self.tissue = tissue
        self.model = model
        self.omega1 = float(utils.pulse_amplitude(alpha, TRF))

        duration = self.TRF if duration is True else duration
        super().__init__(name=name, duration=duration)

        # semi-solid pool
        self.R2s = None
        self.W = None
        w1 = tissue.B1 * self.omega1
        if model == "graham":
            self._g0 = float(absorption_at_resonance(tissue.T2s))
            self.W = float(lineshape.saturation_rate(w1, self._g0))
        elif w1 != 0:
            if table is None:
                LOGGER.info("Using default R2sl table")
                table = r2sl.precompute_R2sl()
            self.table = table
            # R2sl is even in the flip angle
            self.R2s = table(TRF, abs(tissue.B1 * np.radians(alpha)), tissue.T2s)

        self._H = bloch.hamiltonian(tissue, self.omega1, R2s=self.R2s, W=self.W)
        self._mat = bloch.propagator(self._H, TRF)

    @property
    def mat(self):
        return self._mat

    def _derive(self, param):
        t = self.tissue
        dR2s, dW = None, 0
        if self.W is not None:
            # W = pi (B1 omega1)^2 g0(T2s)
            if param == "B1":
                dW = 2 * np.pi * t.B1 * self.omega1**2 * self._g0
            elif param == "T2s":
                step = 1e-6 * t.T2s
                dg0 = (
                    absorption_at_resonance(t.T2s + step)
                    - absorption_at_resonance(t.T2s - step)
                ) / (2 * step)
                dW = np.pi * (t.B1 * self.omega1) ** 2 * float(dg0)
        elif self.R2s is not None:
            dR2s = 0
            if param in ["T2s", "B1"]:
                arad = np.radians(self.alpha)
                d_T2s, d_alpha = self.table.gradient(
                    self.TRF, abs(t.B1 * arad), t.T2s
                )
                dR2s = d_T2s if param == "T2s" else d_alpha * abs(arad)

        dH = bloch.dhamiltonian(
            t, param, self.omega1, R2s=self.R2s, W=self.W, dR2s=dR2s, dW=dW
        )
        if not np.any(dH):
            return np.zeros((bloch.NDIM, bloch.NDIM))
        return bloch.dpropagator(self._H, dH, self.TRF)


def absorption_at_resonance(T2s):
    """super-Lorentzian absorption lineshape at resonance (s)"""
    return lineshape.absorption_lineshape(T2s, "super-lorentzian", offres=0)
