"""Evolution operator"""

import numpy as np
from . import bloch, common, operator


class E(operator.Operator):
    """free precession, relaxation and exchange of both pools"""

    def __init__(self, tau, tissue, *, name=None, duration=None):
        """Initialize evolution operator

        Args:
            tau: evolution time (s)
            tissue: Tissue object
            duration: operator's duration, or True to use `tau`
            cf. Operator for other arguments

        """
        tau = common.asfloat(tau, "tau")
        if tau < 0:
            raise ValueError(f"Cannot have tau < 0: {tau}")

        if not name:  # default name
            name = common.repr_operator("E", ["tau"], [tau * 1e3], [".1f"])

        self.tau = tau
        self.tissue = tissue

        # match duration and tau if `duration` is `True`
        duration = self.tau if duration is True else duration
        super().__init__(name=name, duration=duration)

        self._H = bloch.hamiltonian(tissue)
        self._mat = bloch.propagator(self._H, tau)

    @property
    def mat(self):
        return self._mat

    def _derive(self, param):
        dH = bloch.dhamiltonian(self.tissue, param)
        if not np.any(dH):
            return np.zeros((bloch.NDIM, bloch.NDIM))
        return bloch.dpropagator(self._H, dH, self.tau)
