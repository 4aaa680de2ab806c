"""Two-pool tissue model"""

import numpy as np
from . import common

# parameters for which propagator derivatives exist
PARAMETERS = ("M0", "m0s", "R1f", "R2f", "Rx", "R1s", "T2s", "omega0", "B1")


class Tissue:
    """Free pool / semi-solid pool parameters

    Units: 1/s for rates, s for T2s, rad/s for omega0.
    """

    def __init__(self, m0s, R1f, R2f, Rx, R1s, T2s, *, M0=1.0, omega0=0.0, B1=1.0):
        """Init tissue parameters

        Args:
            m0s: semi-solid pool fraction (the free pool fraction is 1 - m0s)
            R1f: longitudinal relaxation rate of the free pool (1/s)
            R2f: transverse relaxation rate of the free pool (1/s)
            Rx: exchange rate (1/s), with exchange terms Rx * m0s and Rx * m0f
            R1s: longitudinal relaxation rate of the semi-solid pool (1/s)
            T2s: transverse relaxation time of the semi-solid pool (s)
            M0: total equilibrium magnetization
            omega0: off-resonance (rad/s)
            B1: transmit field scaling
        """
        values = dict(
            M0=M0,
            m0s=m0s,
            R1f=R1f,
            R2f=R2f,
            Rx=Rx,
            R1s=R1s,
            T2s=T2s,
            omega0=omega0,
            B1=B1,
        )
        values = {name: common.asfloat(values[name], name) for name in PARAMETERS}

        if not 0 <= values["m0s"] < 1:
            raise ValueError(f"m0s must be in [0, 1), not {values['m0s']}")
        for name in ["M0", "R1f", "R2f", "Rx", "R1s", "B1"]:
            if values[name] < 0:
                raise ValueError(f"Cannot have {name} < 0")
        if values["T2s"] <= 0:
            raise ValueError("Cannot have T2s <= 0")

        self.M0 = values["M0"]
        self.m0s = values["m0s"]
        self.R1f = values["R1f"]
        self.R2f = values["R2f"]
        self.Rx = values["Rx"]
        self.R1s = values["R1s"]
        self.T2s = values["T2s"]
        self.omega0 = values["omega0"]
        self.B1 = values["B1"]

    @property
    def m0f(self):
        return 1 - self.m0s

    @property
    def R1obs(self):
        """apparent longitudinal relaxation rate (slowest recovery rate)"""
        mat = np.array(
            [
                [self.R1f + self.Rx * self.m0s, -self.Rx * self.m0f],
                [-self.Rx * self.m0s, self.R1s + self.Rx * self.m0f],
            ]
        )
        return float(np.min(np.linalg.eigvals(mat).real))

    def __getitem__(self, name):
        if not name in PARAMETERS:
            raise KeyError(name)
        return getattr(self, name)

    def values(self, names=PARAMETERS):
        """return parameter values as a list"""
        return [self[name] for name in names]

    def asdict(self):
        return {name: self[name] for name in PARAMETERS}

    def copy(self, **changes):
        """return copy of self with updated parameters"""
        unknown = set(changes) - set(PARAMETERS)
        if unknown:
            raise ValueError(f"Unknown tissue parameter(s): {unknown}")
        values = self.asdict()
        values.update(changes)
        return Tissue(**values)

    def __eq__(self, other):
        if not isinstance(other, Tissue):
            return NotImplemented
        return self.asdict() == other.asdict()

    def __repr__(self):
        return common.repr_operator(
            "Tissue",
            PARAMETERS,
            self.values(),
            [".2f", ".3f", ".3f", ".2f", ".1f", ".3f", ".2e", ".1f", ".2f"],
        )


# white matter at 3T (generalized Bloch fit, R1f = R1s constraint)
WHITE_MATTER = Tissue(m0s=0.139, R1f=0.9, R2f=15.0, Rx=30.0, R1s=0.9, T2s=12e-6)
