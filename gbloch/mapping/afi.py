"""Actual flip angle imaging (AFI) B1 mapping

> Yarnykh VL:
  Actual flip-angle imaging in the pulsed steady state:
  a method for rapid three-dimensional mapping of the transmitted
  radiofrequency field.
  Magn Reson Med 2007; 57:192–200.

"""

import numpy as np

from .. import functions, operator
from ..evolution import E
from ..transition import T

ALPHA = 60
TR1 = 20e-3
TR2 = 100e-3
TRF = 0.5e-3


def sequence(tissue, alpha=ALPHA, TR1=TR1, TR2=TR2, *, TRF=TRF, **kwargs):
    """interleaved spoiled gradient echoes with repetition times TR1 and TR2"""
    if min(TR1, TR2) < TRF:
        raise ValueError(f"Repetition times must be >= TRF: {TR1}, {TR2}, {TRF}")
    seq = []
    for TR in [TR1, TR2]:
        seq += [
            T(alpha, TRF, tissue, duration=True, **kwargs),
            operator.ADC,
            E(TR - TRF, tissue, duration=True),
            operator.SPOILER,
        ]
    return seq


def signal(tissue, alpha=ALPHA, TR1=TR1, TR2=TR2, **kwargs):
    """steady-state signal magnitudes S1, S2"""
    seq = sequence(tissue, alpha, TR1, TR2, **kwargs)
    S1, S2 = np.abs(functions.simulate(seq))
    return S1, S2


def estimate_B1(S1, S2, TR1, TR2, alpha):
    """Yarnykh's B1 estimate: arccos((r n - 1) / (n - r)) / alpha

    Args:
        S1, S2: signals acquired after TR2 and TR1 periods respectively
        TR1, TR2: repetition times (s), TR1 < TR2
        alpha: nominal flip angle (degree)
    """
    r = np.asarray(S2) / np.asarray(S1)
    n = TR2 / TR1
    cos = np.clip((r * n - 1) / (n - r), -1, 1)
    return np.degrees(np.arccos(cos)) / alpha


def ideal_ratio(alpha, TR1, TR2, T1):
    """exact S2 / S1 ratio of a single pool with ideal spoiling

    Args:
        alpha: flip angle (degree)
        TR1, TR2: repetition times (s)
        T1: longitudinal relaxation time (s)
    """
    cos = np.cos(np.radians(alpha))
    E1 = np.exp(-TR1 / T1)
    E2 = np.exp(-TR2 / T1)
    return (1 - E1 + (1 - E2) * E1 * cos) / (1 - E2 + (1 - E1) * E2 * cos)


def bias(tissue, alpha=ALPHA, TR1=TR1, TR2=TR2, **kwargs):
    """B1 estimated with AFI and its relative bias"""
    S1, S2 = signal(tissue, alpha, TR1, TR2, **kwargs)
    B1 = float(estimate_B1(S1, S2, TR1, TR2, alpha))
    return {"B1": B1, "bias_B1": B1 / tissue.B1 - 1}
