"""Variable flip angle (VFA) T1 mapping

> Deoni SCL, Rutt BK, Peters TM:
  Rapid combined T1 and T2 mapping using gradient recalled acquisition
  in the steady state.
  Magn Reson Med 2003; 49:515–526.

"""

import numpy as np

from .. import functions, operator
from ..evolution import E
from ..transition import T

TR = 15e-3
TRF = 1e-3
ALPHAS = (3, 15)


def sequence(tissue, alpha, TR=TR, *, TRF=TRF, **kwargs):
    """spoiled gradient echo period (the signal is sampled after the pulse)"""
    if TR < TRF:
        raise ValueError(f"Repetition time must be >= TRF: {TR} < {TRF}")
    return [
        T(alpha, TRF, tissue, duration=True, **kwargs),
        operator.ADC,
        E(TR - TRF, tissue, duration=True),
        operator.SPOILER,
    ]


def signal(tissue, alphas=ALPHAS, TR=TR, *, order1=None, **kwargs):
    """steady-state signal magnitudes (and Jacobian)"""
    signals, jac = [], []
    for alpha in np.atleast_1d(alphas):
        seq = sequence(tissue, alpha, TR, **kwargs)
        if order1:
            sig, J = functions.simulate(seq, order1=order1)
            sig, J = sig[0], J[0]
            # derivative of the magnitude
            jac.append((sig.conj() * J).real / np.abs(sig))
        else:
            sig = functions.simulate(seq)[0]
        signals.append(np.abs(sig))

    if order1:
        return np.asarray(signals), np.asarray(jac)
    return np.asarray(signals)


def despot1(signals, alphas, TR):
    """DESPOT1 estimation of M0 and T1

    Linear regression of S / sin(alpha) against S / tan(alpha):
    the slope is exp(-TR / T1).

    Args:
        signals: (nalpha,) signals
        alphas: (nalpha,) flip angles (degree)
        TR: repetition time (s)

    Returns:
        M0, T1
    """
    signals = np.asarray(signals, dtype=float)
    alphas = np.radians(np.asarray(alphas, dtype=float))
    if signals.shape != alphas.shape or alphas.size < 2:
        raise ValueError("At least 2 flip angles and matching signals are needed")
    x = signals / np.tan(alphas)
    y = signals / np.sin(alphas)
    E1, intercept = np.polyfit(x, y, 1)
    T1 = -TR / np.log(E1)
    M0 = intercept / (1 - E1)
    return M0, T1


def bias(tissue, alphas=ALPHAS, TR=TR, **kwargs):
    """T1 estimated with DESPOT1 (B1-corrected flip angles)

    Returns:
        dict with the estimates (M0, T1) and the relative biases
        of T1 w/r to 1/R1f and 1/R1obs
    """
    signals = signal(tissue, alphas, TR, **kwargs)
    M0, T1 = despot1(signals, tissue.B1 * np.asarray(alphas, dtype=float), TR)
    return {
        "M0": M0,
        "T1": T1,
        "bias_T1f": T1 * tissue.R1f - 1,
        "bias_T1obs": T1 * tissue.R1obs - 1,
    }
