"""Selective Inversion Recovery (SIR) mapping of m0s and R1

Each (ti, td) pair is a separate steady-state experiment:

    inversion (180°) | ti | readout (90° + spoiler) | td

The signal is the free pool's longitudinal magnetization before the readout.
The conventional analysis models the pulses as instantaneous, with fixed
inversion (Sm) and readout (Sm_exc) ratios of the semi-solid pool, R1f = R1s and
a fixed exchange rate kmf.

> Dortch RD, Li K, Gochberg DF, et al.:
  Quantitative magnetization transfer imaging in human brain at 3 T
  via selective inversion recovery.
  Magn Reson Med 2011; 66:1346–1352.
> Gochberg DF, Gore JC:
  Quantitative magnetization transfer imaging via selective inversion recovery
  with short repetition times.
  Magn Reson Med 2007; 57:437–441.

"""

import logging
import numpy as np
from scipy import linalg, optimize

from .. import diff, functions, operator, statevector, stats
from ..evolution import E
from ..transition import T

LOGGER = logging.getLogger(__name__)

# protocol (s)
TI = [15e-3, 15e-3, 278e-3, 1007e-3]
TD = [684e-3, 4121e-3, 2730e-3, 10e-3]
TRF_INV = 1e-3
TRF_EXC = 0.5e-3

# conventional model's fixed parameters
KMF = 14.5  # 1/s
SM = 0.83

# parameters of interest
CRB_PARAMETERS = {"M0": "M0", "m0s": "m0s", "R1": {"R1f": 1, "R1s": 1}}

# readout phase: the longitudinal magnetization is the real part
ADC = operator.Adc(phase=-90)


def _check_times(ti, td):
    ti, td = np.atleast_1d(ti).astype(float), np.atleast_1d(td).astype(float)
    if ti.shape != td.shape or ti.ndim != 1:
        raise ValueError(f"ti and td must have the same length: {ti}, {td}")
    elif np.any(ti < 0) or np.any(td < 0):
        raise ValueError("Cannot have negative ti or td")
    return ti, td


def sequence(tissue, ti, td, *, TRF_inv=TRF_INV, TRF_exc=TRF_EXC, **kwargs):
    """SIR sequence for a single (ti, td) pair

    Args:
        tissue: Tissue object
        ti: inversion time (s)
        td: delay after the readout (s)
        TRF_inv, TRF_exc: inversion and excitation pulse durations (s)
        kwargs: passed to T (model, table)

    Returns:
        list of operators
    """
    return [
        T(180, TRF_inv, tissue, duration=True, **kwargs),
        E(ti, tissue, duration=True),
        T(90, TRF_exc, tissue, duration=True, **kwargs),
        ADC,
        operator.SPOILER,
        E(td, tissue, duration=True),
    ]


def signal(tissue, ti=TI, td=TD, *, order1=None, **kwargs):
    """steady-state SIR signal for each (ti, td) pair

    Args:
        tissue: Tissue object
        ti, td: sequences of inversion times and delays (s)
        order1: partial derivatives (cf. diff.parse_order1)
        kwargs: cf. sequence

    Returns:
        signals: (npair,) array
        [jac]: (npair x nalias) array, if order1 is set
    """
    ti, td = _check_times(ti, td)
    signals, jac = [], []
    for ti_, td_ in zip(ti, td):
        seq = sequence(tissue, ti_, td_, **kwargs)
        if order1:
            sig, J = functions.simulate(seq, order1=order1)
            jac.append(J[0].real)
        else:
            sig = functions.simulate(seq)
        signals.append(sig[0].real)

    if order1:
        return np.asarray(signals), np.asarray(jac)
    return np.asarray(signals)


def total_time(ti=TI, td=TD, *, TRF_inv=TRF_INV, TRF_exc=TRF_EXC):
    """total acquisition time (s)"""
    ti, td = _check_times(ti, td)
    return float(np.sum(ti + td) + ti.size * (TRF_inv + TRF_exc))


def crb(tissue, ti=TI, td=TD, parameters=None, *, sigma2=1, **kwargs):
    """Cramer-Rao bounds of selected parameters

    Args:
        tissue: Tissue object
        ti, td: protocol (s)
        parameters: partial derivatives (cf. diff.parse_order1)
            Default: M0, m0s and R1 (R1f and R1s tied)
        sigma2: noise variance

    Returns:
        dict {<alias>: CRB}
    """
    parameters = CRB_PARAMETERS if parameters is None else parameters
    _, jac = signal(tissue, ti, td, order1=parameters, **kwargs)
    order1 = diff.parse_order1(parameters)
    return stats.crb(jac, list(order1), sigma2=sigma2)


def efficiency(tissue, ti=TI, td=TD, parameters=None, *, sigma2=1, **kwargs):
    """relative precision per unit time: sqrt(CRB) / value * sqrt(total time)

    The value of a combination of tied parameters is that of its first parameter.
    """
    parameters = CRB_PARAMETERS if parameters is None else parameters
    bounds = crb(tissue, ti, td, parameters, sigma2=sigma2, **kwargs)
    order1 = diff.parse_order1(parameters)
    timing = {key: kwargs[key] for key in ["TRF_inv", "TRF_exc"] if key in kwargs}
    duration = total_time(ti, td, **timing)
    values = {alias: tissue[next(iter(params))] for alias, params in order1.items()}
    return {
        alias: np.sqrt(bounds[alias]) / abs(values[alias]) * np.sqrt(duration)
        for alias in bounds
    }


#
# conventional model


def semisolid_saturation(tissue, alpha, TRF, model="graham", **kwargs):
    """ratio of the semi-solid zs after and before an isolated pulse

    Exchange is neglected.

    Args:
        tissue: Tissue object
        alpha: flip angle (degree)
        TRF: pulse duration (s)
        model: "graham" or "generalized_bloch"
    """
    isolated = tissue.copy(Rx=0)
    if isolated.m0s == 0:
        raise ValueError("Cannot compute semi-solid saturation with m0s = 0")
    mag = statevector.equilibrium(isolated)
    mag = T(alpha, TRF, isolated, model=model, **kwargs)(mag)
    return float(mag.zs / (isolated.M0 * isolated.m0s))


def _relaxation(tau, M0, m0s, R1, kmf):
    """longitudinal two-pool propagator [zf, zs, 1]"""
    m0f = 1 - m0s
    kfm = kmf * m0s / m0f
    L = np.array(
        [
            [-(R1 + kfm), kmf, R1 * M0 * m0f],
            [kfm, -(R1 + kmf), R1 * M0 * m0s],
            [0, 0, 0],
        ]
    )
    return linalg.expm(L * tau)


def conventional_signal(
    params,
    ti=TI,
    td=TD,
    *,
    kmf=KMF,
    Sm=SM,
    Sm_exc=1.0,
    TRF_inv=TRF_INV,
    TRF_exc=TRF_EXC,
):
    """SIR signal of the conventional model (instantaneous pulses)

    Args:
        params: M0, m0s, R1, Sf (free pool inversion ratio)
        ti, td: protocol (s)
        kmf: exchange rate from the semi-solid to the free pool (1/s)
        Sm: semi-solid inversion ratio
        Sm_exc: semi-solid readout ratio
        TRF_inv, TRF_exc: pulse durations (s), pulses are centered

    Returns:
        signals: (npair,) array
    """
    M0, m0s, R1, Sf = params
    ti, td = _check_times(ti, td)
    inversion = np.diag([Sf, Sm, 1.0])
    readout = np.diag([0.0, Sm_exc, 1.0])

    signals = []
    for ti_, td_ in zip(ti, td):
        Eti = _relaxation(ti_ + (TRF_inv + TRF_exc) / 2, M0, m0s, R1, kmf)
        Etd = _relaxation(td_ + (TRF_inv + TRF_exc) / 2, M0, m0s, R1, kmf)
        # magnetization before the readout
        U = Eti @ inversion @ Etd @ readout
        A = U - np.eye(3)
        A[2] = [0, 0, 1]
        m = np.linalg.solve(A, [0, 0, 1])
        signals.append(m[0])
    return np.asarray(signals)


def fit_conventional(signals, ti=TI, td=TD, *, x0=None, **kwargs):
    """fit the conventional model to SIR signals (scipy least_squares)

    Args:
        signals: (npair,) measured signals
        ti, td: protocol (s)
        x0: initial M0, m0s, R1, Sf
        kwargs: fixed parameters (cf. conventional_signal)

    Returns:
        dict {"M0", "m0s", "R1", "Sf"}
    """
    signals = np.asarray(signals, dtype=float)
    ti, td = _check_times(ti, td)
    if signals.shape != ti.shape:
        raise ValueError(f"Expected {ti.size} signals, got {signals.shape}")
    if x0 is None:
        x0 = [np.max(np.abs(signals)), 0.1, 1.0, -0.95]

    def residuals(x):
        return conventional_signal(x, ti, td, **kwargs) - signals

    res = optimize.least_squares(
        residuals,
        x0,
        bounds=([0, 0, 0, -1], [np.inf, 0.99, np.inf, 1]),
        x_scale="jac",
        xtol=1e-12,
        ftol=1e-12,
        gtol=1e-12,
    )
    if not res.success:
        LOGGER.warning(f"Conventional SIR fit did not converge: {res.message}")
    LOGGER.info(f"Conventional SIR fit: {res.x}, cost: {res.cost:.2e}")
    return dict(zip(["M0", "m0s", "R1", "Sf"], res.x))


def bias(
    tissue,
    ti=TI,
    td=TD,
    *,
    kmf=None,
    saturation_model="graham",
    TRF_inv=TRF_INV,
    TRF_exc=TRF_EXC,
    **kwargs,
):
    """bias of the conventional SIR analysis of generalized Bloch signals

    Args:
        tissue: Tissue object (R1f and R1s should be equal)
        ti, td: protocol (s)
        kmf: exchange rate of the conventional model (default: tissue.Rx * tissue.m0f)
        saturation_model: model used for computing Sm and Sm_exc
        kwargs: passed to T (model, table)

    Returns:
        dict with the estimates (m0s, R1) and their relative biases
    """
    timing = dict(TRF_inv=TRF_inv, TRF_exc=TRF_exc)
    signals = signal(tissue, ti, td, **timing, **kwargs)
    kmf = tissue.Rx * tissue.m0f if kmf is None else kmf
    options = {}
    if saturation_model == "generalized_bloch":
        options["table"] = kwargs.get("table")
    Sm = semisolid_saturation(tissue, 180, TRF_inv, saturation_model, **options)
    Sm_exc = semisolid_saturation(tissue, 90, TRF_exc, saturation_model, **options)
    x0 = [tissue.M0, tissue.m0s, tissue.R1f, -0.95]
    fit = fit_conventional(
        signals, ti, td, x0=x0, kmf=kmf, Sm=Sm, Sm_exc=Sm_exc, **timing
    )
    return {
        "m0s": fit["m0s"],
        "R1": fit["R1"],
        "bias_m0s": fit["m0s"] / tissue.m0s - 1,
        "bias_R1": fit["R1"] / tissue.R1f - 1,
    }
