"""Two-pool Bloch-McConnell generators and propagators

The magnetization vector is:

    m = [xf, yf, zf, xs, zs, 1]

with (xf, yf, zf) the free pool, (xs, zs) the semi-solid pool and a constant
last entry, such that relaxation towards equilibrium is linear in m.

RF pulses rotate the magnetization about the x axis. The semi-solid
transverse magnetization xs is the component in the plane of the pulse rotation,
and relaxes with R2sl during pulses (linearized generalized Bloch model).
Alternatively, the semi-solid pool is saturated with Graham's rate W,
in which case xs is not coupled to zs.

Derivatives of the propagators are obtained from the exponential of the
11 x 11 augmented generator acting on [m(5), dm/dp(5), 1].

> Assländer J, Gultekin C, Flassbeck S, Glaser SJ, Sodickson DK:
  Generalized Bloch model: A theory for pulsed magnetization transfer.
  Magn Reson Med 2022; 87:2003–2017.

"""

import numpy as np
from scipy import linalg

from .tissue import PARAMETERS

NDIM = 6


def hamiltonian(tissue, omega1=0, R2s=None, W=None):
    """6x6 generator of the magnetization vector

    Args:
        tissue: Tissue object
        omega1: nominal rf amplitude (rad/s), scaled by tissue.B1
        R2s: relaxation rate of xs (default: 1 / T2s)
        W: if not None, Graham's saturation rate of the semi-solid pool (1/s)

    Returns:
        H: (6 x 6) array, such that dm/dt = H @ m
    """
    t = tissue
    w1 = t.B1 * omega1
    H = np.zeros((NDIM, NDIM))

    # free pool
    H[0, 0] = H[1, 1] = -t.R2f
    H[0, 1] = -t.omega0
    H[1, 0] = t.omega0
    H[1, 2] = w1
    H[2, 1] = -w1
    H[2, 2] = -(t.R1f + t.Rx * t.m0s)
    H[2, 4] = t.Rx * t.m0f
    H[2, 5] = t.M0 * t.m0f * t.R1f

    # semi-solid pool
    H[4, 2] = t.Rx * t.m0s
    H[4, 4] = -(t.R1s + t.Rx * t.m0f)
    H[4, 5] = t.M0 * t.m0s * t.R1s
    if W is None:
        H[3, 3] = -(1 / t.T2s if R2s is None else R2s)
        H[3, 4] = w1
        H[4, 3] = -w1
    else:
        H[3, 3] = -1 / t.T2s
        H[4, 4] -= W
    return H


def dhamiltonian(tissue, param, omega1=0, R2s=None, W=None, *, dR2s=None, dW=0):
    """partial derivative of the generator w/r to a tissue parameter

    Args:
        tissue, omega1, R2s, W: cf. `hamiltonian`
        param: tissue parameter name
        dR2s: derivative of R2s w/r to `param` (default: derivative of 1 / T2s)
        dW: derivative of W w/r to `param`

    Returns:
        dH: (6 x 6) array
    """
    if not param in PARAMETERS:
        raise ValueError(f"Unknown parameter: {param}")
    t = tissue
    dH = np.zeros((NDIM, NDIM))

    if param == "M0":
        dH[2, 5] = t.m0f * t.R1f
        dH[4, 5] = t.m0s * t.R1s
    elif param == "m0s":
        dH[2, 2] = -t.Rx
        dH[2, 4] = -t.Rx
        dH[2, 5] = -t.M0 * t.R1f
        dH[4, 2] = t.Rx
        dH[4, 4] = t.Rx
        dH[4, 5] = t.M0 * t.R1s
    elif param == "R1f":
        dH[2, 2] = -1
        dH[2, 5] = t.M0 * t.m0f
    elif param == "R1s":
        dH[4, 4] = -1
        dH[4, 5] = t.M0 * t.m0s
    elif param == "R2f":
        dH[0, 0] = dH[1, 1] = -1
    elif param == "Rx":
        dH[2, 2] = -t.m0s
        dH[2, 4] = t.m0f
        dH[4, 2] = t.m0s
        dH[4, 4] = -t.m0f
    elif param == "omega0":
        dH[0, 1] = -1
        dH[1, 0] = 1
    elif param == "B1":
        dH[1, 2] = omega1
        dH[2, 1] = -omega1
        if W is None:
            dH[3, 4] = omega1
            dH[4, 3] = -omega1

    # semi-solid lineshape
    if W is None:
        if dR2s is None:
            dR2s = -1 / t.T2s**2 if (param == "T2s" and R2s is None) else 0
        dH[3, 3] = -dR2s
    else:
        dH[4, 4] -= dW
        if param == "T2s":
            dH[3, 3] = 1 / t.T2s**2
    return dH


def augmented_hamiltonian(H, dH):
    """11 x 11 generator acting on [m(5), dm/dp(5), 1]"""
    A = np.zeros((11, 11))
    A[:5, :5] = H[:5, :5]
    A[:5, 10] = H[:5, 5]
    A[5:10, :5] = dH[:5, :5]
    A[5:10, 5:10] = H[:5, :5]
    A[5:10, 10] = dH[:5, 5]
    return A


def propagator(H, tau):
    """6x6 propagator over duration tau"""
    return linalg.expm(H * tau)


def dpropagator(H, dH, tau):
    """partial derivative of the 6x6 propagator, given dH"""
    expA = linalg.expm(augmented_hamiltonian(H, dH) * tau)
    dU = np.zeros((NDIM, NDIM))
    dU[:5, :5] = expA[5:10, :5]
    dU[:5, 5] = expA[5:10, 10]
    return dU
