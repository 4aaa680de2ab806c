"""Linearized generalized Bloch model of the semi-solid pool

During a rectangular RF pulse, the semi-solid pool's longitudinal
magnetization follows the generalized Bloch model:

    dzs/dt = -w1^2 int_0^t G((t - s) / T2s) zs(s) ds

which is approximated by the linear system:

    dxs/dt = -R2sl xs + w1 zs
    dzs/dt = -w1 xs

R2sl is chosen such that both models yield the same zs at the end of the pulse.
In unitless time (tau = TRF / T2s), R2sl * T2s only depends on tau and
the flip angle, and is precomputed on a grid.

> Assländer J, Gultekin C, Flassbeck S, Glaser SJ, Sodickson DK:
  Generalized Bloch model: A theory for pulsed magnetization transfer.
  Magn Reson Med 2022; 87:2003–2017.

"""

import functools
import logging
import numpy as np
from scipy import interpolate, optimize
from . import lineshape, utils

LOGGER = logging.getLogger(__name__)

# grid of unitless relaxation rates used to bracket the R2sl root
RGRID = np.r_[0, np.geomspace(1e-4, 1e4, 161)]


def generalized_bloch_zs(tau, alpha, *, greens="super-lorentzian", nstep=None):
    """semi-solid zs at the end of a rectangular pulse (generalized Bloch model)

    Relaxation and exchange are neglected during the pulse.

    Args:
        tau: unitless pulse duration TRF / T2s
        alpha: flip angle(s) (rad)
        greens: Green's function (callable or lineshape name)
        nstep: number of time steps (default: ~10 steps per T2s, within [200, 4000])

    Returns:
        zs: (same shape as alpha) longitudinal magnetization (zs(0) = 1)
    """
    if tau <= 0:
        raise ValueError(f"Pulse duration must be > 0, not {tau}")
    greens = lineshape.get_greens(greens)
    alpha = np.asarray(alpha, dtype=float)
    shape = alpha.shape
    alpha = alpha.ravel()

    if nstep is None:
        nstep = int(np.clip(np.ceil(tau / 0.1), 200, 4000))
    h = tau / nstep
    G = np.asarray(greens(h * np.arange(nstep + 1)), dtype=float)
    a2 = (alpha / tau) ** 2

    # implicit trapezoidal scheme on the memory integral
    z = np.ones((alpha.size, nstep + 1))
    integral = np.zeros(alpha.size)
    c = 1 + a2 * h**2 * G[0] / 4
    for n in range(nstep):
        partial = h * (0.5 * G[n + 1] * z[:, 0] + z[:, 1 : n + 1] @ G[n:0:-1])
        z[:, n + 1] = (z[:, n] - h * a2 / 2 * (integral + partial)) / c
        integral = partial + 0.5 * h * G[0] * z[:, n + 1]

    return z[:, -1].reshape(shape)


def linear_zs(r, tau, alpha):
    """semi-solid zs at the end of a rectangular pulse (linear model)

    Args:
        r: unitless relaxation rate R2sl * T2s (scalar or array)
        tau: unitless pulse duration TRF / T2s
        alpha: flip angle (rad)

    """
    r = np.asarray(r, dtype=float)
    a = alpha / tau
    s = np.sqrt((r**2 - 4 * a**2).astype(complex))
    critical = np.abs(s) < 1e-8 * (r + a)
    s = np.where(critical, 1e-8 * (r + a), s)
    lambda1 = (-r + s) / 2
    lambda2 = (-r - s) / 2
    zs = (
        (r + lambda1) / s * np.exp(lambda1 * tau)
        - (r + lambda2) / s * np.exp(lambda2 * tau)
    ).real
    # critically damped
    zs_crit = np.exp(-r * tau / 2) * (1 + r * tau / 2)
    return np.where(critical, zs_crit, zs)


def fit_R2sl(zs, tau, alpha):
    """find r = R2sl * T2s such that linear_zs(r, tau, alpha) == zs"""

    def func(r):
        return float(linear_zs(r, tau, alpha) - zs)

    values = linear_zs(RGRID, tau, alpha) - zs
    if values[0] == 0:
        return 0.0
    change = np.flatnonzero(np.sign(values[:-1]) != np.sign(values[1:]))
    if not change.size:
        LOGGER.warning(
            f"Could not bracket R2sl (tau={tau:.2f}, alpha={alpha:.3f}),"
            " minimizing the mismatch around the closest grid value"
        )
        i = np.argmin(np.abs(values))
        bounds = RGRID[max(i - 1, 0)], RGRID[min(i + 1, RGRID.size - 1)]
        res = optimize.minimize_scalar(
            lambda r: abs(func(r)),
            bounds=bounds,
            method="bounded",
            options={"xatol": 1e-12 * bounds[1]},
        )
        if abs(func(res.x)) < abs(values[i]):
            return float(res.x)
        return float(RGRID[i])
    i = change[0]
    return optimize.brentq(func, RGRID[i], RGRID[i + 1], xtol=1e-12)


class R2slTable:
    """Lookup table of R2sl as function of pulse duration, flip angle and T2s"""

    def __init__(self, tau, alpha, values):
        """Init table

        Args:
            tau: (ntau,) increasing unitless pulse durations TRF / T2s
            alpha: (nalpha,) increasing flip angles (rad)
            values: (ntau x nalpha) unitless relaxation rates R2sl * T2s
        """
        self.tau = np.asarray(tau, dtype=float)
        self.alpha = np.asarray(alpha, dtype=float)
        self.values = np.asarray(values, dtype=float)
        if self.values.shape != (self.tau.size, self.alpha.size):
            raise ValueError(
                f"Incompatible table shape: {self.values.shape},"
                f" expected {(self.tau.size, self.alpha.size)}"
            )
        self._spline = interpolate.RectBivariateSpline(
            np.log(self.tau), self.alpha, self.values
        )

    def __repr__(self):
        return (
            f"R2slTable(tau=[{self.tau[0]:.1f}, {self.tau[-1]:.1f}],"
            f" alpha=[{self.alpha[0]:.3f}, {self.alpha[-1]:.3f}])"
        )

    def _clip(self, TRF, alpha, T2s):
        logtau = np.log(TRF / T2s)
        bounds_tau = np.log(self.tau[[0, -1]])
        bounds_alpha = self.alpha[[0, -1]]
        inside_tau = bounds_tau[0] <= logtau <= bounds_tau[1]
        inside_alpha = bounds_alpha[0] <= alpha <= bounds_alpha[1]
        if not (inside_tau and inside_alpha):
            LOGGER.warning(
                f"R2sl lookup outside of table range: TRF/T2s={TRF / T2s:.2f},"
                f" alpha={alpha:.3f} ({self})"
            )
        logtau = np.clip(logtau, *bounds_tau)
        alpha = np.clip(alpha, *bounds_alpha)
        return logtau, alpha, inside_tau, inside_alpha

    def __call__(self, TRF, alpha, T2s):
        """R2sl (1/s) given pulse duration TRF (s), flip angle alpha (rad) and T2s (s)"""
        logtau, alpha, _, _ = self._clip(TRF, alpha, T2s)
        return float(self._spline.ev(logtau, alpha)) / T2s

    def gradient(self, TRF, alpha, T2s):
        """partial derivatives of R2sl w/r to T2s and alpha"""
        logtau, alpha, inside_tau, inside_alpha = self._clip(TRF, alpha, T2s)
        value = float(self._spline.ev(logtau, alpha))
        dlogtau = float(self._spline.ev(logtau, alpha, dx=1)) if inside_tau else 0.0
        dalpha = float(self._spline.ev(logtau, alpha, dy=1)) if inside_alpha else 0.0
        # R2sl = f(log(TRF / T2s), alpha) / T2s
        d_T2s = -(value + dlogtau) / T2s**2
        d_alpha = dalpha / T2s
        return d_T2s, d_alpha


@functools.lru_cache(maxsize=8)
def precompute_R2sl(
    TRF_min=100e-6,
    TRF_max=3e-3,
    T2s_min=5e-6,
    T2s_max=20e-6,
    alpha_max=np.pi,
    B1_max=1.5,
    *,
    ntau=24,
    nalpha=24,
    greens="super-lorentzian",
    disp=False,
):
    """Precompute R2sl lookup table

    Args:
        TRF_min, TRF_max: range of pulse durations (s)
        T2s_min, T2s_max: range of semi-solid T2 (s)
        alpha_max: maximum nominal flip angle (rad)
        B1_max: maximum B1 scaling
        ntau, nalpha: grid sizes
        greens: Green's function of the semi-solid lineshape
        disp: display progress bar

    Returns:
        R2slTable
    """
    if not (0 < TRF_min < TRF_max) or not (0 < T2s_min < T2s_max):
        raise ValueError("Invalid TRF or T2s range")
    elif min(ntau, nalpha) < 4:
        raise ValueError("At least 4 grid points are needed in each dimension")

    tau = np.geomspace(TRF_min / T2s_max, TRF_max / T2s_min, ntau)
    alpha = np.linspace(0, alpha_max * B1_max, nalpha)
    alpha[0] = alpha[-1] * 1e-3  # small angle limit
    LOGGER.info(
        f"Precompute R2sl: tau=[{tau[0]:.1f}, {tau[-1]:.1f}],"
        f" alpha=[{alpha[0]:.3f}, {alpha[-1]:.3f}], grid={ntau}x{nalpha}"
    )

    values = np.empty((ntau, nalpha))
    items = list(enumerate(tau))
    if disp:
        items = utils.progressbar(items, "Precomputing R2sl: ")
    for i, tau_ in items:
        zs = generalized_bloch_zs(tau_, alpha, greens=greens)
        values[i] = [fit_R2sl(zs_, tau_, alpha_) for zs_, alpha_ in zip(zs, alpha)]

    return R2slTable(tau, alpha, values)
