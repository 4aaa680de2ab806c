"""Semi-solid pool lineshapes and Green's functions"""

import numpy as np
from scipy import integrate, interpolate

NAX = np.newaxis

"""
# Green's functions (time domain, kappa = t / T2s)
G = greens_superlorentzian(kappa)

# absorption lineshape (frequency domain) and Graham's saturation rate
g = absorption_lineshape(T2s, "super-lorentzian", offres=0)
W = saturation_rate(omega1, g)

"""

#
# Green's functions


def greens_gaussian(kappa):
    """Green's function of a Gaussian lineshape"""
    kappa = np.asarray(kappa, dtype=float)
    return np.exp(-(kappa**2) / 2)


def greens_lorentzian(kappa):
    """Green's function of a Lorentzian lineshape"""
    kappa = np.asarray(kappa, dtype=float)
    return np.exp(-np.abs(kappa))


def greens_superlorentzian(kappa):
    """Green's function of a super-Lorentzian lineshape

        G(kappa) = int_0^1 exp(-kappa^2 (3 u^2 - 1)^2 / 8) du

    Args:
        kappa: unitless time t / T2s (scalar or array)
    """
    kappa = np.asarray(kappa, dtype=float)
    kappa2 = kappa**2 / 8
    G, _ = integrate.quad_vec(
        lambda u: np.exp(-kappa2 * (3 * u**2 - 1) ** 2), 0, 1, epsabs=1e-10
    )
    return G


GREENS = {
    "gaussian": greens_gaussian,
    "lorentzian": greens_lorentzian,
    "super-lorentzian": greens_superlorentzian,
}


def get_greens(lineshape):
    """return Green's function given its name (or the function itself)"""
    if callable(lineshape):
        return lineshape
    elif not lineshape in GREENS:
        raise ValueError(f"Unknown lineshape: {lineshape}")
    return GREENS[lineshape]


#
# absorption lineshapes


def saturation_rate(omega1, G):
    """Graham's saturation rate of the semi-solid pool

    Validity domain: pulse's BW << bound pool BW

    Args
        omega1: rf amplitude (rad/s)
        G: absorption lineshape value at the pulse frequency (s)

    Returns:
        W: saturation rate (1/s)

    > Graham SJ, Henkelman RM:
      Understanding pulsed magnetization transfer.
      Journal of Magnetic Resonance Imaging 1997; 7:903–912.

    """
    return np.pi * np.asarray(omega1) ** 2 * G


def absorption_lineshape(T2, lineshape, offres=0):
    """get absorption lineshape

    Args:
        T2: transverse relaxation (s)
        offres: off-resonance frequency (Hz)
        lineshape: absorption lineshape
            'gaussian', 'lorentzian', 'super-lorentzian'
    Returns
        G: absorption lineshape (s), normalized over angular frequency

    Refs.
    > Morrison C, Stanisz G, Henkelman RM:
      Modeling Magnetization Transfer for Biological-like Systems
      Using a Semi-solid Pool with a Super-Lorentzian Lineshape and Dipolar Reservoir.
      Journal of Magnetic Resonance, Series B 1995; 108:103–113.
    > Gloor M, Scheffler K, Bieri O:
      Quantitative magnetization transfer imaging using balanced SSFP.
      Magnetic Resonance in Medicine 2008; 60:691–700.

    """
    offres = np.asarray(offres, dtype=float)
    x = 2 * np.pi * T2 * offres

    if lineshape == "gaussian":
        G = T2 / (np.pi * 2) ** 0.5 * np.exp(-(x**2) / 2)

    elif lineshape == "lorentzian":
        G = T2 / np.pi * 1 / (1 + x**2)

    elif lineshape == "super-lorentzian":
        u = np.linspace(0, 1, 1000)
        G = np.zeros(offres.shape)
        # the lineshape is singular at resonance: interpolate below 1 kHz
        valid = np.abs(offres) >= 1e3
        g = (
            1
            / np.abs(3 * u**2 - 1)
            * np.exp(-2 * (x[valid][..., NAX] / (3 * u**2 - 1)) ** 2)
        )
        G[valid] = T2 * (2 / np.pi) ** 0.5 * integrate.trapezoid(g, u, axis=-1)
        # extrapolated data points
        bounds = 2 * np.pi * T2 * 1e3 * np.array([1, 3, 5, 7, 9, 11])
        gref = (
            1
            / np.abs(3 * u**2 - 1)
            * np.exp(-2 * (bounds[..., NAX] / (3 * u**2 - 1)) ** 2)
        )
        Gref = T2 * (2 / np.pi) ** 0.5 * integrate.trapezoid(gref, u, axis=-1)
        spline = interpolate.CubicSpline(
            np.r_[-bounds[::-1], bounds], np.r_[Gref[::-1], Gref], bc_type="natural"
        )
        G[~valid] = spline(x[~valid])

    else:
        raise ValueError(f"Unknown lineshape: {lineshape}")

    return G

