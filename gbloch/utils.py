import sys
import numpy as np


def deg2rad(alpha):
    """flip angle in degrees to radians"""
    return np.asarray(alpha) * np.pi / 180


def pulse_amplitude(alpha, TRF):
    """rf amplitude of a rectangular pulse

    Args:
        alpha: flip angle (degrees)
        TRF: pulse duration (s)

    Returns:
        omega1: (rad/s)
    """
    return deg2rad(alpha) / TRF


# progressbar


def progressbar(it, prefix="", size=60, out=sys.stdout):
    """https://stackoverflow.com/questions/3160699/python-progress-bar"""
    count = len(it)

    def show(j):
        x = int(size * j / count)
        print(
            "{}[{}{}] {}/{}".format(prefix, "#" * x, "." * (size - x), j, count),
            end="\r",
            file=out,
            flush=True,
        )

    show(0)
    for i, item in enumerate(it):
        yield item
        show(i + 1)
    print("\n", flush=True, file=out)
