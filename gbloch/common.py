"""shared helpers"""

import os
import logging
import numpy as np

# get environment variable with LOG_LEVEL
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "WARN").upper())

LOGGER = logging.getLogger(__name__)


def isscalar(value):
    """replace np.isscalar so that np.array(1) is scalar"""
    try:
        len(value) > 0
        return False
    except TypeError:
        return True


def asfloat(value, name):
    """convert scalar parameter to float"""
    if not isscalar(value):
        raise ValueError(f"Parameter `{name}` must be a scalar, not {value}")
    value = float(value)
    if not np.isfinite(value):
        raise ValueError(f"Parameter `{name}` must be finite, not {value}")
    return value


#
# representation


def repr_operator(cls, names, values, fmts=None):
    fmts = fmts or [""] * len(names)
    args = []
    for name, value, fmt in zip(names, values, fmts):
        if value is None:
            continue
        else:
            value = repr_value(value, fmt)
        if not name:
            args.append(value)
        else:
            args.append(f"{name}={value}")

    return f'{cls}({", ".join(args)})'


def repr_value(value, fmt):
    if isscalar(value):
        return f"{value:{fmt}}"
    else:
        shape = np.shape(value)
        return f'({"x".join(map(str, shape))})'
