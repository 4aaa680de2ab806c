"""Partial derivatives bookkeeping"""

from .tissue import PARAMETERS


def parse_order1(order1, parameters=PARAMETERS):
    """parse 1st order partial derivatives

    Arguments:
        order1:
            True/False: compute all or none of the partial derivatives
            str <parameter name> (or list of): compute selected partial derivatives
            dict of str {<alias1>: <param1>, ...}
                rename parameters and compute selected partial derivatives
            dict of dict {<alias>: {<param1>: <coeff1>, ...}}
                compute combined partial derivatives, using the coefficients
                of the parameters' derivatives (eg. tied parameters)

    Returns:
        {<alias>: {<param>: <coeff>, ...}, ...}
    """
    if not order1:
        return {}
    elif order1 is True:
        order1 = list(parameters)
    elif isinstance(order1, str):
        order1 = [order1]

    if isinstance(order1, dict):
        items = list(order1.items())
    else:
        items = []
        for item in order1:
            if isinstance(item, dict):
                items.extend(item.items())
            else:
                items.append((item, item))

    parsed = {}
    for alias, target in items:
        if isinstance(target, str):
            target = {target: 1}
        unknown = set(target) - set(parameters)
        if unknown:
            raise ValueError(f"Unknown parameter(s): {unknown}")
        parsed[alias] = {param: float(coeff) for param, coeff in target.items()}
    return parsed
