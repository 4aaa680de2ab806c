# Python core imports
import logging
import numpy as np
from . import diff, operator, statevector

LOGGER = logging.getLogger(__name__)


def flatten_sequence(seq, flatten_multi=True):
    """return a flat list of operators"""
    seq = [seq] if isinstance(seq, operator.Operator) else seq

    newseq = []
    for item in seq:
        if isinstance(item, (list, tuple)):
            newseq.extend(flatten_sequence(item, flatten_multi))
        elif flatten_multi and isinstance(item, operator.MultiOperator):
            newseq.extend(flatten_sequence(item.operators))
        elif isinstance(item, operator.Operator):
            newseq.append(item)
        else:
            raise TypeError(f"Invalid operator: {item}")
    return newseq


def combine(sequence, name=None):
    """net propagator of a sequence (MultiOperator)"""
    return operator.MultiOperator(flatten_sequence(sequence), name=name)


def get_adc_times(sequence):
    """return ADC opening times (cf. operator's `duration` keyword)"""
    tim = 0
    times = []
    for op in flatten_sequence(sequence):
        tim = tim + op.duration
        if isinstance(op, operator.Adc):
            times.append(tim)
    return times


def steady_state(sequence, *, order1=None):
    """steady-state magnetization at the start of a periodic sequence

    The fixed point of the net propagator U is the solution of:

        (U - I) m = 0, with m[5] = 1

    and its partial derivatives solve (U - I) dm = -dU m, with dm[5] = 0

    Args:
        sequence: (nested) list of operators, or operator
        order1: partial derivatives (cf. diff.parse_order1)

    Returns:
        Magnetization

    Raises:
        numpy.linalg.LinAlgError if the steady state is not unique
    """
    order1 = diff.parse_order1(order1)
    net = combine(sequence)
    U = net.mat
    A = U - np.eye(6)
    A[5] = [0, 0, 0, 0, 0, 1]
    b = np.zeros(6)
    b[5] = 1
    m = np.linalg.solve(A, b)

    dm = {}
    for alias, dU in net.derive(order1).items():
        rhs = -dU @ m
        rhs[5] = 0
        dm[alias] = np.linalg.solve(A, rhs)
    return statevector.Magnetization(m, dm, order1=order1)


def simulate(sequence, *, init=None, order1=None, tissue=None, adc_time=False):
    """simulate a sequence
        Values are returned at ADC operators

    Parameters:
    ===
        sequence: (nested)-list of operators
            Sequence to simulate.
        init: [None], "equilibrium", Magnetization or 6-value array
            Initial state (default: steady state of the sequence)
        order1: partial derivatives (cf. diff.parse_order1)
        tissue: Tissue object (required for init="equilibrium")
        adc_time: True, [False]
            If True, returns the adc opening times

     Returns
     ===
        [adc_times]: array of float
            Only if adc_time option is True

        signals: (nadc,) complex array
            Simulated signal at ADC times

        [jac]: (nadc x nalias) complex array
            Only if order1 is set. Columns ordered as the parsed `order1`.

    """
    sequence = flatten_sequence(sequence)
    order1 = diff.parse_order1(order1)
    LOGGER.info(
        f"Simulate sequence: num. operators: {len(sequence)},"
        f" partial derivatives: {list(order1)}"
    )

    if not any(isinstance(op, operator.Adc) for op in sequence):
        raise ValueError("Cannot simulate sequence without at least one ADC operator")

    if init is None:
        mag = steady_state(sequence, order1=order1)
    elif isinstance(init, str) and init == "equilibrium":
        if tissue is None:
            raise ValueError("A tissue is required for equilibrium initialization")
        mag = statevector.equilibrium(tissue, order1=order1)
    elif isinstance(init, statevector.Magnetization):
        LOGGER.info(f"Non-default initialization: {init}")
        mag = statevector.Magnetization(init.m, init.dm, order1=init.order1)
        if set(mag.order1) != set(order1):
            raise ValueError(
                f"Initial magnetization derivatives {list(mag.order1)}"
                f" do not match order1: {list(order1)}"
            )
    else:
        LOGGER.info(f"Non-default initialization: {init}")
        dm = {alias: np.zeros(6) for alias in order1}
        mag = statevector.Magnetization(init, dm, order1=order1)

    signals, jac = [], []
    for op in sequence:
        mag = op(mag)
        if isinstance(op, operator.Adc):
            signal, dsignal = op.acquire(mag)
            signals.append(signal)
            jac.append([dsignal[alias] for alias in order1])

    signals = np.asarray(signals)
    outputs = [signals]
    if order1:
        outputs.append(np.asarray(jac).reshape(len(signals), len(order1)))
    if adc_time:
        outputs.insert(0, np.asarray(get_adc_times(sequence)))
    return outputs[0] if len(outputs) == 1 else tuple(outputs)
