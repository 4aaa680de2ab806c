"""base operator classes"""

import abc
import numpy as np
from . import statevector, diff
from .tissue import PARAMETERS


class Operator(abc.ABC):
    """Base operator class

    An operator is an affine 6x6 propagator of the magnetization vector.
    This class needs to be inherited, with the `mat` property overridden,
    and `_derive` for parameter-dependent operators.

    Pre-implemented methods:
        ```Op1 @ Op2```: returns a MultiOperator object applying Op2, then Op1
        ```Op(magnetization)```: apply operator to the magnetization vector
    """

    def __init__(self, *, name=None, duration=None):
        """Create a generic operator

        Args:
            name: set operator name (defaults to the class name)
            duration: set operator duration (default 0)
                Use it if you need to calculate the sequence timing.

        """
        if duration is None:
            duration = 0
        elif np.any(np.asarray(duration) < 0):
            raise ValueError("Cannot have duration < 0")
        self.duration = duration
        self.name = name if name else type(self).__name__
        self._dmats = {}

    @property
    @abc.abstractmethod
    def mat(self):
        """6x6 propagator: TO IMPLEMENT"""

    def _derive(self, param):
        """partial derivative of the propagator (parameter-independent operators)"""
        return np.zeros((6, 6))

    def dmat(self, param):
        """partial derivative of the propagator w/r to tissue parameter `param`"""
        if not param in PARAMETERS:
            raise ValueError(f"Unknown parameter: {param}")
        if not param in self._dmats:
            self._dmats[param] = self._derive(param)
        return self._dmats[param]

    def derive(self, order1):
        """combined partial derivatives of the propagator

        Args:
            order1: cf. diff.parse_order1
        Returns:
            dict {<alias>: 6x6 array}
        """
        order1 = diff.parse_order1(order1)
        return {
            alias: sum(coeff * self.dmat(param) for param, coeff in params.items())
            for alias, params in order1.items()
        }

    def __repr__(self):
        """show operator name"""
        return self.name

    def __matmul__(self, other):
        """return MultiOperator: apply `other`, then `self`"""
        if not isinstance(other, Operator):
            return NotImplemented
        return MultiOperator([other, self])

    def __call__(self, mag):
        """apply operator to Magnetization object"""
        if not isinstance(mag, statevector.Magnetization):
            raise TypeError(f"Not a Magnetization: {mag}")
        mat = self.mat
        dmats = self.derive(mag.order1)
        m = mat @ mag.m
        dm = {alias: dmats[alias] @ mag.m + mat @ mag.dm[alias] for alias in mag.order1}
        return statevector.Magnetization(m, dm, order1=mag.order1)


#
# MultiOperator
class MultiOperator(Operator):
    """An operator made of a sequence of operators"""

    def __init__(self, operators=None, *, name=None, duration=None):
        """Create an operator from a sequence of operators

        Args:
            operators: seq
                Any sequence-type object containing operators, in order of application
            name: see Operator
                Default: "Op1.name | Op2.name | ..."
            cf. Operator for remaining keyword arguments

        """
        operators = [] if not operators else list(operators)

        self.operators = []
        for op in operators:
            self.append(op)

        if not name:  # default name
            name = " | ".join([op.name for op in self.operators])
        if duration is None:  # use sum of durations
            duration = sum(op.duration for op in self.operators)

        # init parent class
        super().__init__(name=name, duration=duration)

    @property
    def mat(self):
        mat = np.eye(6)
        for op in self.operators:
            mat = op.mat @ mat
        return mat

    def _derive(self, param):
        """product rule"""
        mat, dmat = np.eye(6), np.zeros((6, 6))
        for op in self.operators:
            dmat = op.mat @ dmat + op.dmat(param) @ mat
            mat = op.mat @ mat
        return dmat

    def __iter__(self):
        """iterate through object"""
        return iter(self.operators)

    def __len__(self):
        """sequence's length"""
        return len(self.operators)

    def __getitem__(self, i):
        """get i-th item"""
        return self.operators[i]

    def append(self, op):
        """add a new operator to the existing list"""
        if not isinstance(op, Operator):
            raise TypeError("Invalid operator: %s" % str(op))

        if isinstance(op, MultiOperator):
            # extend sequence if already a MultiOperator
            self.operators.extend(op.operators)
        else:
            # append operator to sequence
            self.operators.append(op)
        self._dmats = {}


#
# Constant operators


class Identity(Operator):
    """Identity operator: does nothing"""

    @property
    def mat(self):
        return np.eye(6)


class Spoiler(Operator):
    """Perfect spoiler: destroy transverse magnetization"""

    @property
    def mat(self):
        return np.diag([0.0, 0.0, 1.0, 0.0, 1.0, 1.0])


# Spoiler instance
SPOILER = Spoiler(name="Spoiler")


class Adc(Identity):
    """Acquisition operator: records the free pool's transverse magnetization"""

    def __init__(self, *, phase=0, name=None, duration=None):
        """Init ADC

        Args:
            phase: receiver phase (degrees)
        """
        self.phase = phase
        if name is None:
            name = f"ADC(phase={phase})" if phase else "ADC"
        super().__init__(name=name, duration=duration)

    def acquire(self, mag):
        """return signal and its partial derivatives"""
        modulation = np.exp(1j * self.phase * np.pi / 180)
        signal = mag.signal * modulation
        dsignal = {alias: value * modulation for alias, value in mag.dsignal.items()}
        return signal, dsignal


# ADC instance
ADC = Adc()
