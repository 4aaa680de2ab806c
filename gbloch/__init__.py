"""Two-pool magnetization transfer library (generalized Bloch model)

    Implemented Operators:
        * Operator: base operator class (6x6 affine propagator)

        * MultiOperator: an operator made of a sequence of operators

        * ADC / Adc(phase): Acquire signal. Required by `simulate`

        * SPOILER: perfect spoiler, sets transverse magnetization to 0

        * T(alpha, TRF, tissue): rectangular RF-pulse operator

        * E(tau, tissue): relaxation / exchange / precession operator

        * Magnetization: magnetization vector and its partial derivatives
            [xf, yf, zf, xs, zs, 1]


    Making a sequence
    ===
        Just put them in a list.

        Example:
            tissue = WHITE_MATTER
            spgr = [T(15, 1e-3, tissue), ADC, E(14e-3, tissue), SPOILER]

            # simulate steady-state signal and its derivative w/r to m0s
            signal, jac = simulate(spgr, order1="m0s")

    Functions:
    ===
        * simulate(sequence): sequence simulation

        * steady_state(sequence): steady-state magnetization

        * precompute_R2sl(...): R2sl lookup table of the generalized Bloch model

        * crlb, crlb_split, crb: Cramer-Rao bounds


    Notes
    ===
        Units: s, 1/s, rad/s; flip angles in degrees.
        Set the `LOG_LEVEL` environment variable to change verbosity.


    References
    ===
    * Assländer et al., 2022, Generalized Bloch model: A theory for pulsed
        magnetization transfer.
    * Graham & Henkelman, 1997, Understanding pulsed magnetization transfer.

"""

from .version import __version__
from .tissue import Tissue, WHITE_MATTER, PARAMETERS
from .operator import Operator, MultiOperator, Spoiler, SPOILER, Adc, ADC
from .evolution import E
from .transition import T
from .statevector import Magnetization, equilibrium
from .r2sl import R2slTable, precompute_R2sl
from .functions import simulate, steady_state, combine, get_adc_times
from .stats import crlb, crlb_split, crb
from . import mapping
