import pytest
import numpy as np
from gbloch import diff, statevector, tissue


def test_parse_order1():
    assert diff.parse_order1(None) == {}
    assert diff.parse_order1(False) == {}

    parsed = diff.parse_order1(True)
    assert list(parsed) == list(tissue.PARAMETERS)
    assert parsed["R1f"] == {"R1f": 1.0}

    assert diff.parse_order1("m0s") == {"m0s": {"m0s": 1.0}}
    assert diff.parse_order1(["m0s", "T2s"]) == {
        "m0s": {"m0s": 1.0},
        "T2s": {"T2s": 1.0},
    }

    # aliases and combinations
    parsed = diff.parse_order1({"f": "m0s", "R1": {"R1f": 1, "R1s": 1}})
    assert parsed == {"f": {"m0s": 1.0}, "R1": {"R1f": 1.0, "R1s": 1.0}}
    parsed = diff.parse_order1(["M0", {"R1": {"R1f": 1, "R1s": 1}}])
    assert list(parsed) == ["M0", "R1"]

    # idempotent
    assert diff.parse_order1(parsed) == parsed

    with pytest.raises(ValueError):
        diff.parse_order1("foobar")

    with pytest.raises(ValueError):
        diff.parse_order1({"R1": {"R1f": 1, "foobar": 1}})


def test_magnetization():
    mag = statevector.Magnetization()
    assert np.allclose(mag.m, [0, 0, 1, 0, 0, 1])
    assert mag.order1 == {}
    assert mag.dm == {}
    assert mag.signal == 0

    mag = statevector.Magnetization([1, 2, 3, 4, 5, 1])
    assert (mag.xf, mag.yf, mag.zf, mag.xs, mag.zs) == (1, 2, 3, 4, 5)
    assert mag.signal == 1 + 2j
    assert repr(mag).startswith("Magnetization(")

    mag = statevector.Magnetization(
        [1, 2, 3, 4, 5, 1], {"m0s": [1, 1, 0, 0, 0, 0]}, order1="m0s"
    )
    assert mag.dsignal == {"m0s": 1 + 1j}

    # copy is independent
    copy = mag.copy()
    copy.m[0] = 0
    copy.dm["m0s"][0] = 0
    assert mag.m[0] == 1
    assert mag.dm["m0s"][0] == 1

    with pytest.raises(ValueError):
        statevector.Magnetization([0, 0, 1])

    with pytest.raises(ValueError):
        statevector.Magnetization([0, 0, 1, 0, 0, 1], order1="m0s")


def test_equilibrium():
    t = tissue.WHITE_MATTER.copy(M0=2)
    mag = statevector.equilibrium(t, order1=["M0", "m0s", "R1f"])
    assert np.allclose(mag.m, [0, 0, 2 * t.m0f, 0, 2 * t.m0s, 1])
    assert np.allclose(mag.dm["M0"], [0, 0, t.m0f, 0, t.m0s, 0])
    assert np.allclose(mag.dm["m0s"], [0, 0, -2, 0, 2, 0])
    assert np.allclose(mag.dm["R1f"], 0)
