""" test operator module """

import logging
import pytest
import numpy as np
from gbloch import operator, evolution, transition, statevector, tissue

E, T = evolution.E, transition.T
TISSUE = tissue.WHITE_MATTER
SINGLE_POOL = TISSUE.copy(m0s=0)


def test_operator_class():
    op = operator.Identity()
    assert op.name == "Identity"
    assert op.duration == 0
    assert np.allclose(op.mat, np.eye(6))
    assert np.allclose(op.dmat("R1f"), 0)

    op = operator.Identity(name="Foobar", duration=1)
    assert op.name == "Foobar"
    assert op.duration == 1
    assert repr(op) == "Foobar"

    with pytest.raises(ValueError):
        operator.Identity(duration=-1)

    with pytest.raises(ValueError):
        op.dmat("foobar")

    with pytest.raises(TypeError):
        # abstract class
        operator.Operator()

    with pytest.raises(TypeError):
        op([0, 0, 1, 0, 0, 1])


def test_multi_operator():
    op1 = E(10e-3, TISSUE, name="op1", duration=True)
    op2 = T(90, 1e-3, TISSUE, model="graham", name="op2", duration=True)
    op12 = op1 @ op2
    assert isinstance(op12, operator.MultiOperator)
    assert op12.operators == [op2, op1]
    assert op12.name == "op2 | op1"
    assert np.isclose(op12.duration, 11e-3)
    assert np.allclose(op12.mat, op1.mat @ op2.mat)

    # nested
    op3 = operator.SPOILER
    op123 = op3 @ op12
    assert len(op123) == 3
    assert list(op123) == [op2, op1, op3]
    assert op123[2] is op3

    with pytest.raises(TypeError):
        operator.MultiOperator([op1, "foobar"])

    # product rule
    dmat = op12.dmat("R1f")
    assert np.allclose(dmat, op1.mat @ op2.dmat("R1f") + op1.dmat("R1f") @ op2.mat)

    # combined derivatives
    dmats = op12.derive({"R1": {"R1f": 1, "R1s": 1}})
    assert np.allclose(dmats["R1"], op12.dmat("R1f") + op12.dmat("R1s"))


def test_spoiler_adc():
    mag = statevector.Magnetization([0.5, 0.2, 0.3, 0.1, 0.1, 1])
    spoiled = operator.SPOILER(mag)
    assert np.allclose(spoiled.m, [0, 0, 0.3, 0, 0.1, 1])

    assert np.allclose(operator.ADC(mag).m, mag.m)
    signal, _ = operator.ADC.acquire(mag)
    assert np.isclose(signal, 0.5 + 0.2j)

    adc = operator.Adc(phase=-90)
    assert adc.name == "ADC(phase=-90)"
    signal, _ = adc.acquire(mag)
    assert np.isclose(signal, (0.5 + 0.2j) * -1j)


def test_E_class():
    op = E(0, TISSUE)
    assert np.allclose(op.mat, np.eye(6))
    assert op.duration == 0

    op = E(10e-3, TISSUE, duration=True)
    assert op.duration == 10e-3
    assert op.name == "E(tau=10.0)"

    # transverse decay
    mag = statevector.Magnetization([1, 0, 0, 0, 0, 1])
    mag = E(10e-3, TISSUE.copy(m0s=0, R1f=0))(mag)
    assert np.isclose(mag.xf, np.exp(-10e-3 * TISSUE.R2f))

    # precession
    mag = statevector.Magnetization([1, 0, 0, 0, 0, 1])
    mag = E(1e-3, SINGLE_POOL.copy(omega0=np.pi / 2 / 1e-3, R2f=0, R1f=0))(mag)
    assert np.allclose(mag.m, [0, 1, 0, 0, 0, 1])

    # equilibrium
    mag = statevector.equilibrium(TISSUE)
    assert np.allclose(E(1, TISSUE)(mag).m, mag.m)

    with pytest.raises(ValueError):
        E(-1, TISSUE)


def test_T_class(table):
    # nearly instantaneous pulse
    mag = statevector.equilibrium(SINGLE_POOL)
    mag = T(90, 1e-6, SINGLE_POOL, model="graham")(mag)
    assert np.allclose(mag.m, [0, SINGLE_POOL.m0f, 0, 0, 0, 1], atol=1e-3)

    mag = statevector.equilibrium(SINGLE_POOL)
    mag = T(180, 1e-6, SINGLE_POOL.copy(B1=0.5), model="graham")(mag)
    assert np.allclose(mag.m, [0, SINGLE_POOL.m0f, 0, 0, 0, 1], atol=1e-3)

    # semi-solid pool
    op = T(90, 1e-3, TISSUE, table=table, duration=True)
    assert op.duration == 1e-3
    assert op.R2s == table(1e-3, np.pi / 2, TISSUE.T2s)
    mag = op(statevector.equilibrium(TISSUE))
    assert 0 < mag.zs < TISSUE.m0s

    op = T(90, 1e-3, TISSUE, model="graham")
    assert op.R2s is None
    assert op.W > 0
    mag = op(statevector.equilibrium(TISSUE))
    assert 0 < mag.zs < TISSUE.m0s

    # no rf
    op = T(0, 1e-3, TISSUE)
    assert op.R2s is None
    assert np.allclose(op.mat, E(1e-3, TISSUE).mat)

    with pytest.raises(ValueError):
        T(90, 0, TISSUE, table=table)

    with pytest.raises(ValueError):
        T(90, 1e-3, TISSUE, model="foobar")


def check_derivatives(make_op, tissue_, params=tissue.PARAMETERS):
    op = make_op(tissue_)
    for param in params:
        step = 1e-3 if tissue_[param] == 0 else 1e-5 * tissue_[param]
        matp = make_op(tissue_.copy(**{param: tissue_[param] + step})).mat
        matm = make_op(tissue_.copy(**{param: tissue_[param] - step})).mat
        fd = (matp - matm) / 2 / step
        atol = 1e-5 * np.abs(fd).max() + 1e-9
        assert np.allclose(op.dmat(param), fd, rtol=1e-4, atol=atol), param


def test_E_derivatives():
    check_derivatives(lambda t: E(20e-3, t), TISSUE.copy(omega0=30))


def test_T_derivatives(table):
    t = TISSUE.copy(B1=0.9)
    check_derivatives(lambda t: T(90, 5e-4, t, table=table), t)
    check_derivatives(lambda t: T(90, 5e-4, t, model="graham"), t)


def test_T_negative_angle(table, caplog):
    with caplog.at_level(logging.WARNING):
        pos = T(90, 5e-4, TISSUE, table=table)
        neg = T(-90, 5e-4, TISSUE, table=table)
        assert np.isclose(neg.R2s, pos.R2s)
        # rotation in the other direction: xf, yf and xs change sign
        S = np.diag([-1.0, -1.0, 1.0, -1.0, 1.0, 1.0])
        assert np.allclose(neg.mat, S @ pos.mat @ S)
        assert np.allclose(neg.dmat("B1"), S @ pos.dmat("B1") @ S)
    assert not "outside of table range" in caplog.text

    mag = statevector.equilibrium(TISSUE)
    assert np.isclose(neg(mag).zs, pos(mag).zs)
    assert np.isclose(neg(mag).m[1], -pos(mag).m[1])

    t = TISSUE.copy(B1=0.9)
    check_derivatives(lambda t: T(-90, 5e-4, t, table=table), t, ["B1", "T2s"])


def test_operator_call():
    t = TISSUE.copy(B1=0.9)
    order1 = ["M0", "m0s", "R1f", "B1"]

    def apply(t, order1=None):
        mag = statevector.equilibrium(t, order1=order1)
        seq = [T(30, 5e-4, t, model="graham"), E(5e-3, t)]
        for op in seq:
            mag = op(mag)
        return mag

    mag = apply(t, order1)
    for param in order1:
        step = 1e-5 * t[param]
        mp = apply(t.copy(**{param: t[param] + step}))
        mm = apply(t.copy(**{param: t[param] - step}))
        fd = (mp.m - mm.m) / 2 / step
        assert np.allclose(mag.dm[param], fd, rtol=1e-4, atol=1e-7), param
