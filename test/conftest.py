import pytest
from gbloch import r2sl


@pytest.fixture(scope="session")
def table():
    """small R2sl table (TRF in [0.1, 1] ms, T2s in [8, 15] us)"""
    return r2sl.precompute_R2sl(
        TRF_min=1e-4, TRF_max=1e-3, T2s_min=8e-6, T2s_max=15e-6, ntau=6, nalpha=6
    )
