import numpy as np

# condition number above which a normalized Fisher matrix is singular
MAX_COND = 1e-3 / np.finfo(float).eps


def fisher_information(J, sigma2=1):
    """Fisher information matrix Re(J^H J) / sigma2 (NaN if singular)"""
    # J.shape: ... x npoint x nparam
    J = np.asarray(J)
    I = 1 / sigma2 * np.einsum("...np,...nq->...pq", J.conj(), J).real

    # unit diagonal: the test does not depend on the parameters' scales
    norm = np.sqrt(np.diagonal(I, axis1=-2, axis2=-1))
    is_null = np.any(norm == 0, axis=-1)
    norm = np.where(norm == 0, 1, norm)
    scaled = I / norm[..., :, np.newaxis] / norm[..., np.newaxis, :]

    is_singular = is_null | (np.linalg.cond(scaled) > MAX_COND)
    I[is_singular] = np.nan
    return I


def crlb(J, *, W=None, sigma2=1, log=False):
    """Cramer-Rao lower bound cost function"""
    lb = np.linalg.inv(fisher_information(J, sigma2=sigma2))

    if W is not None:  # apply weights
        W = np.asarray(W)[..., np.newaxis]
    else:
        W = 1
    cost = np.trace(W * lb, axis1=-2, axis2=-1)
    return cost if not log else np.log10(cost)


def crlb_split(J, *, W=None, sigma2=1, log=False):
    """CRB for each variables in Jacobian"""
    lb = np.linalg.inv(fisher_information(J, sigma2=sigma2))

    idiag = np.arange(lb.shape[-1])
    crb = lb[..., idiag, idiag]
    if W is not None:  # apply weights
        crb = crb * np.asarray(W)
    if log:
        crb = np.log10(crb)
    return np.moveaxis(crb, -1, 0)


def crb(J, names, *, sigma2=1):
    """CRB of each named parameter (columns of the Jacobian)"""
    names = list(names)
    if np.shape(J)[-1] != len(names):
        raise ValueError(
            f"Jacobian has {np.shape(J)[-1]} columns, but {len(names)} names were given"
        )
    values = crlb_split(J, sigma2=sigma2)
    return {name: values[i] for i, name in enumerate(names)}
