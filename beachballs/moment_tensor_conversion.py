"""
moment_tensor_conversion.py
***************************

Conversions between moment tensor descriptions: spherical and cartesian
components, fault normal and slip vectors, strike/dip/rake, principal axes
and eigenvalue based source descriptors.

The function naming is OriginalVariables_NewVariables

The coordinate system is North (X), East (Y), Down (Z). Angles are in
radians unless a function says otherwise.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np

from . import vector
from .errors import TensorInputError

DEFAULT_UNITS = "N-m"
# log10 M0 offset for moment magnitude with M0 in N-m (IASPEI standard)
MW_CONSTANT = 9.1

_TWO_PI = 2.0 * math.pi


def zero_to_two_pi(angle: float) -> float:
    """
    Wrap an angle into the range [0, 2*pi).
    """
    wrapped = math.fmod(angle, _TWO_PI)
    if wrapped < 0:
        wrapped += _TWO_PI
    # fmod of a tiny negative angle can round up to exactly 2*pi
    return 0.0 if wrapped >= _TWO_PI else wrapped


def RTP_NED(mrr: float, mtt: float, mpp: float,
            mrt: float, mrp: float, mtp: float) -> np.ndarray:
    """
    Convert the six spherical (r=Up, t=South, p=East) components to the
    symmetric 3x3 moment tensor in North, East, Down coordinates.

    Args
        mrr, mtt, mpp, mrt, mrp, mtp: independent spherical components

    Returns
        numpy.array: 3x3 Moment Tensor (NED)
    """
    mxx = mtt
    myy = mpp
    mzz = mrr
    mxy = -mtp
    mxz = mrt
    myz = -mrp
    return np.array([
        [mxx, mxy, mxz],
        [mxy, myy, myz],
        [mxz, myz, mzz],
    ], dtype=float)


def NED_RTP(MT33_input) -> Tuple[float, float, float, float, float, float]:
    """
    Convert a 3x3 NED moment tensor to the six spherical components.

    Only the upper triangle is read.

    Returns
        tuple: (mrr, mtt, mpp, mrt, mrp, mtp)
    """
    MT33 = np.asarray(MT33_input, dtype=float)
    if MT33.shape != (3, 3):
        raise ValueError(f"Input MT33 must be a 3x3 array, got {MT33.shape}")
    return (
        float(MT33[2, 2]),
        float(MT33[0, 0]),
        float(MT33[1, 1]),
        float(MT33[0, 2]),
        float(-MT33[1, 2]),
        float(-MT33[0, 1]),
    )


def SDR_FP(strike: float, dip: float, rake: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert strike, dip and rake to the fault normal and slip vectors
    (Aki & Richards convention).

    Args
        strike, dip, rake: fault plane angles in radians

    Returns
        (numpy.array, numpy.array): unit normal (pointing up, into the
                                    hanging wall) and unit slip vector.
    """
    normal = np.array([
        -math.sin(dip) * math.sin(strike),
        math.sin(dip) * math.cos(strike),
        -math.cos(dip),
    ], dtype=float)
    slip = np.array([
        math.cos(rake) * math.cos(strike) + math.sin(rake) * math.cos(dip) * math.sin(strike),
        math.cos(rake) * math.sin(strike) - math.sin(rake) * math.cos(dip) * math.cos(strike),
        -math.sin(rake) * math.sin(dip),
    ], dtype=float)
    return normal, slip


def FP_MT33(normal, slip, moment: float = 1.0) -> np.ndarray:
    """
    Pure double-couple moment tensor ``M0 (n s^T + s n^T)`` for a fault
    normal and slip vector.
    """
    n = vector.unit(normal)
    s = vector.unit(slip)
    return float(moment) * (np.outer(n, s) + np.outer(s, n))


def SDR_MT33(strike: float, dip: float, rake: float, moment: float = 1.0) -> np.ndarray:
    """
    Convert strike, dip, rake (radians) and scalar moment to the 3x3 NED
    moment tensor of a pure double couple.
    """
    normal, slip = SDR_FP(strike, dip, rake)
    return FP_MT33(normal, slip, moment)


def FP_TNP(normal, slip) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Convert fault normal and slip to T, N, P axes.

    Returns
        (numpy.array, numpy.array, numpy.array): unit T, N, P vectors
    """
    n = vector.unit(normal)
    s = vector.unit(slip)
    T = vector.unit(vector.add(n, s))
    P = vector.unit(vector.subtract(n, s))
    N = vector.negative(vector.cross(T, P))
    return T, N, P


def TP_FP(T, P) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert the T and P axes to a fault normal and slip vector.

    The two vectors are the bisectors of T and P. Swapping them gives the
    normal and slip of the auxiliary plane.

    Returns
        (numpy.array, numpy.array): unit vectors ``(T+P)/|T+P|`` and
                                    ``(T-P)/|T-P|``
    """
    N1 = vector.unit(vector.add(T, P))
    N2 = vector.unit(vector.subtract(T, P))
    return N1, N2


def FP_SDR(normal, slip) -> Tuple[float, float, float]:
    """
    Convert fault normal and slip to strike, dip and rake.

    If the normal points down it is flipped together with the slip vector,
    which describes the same fault.

    Returns
        (float, float, float): strike in [0, 2*pi), dip in [0, pi/2] and
                               rake in [-pi, pi), radians
    """
    n = vector.unit(normal)
    s = vector.unit(slip)
    if n[2] > 0:
        n = vector.negative(n)
        s = vector.negative(s)

    nx, ny, nz = n
    sx, sy, sz = s

    strike = zero_to_two_pi(math.atan2(-nx, ny))
    dip = math.acos(min(1.0, max(-1.0, -nz)))
    # sin(dip) cancels from both arguments
    rake = math.atan2(-sz, sx * ny - sy * nx)
    rake = math.fmod(rake + math.pi, _TWO_PI)
    if rake < 0:
        rake += _TWO_PI
    rake -= math.pi
    return strike, dip, rake


def normal_SD(normal) -> Tuple[float, float]:
    """
    Convert a plane normal to strike and dip (radians).
    """
    n = vector.unit(normal)
    if n[2] > 0:
        n = vector.negative(n)
    strike = zero_to_two_pi(math.atan2(-n[0], n[1]))
    dip = math.acos(min(1.0, max(-1.0, -n[2])))
    return strike, dip


def SDR_SDR(strike: float, dip: float, rake: float) -> Tuple[float, float, float]:
    """
    Convert strike, dip, rake to strike, dip, rake for the other
    (auxiliary) nodal plane.
    """
    normal, slip = SDR_FP(strike, dip, rake)
    # for a double couple the slip vector is the auxiliary plane normal
    return FP_SDR(slip, normal)


def AzPl_vec(azimuth: float, plunge: float, radians: bool = False) -> np.ndarray:
    """
    Convert the azimuth and plunge of an axis to a unit vector.

    Azimuth is clockwise from North, plunge positive downwards from
    horizontal.

    Args
        azimuth: axis azimuth.
        plunge: axis plunge.

    Keyword Args
        radians: boolean, flag if inputs are in radians [default = False, assumes degrees].
    """
    if not radians:
        azimuth = math.radians(azimuth)
        plunge = math.radians(plunge)
    return np.array([
        math.cos(plunge) * math.cos(azimuth),
        math.cos(plunge) * math.sin(azimuth),
        math.sin(plunge),
    ], dtype=float)


def vec_AzPl(v) -> Tuple[float, float, bool]:
    """
    Convert an axis vector to azimuth and plunge (radians).

    The axis is reported pointing down: a negative plunge is made positive
    and the azimuth turned by pi. A vertical axis has azimuth 0.

    Returns
        (float, float, bool): azimuth in [0, 2*pi), plunge in [0, pi/2],
                              and whether the direction was flipped
    """
    north, east = vector.x(v), vector.y(v)
    # vector.azimuth measures from the second component towards the first
    azimuth = vector.azimuth((east, north))
    plunge = vector.plunge(v)
    flipped = plunge < 0
    if flipped:
        plunge = -plunge
        if north != 0 or east != 0:
            azimuth += math.pi
    return zero_to_two_pi(azimuth), plunge, flipped


def E_moment(E_input: Sequence[float]) -> float:
    """
    Scalar seismic moment from the eigenvalues, ``sqrt(sum(E**2) / 2)``.
    """
    E = np.asarray(E_input, dtype=float)
    if E.shape != (3,):
        raise ValueError(f"Eigenvalue set must have 3 elements. Got {E.shape}")
    # hypot does not underflow for tiny eigenvalues
    return math.hypot(*E.tolist()) / math.sqrt(2.0)


def moment_Mw(moment: float) -> float:
    """
    Moment magnitude for a scalar moment in N-m.
    """
    if not moment > 0:
        raise TensorInputError(f"scalar moment must be positive, got {moment}")
    return (2.0 / 3.0) * (math.log10(moment) - MW_CONSTANT)


def Mw_moment(magnitude: float) -> float:
    """
    Scalar moment in N-m for a moment magnitude.
    """
    try:
        return 10.0 ** (1.5 * magnitude + MW_CONSTANT)
    except OverflowError:
        raise TensorInputError(f"magnitude {magnitude} is out of range") from None


def moment_exponent(moment: float) -> Tuple[int, float]:
    """
    Decimal exponent and matching scale used to display a moment, so that
    ``moment / scale`` lies in [1, 10).

    Returns
        (int, float): exponent, scale (``10**exponent``)
    """
    if not moment > 0:
        raise TensorInputError(f"scalar moment must be positive, got {moment}")
    exponent = int(math.floor(math.log10(moment)))
    scale = 10.0 ** exponent
    # log10 can land just below an exact power of ten
    if moment / scale >= 10.0:
        exponent += 1
        scale = 10.0 ** exponent
    return exponent, scale


def E_percentDC(E_input: Sequence[float]) -> float:
    """
    Double-couple fraction of a moment tensor from its eigenvalues.
    Assumes E_input is sorted: E[0] >= E[1] >= E[2].

    The isotropic part is removed first; with the deviatoric eigenvalues
    ``d``, ``epsilon = -d[1] / max(|d[0]|, |d[2]|)`` and the fraction is
    ``1 - 2|epsilon|``. A purely isotropic tensor has no double couple.

    Returns
        float: fraction in [0, 1] (multiply by 100 for percent)
    """
    E = np.asarray(E_input, dtype=float)
    if E.shape != (3,):
        raise ValueError(f"Eigenvalue set must have 3 elements. Got {E.shape}")
    iso = np.sum(E) / 3.0
    dev = E - iso
    largest = max(abs(dev[0]), abs(dev[2]))
    if largest == 0:
        return 0.0
    epsilon = -dev[1] / largest
    return float(min(1.0, max(0.0, 1.0 - 2.0 * abs(epsilon))))


def E_GD(E_input: Sequence[float]) -> Tuple[float, float]:
    """
    Convert the eigenvalues to the Tape parameterisation gamma and delta
    (lune longitude and latitude).
    Assumes E_input is sorted: E[0] >= E[1] >= E[2].

    Args
        E_input: array of eigenvalues, shape (3,)

    Returns
        (float, float): tuple of gamma in [-pi/6, pi/6] and delta in
                        [-pi/2, pi/2]
    """
    E = np.asarray(E_input, dtype=float)
    if E.shape != (3,):
        raise ValueError(f"Eigenvalue set must have 3 elements. Got {E.shape}")
    mag_e = float(np.max(np.abs(E)))
    if mag_e == 0:
        return 0.0, 0.0
    # gamma and delta depend on the eigenvalue ratios only
    e1, e2, e3 = (E / mag_e).tolist()

    # Isotropic condition: e1 approx e3 (implies e1=e2=e3 due to sorting)
    if np.isclose(e1, e3, rtol=1e-7, atol=1e-9):
        return 0.0, float(np.sign(e1)) * math.pi / 2.0

    gamma = math.atan2(-e1 + 2 * e2 - e3, math.sqrt(3.0) * (e1 - e3))
    norm_E = math.hypot(e1, e2, e3)
    beta_arg = min(1.0, max(-1.0, (e1 + e2 + e3) / (math.sqrt(3.0) * norm_E)))
    delta = math.pi / 2.0 - math.acos(beta_arg)
    return gamma, delta
