"""
Moment tensor decomposition into principal axes and nodal planes.

A :class:`MomentTensor` holds the six independent components of the
symmetric source tensor plus display metadata. :func:`decompose` runs the
Jacobi eigensolver on it and returns a :class:`Tensor` with

- the T (tension), N (null) and P (pressure) principal axes,
- the two nodal planes NP1 and NP2 (strike, dip, rake in degrees),
- the scalar moment, percent double couple and lune source type,
- the scale, exponent and units used to display moment values.

All records are immutable and every call starts from scratch.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from .errors import TensorInputError
from .matrix import DEFAULT_MAX_ROTATIONS, Eigenvector, Matrix
from .moment_tensor_conversion import (
    DEFAULT_UNITS,
    E_GD,
    E_moment,
    E_percentDC,
    FP_SDR,
    NED_RTP,
    RTP_NED,
    SDR_FP,
    SDR_MT33,
    SDR_SDR,
    TP_FP,
    moment_exponent,
    moment_Mw,
    vec_AzPl,
)

logger = logging.getLogger(__name__)

COMPONENT_NAMES = ("mrr", "mtt", "mpp", "mrt", "mrp", "mtp")
MOMENT_TENSOR = "moment-tensor"
FOCAL_MECHANISM = "focal-mechanism"


def _check_component(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise TensorInputError(f"{name} must be a number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise TensorInputError(f"{name} must be finite, got {value}")
    return value


@dataclass(frozen=True)
class MomentTensor:
    """
    The six independent components of a moment tensor in the spherical
    (r=Up, t=South, p=East) convention, with display metadata.

    Attributes
    ----------
    mrr, mtt, mpp, mrt, mrp, mtp : float
        Tensor components, in ``units``.
    magnitude : float, optional
        Magnitude reported with the tensor. When ``None`` the moment
        magnitude is derived from the scalar moment.
    depth : float, optional
        Source depth in km.
    units : str, default "N-m"
        Physical units of the components.
    source_type : str, default "moment-tensor"
        ``"moment-tensor"`` or ``"focal-mechanism"``.
    magnitude_type : str, optional
        Magnitude / solution type, e.g. ``"Mww"``.
    """

    mrr: float
    mtt: float
    mpp: float
    mrt: float
    mrp: float
    mtp: float
    magnitude: Optional[float] = None
    depth: Optional[float] = None
    units: str = DEFAULT_UNITS
    source_type: str = MOMENT_TENSOR
    magnitude_type: Optional[str] = None

    def __post_init__(self):
        for name in COMPONENT_NAMES:
            object.__setattr__(self, name, _check_component(name, getattr(self, name)))
        for name in ("magnitude", "depth"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, _check_component(name, value))

    @classmethod
    def from_components(cls, components: Sequence[float], **metadata) -> "MomentTensor":
        """
        Build from ``(mrr, mtt, mpp, mrt, mrp, mtp)``.

        Raises
        ------
        TensorInputError
            If there are not exactly six numeric, finite components.
        """
        is_sequence = isinstance(components, (Sequence, np.ndarray))
        if not is_sequence or isinstance(components, (str, bytes)):
            raise TensorInputError(
                f"components must be a sequence of 6 numbers, got {type(components).__name__}"
            )
        if len(components) != 6:
            raise TensorInputError(
                f"moment tensor needs 6 components, got {len(components)}"
            )
        return cls(*components, **metadata)

    @classmethod
    def from_matrix(cls, MT33, **metadata) -> "MomentTensor":
        """Build from a symmetric 3x3 NED tensor (upper triangle is read)."""
        return cls(*NED_RTP(MT33), **metadata)

    @classmethod
    def from_strike_dip_rake(
        cls,
        strike: float,
        dip: float,
        rake: float,
        moment: float = 1.0,
        **metadata,
    ) -> "MomentTensor":
        """
        Pure double-couple tensor for a fault plane given in degrees.
        """
        for name, value in (("strike", strike), ("dip", dip), ("rake", rake), ("moment", moment)):
            _check_component(name, value)
        if not moment > 0:
            raise TensorInputError(f"moment must be positive, got {moment}")
        MT33 = SDR_MT33(math.radians(strike), math.radians(dip), math.radians(rake), moment)
        return cls.from_matrix(MT33, **metadata)

    @property
    def components(self) -> Tuple[float, float, float, float, float, float]:
        return tuple(getattr(self, name) for name in COMPONENT_NAMES)

    def matrix(self) -> Matrix:
        """The symmetric 3x3 tensor in North, East, Down coordinates."""
        return Matrix.from_array(RTP_NED(*self.components))

    def decompose(self, max_rotations: Optional[int] = DEFAULT_MAX_ROTATIONS) -> "Tensor":
        return decompose(self, max_rotations=max_rotations)


@dataclass(frozen=True)
class PrincipalAxis:
    """
    A principal axis of the moment tensor.

    ``vector`` is the unit eigenvector, turned to point down;
    ``azimuth`` (clockwise from North) and ``plunge`` (positive down,
    never negative) are in radians.
    """

    name: str
    vector: Eigenvector
    eigenvalue: float
    azimuth: float
    plunge: float

    @classmethod
    def from_eigenvector(cls, name: str, eigenvector: Eigenvector) -> "PrincipalAxis":
        azimuth, plunge, flipped = vec_AzPl(eigenvector)
        if flipped:
            eigenvector = eigenvector.negative()
        return cls(name, eigenvector, eigenvector.eigenvalue, azimuth, plunge)

    @property
    def azimuth_degrees(self) -> float:
        return math.degrees(self.azimuth)

    @property
    def plunge_degrees(self) -> float:
        return math.degrees(self.plunge)


@dataclass(frozen=True)
class NodalPlane:
    """Fault plane angles in degrees."""

    strike: float
    dip: float
    rake: float

    @classmethod
    def from_vectors(cls, normal, slip) -> "NodalPlane":
        strike, dip, rake = FP_SDR(normal, slip)
        return cls(math.degrees(strike), math.degrees(dip), math.degrees(rake))

    def normal_slip(self) -> Tuple[np.ndarray, np.ndarray]:
        """Unit fault normal and slip vectors (NED)."""
        return SDR_FP(math.radians(self.strike), math.radians(self.dip), math.radians(self.rake))

    def auxiliary(self) -> "NodalPlane":
        """The other nodal plane of the same double couple."""
        strike, dip, rake = SDR_SDR(
            math.radians(self.strike), math.radians(self.dip), math.radians(self.rake)
        )
        return NodalPlane(math.degrees(strike), math.degrees(dip), math.degrees(rake))


@dataclass(frozen=True)
class Tensor:
    """
    Result of decomposing a :class:`MomentTensor`.

    Attributes
    ----------
    source : MomentTensor
        The decomposed input.
    T, N, P : PrincipalAxis
        Tension, null and pressure axes, ``T.eigenvalue >= N.eigenvalue >=
        P.eigenvalue``.
    NP1, NP2 : NodalPlane
        The two nodal planes of the best double couple.
    moment : float
        Scalar seismic moment, in ``units``.
    percent_dc : float
        Double-couple fraction in [0, 1].
    gamma, delta : float
        Lune longitude and latitude (radians) of the source type.
    magnitude : float
        Reported magnitude, or moment magnitude derived from ``moment``.
    depth : float or None
        Depth in km.
    scale : float
        ``10**exponent``, divides moment values for display.
    exponent : int
    units : str
    """

    source: MomentTensor
    T: PrincipalAxis
    N: PrincipalAxis
    P: PrincipalAxis
    NP1: NodalPlane
    NP2: NodalPlane
    moment: float
    percent_dc: float
    gamma: float
    delta: float
    magnitude: float
    depth: Optional[float]
    scale: float
    exponent: int
    units: str

    @property
    def type(self) -> Optional[str]:
        return self.source.magnitude_type

    @property
    def source_type(self) -> str:
        return self.source.source_type

    @property
    def axes(self) -> Dict[str, PrincipalAxis]:
        return {"T": self.T, "N": self.N, "P": self.P}

    @property
    def eigenvalues(self) -> np.ndarray:
        return np.array([self.T.eigenvalue, self.N.eigenvalue, self.P.eigenvalue])

    def summary(self) -> Dict[str, Any]:
        """
        Rounded values for a details panel.

        Axis azimuth/plunge and plane angles are whole degrees, axis values
        and the moment are divided by ``scale`` (append
        ``e+{exponent} {units}`` when displaying), ``percent_dc`` is in
        percent.
        """
        axes = {
            name: {
                "azimuth": round(axis.azimuth_degrees) % 360,
                "plunge": round(axis.plunge_degrees),
                "value": axis.eigenvalue / self.scale,
            }
            for name, axis in self.axes.items()
        }
        planes = {
            name: {
                "strike": round(plane.strike) % 360,
                "dip": round(plane.dip),
                "rake": round(plane.rake),
            }
            for name, plane in (("NP1", self.NP1), ("NP2", self.NP2))
        }
        return {
            **axes,
            **planes,
            "moment": self.moment / self.scale,
            "exponent": self.exponent,
            "units": self.units,
            "magnitude": round(self.magnitude, 2),
            "depth": None if self.depth is None else round(self.depth, 1),
            "percent_dc": round(self.percent_dc * 100),
            "type": self.type,
            "source_type": self.source_type,
        }


def decompose(
    tensor: MomentTensor,
    max_rotations: Optional[int] = DEFAULT_MAX_ROTATIONS,
) -> Tensor:
    """
    Decompose a moment tensor into principal axes and nodal planes.

    Parameters
    ----------
    tensor : MomentTensor
        Input tensor.
    max_rotations : int, default 100
        Rotation budget of the Jacobi eigensolver.

    Returns
    -------
    Tensor

    Raises
    ------
    ConvergenceError
        If the eigensolver does not converge.
    TensorInputError
        If the tensor has zero scalar moment.
    """
    if not isinstance(tensor, MomentTensor):
        raise TensorInputError(f"expected a MomentTensor, got {type(tensor).__name__}")

    eigenvectors = tensor.matrix().jacobi(max_rotations)
    P_vec, N_vec, T_vec = sorted(eigenvectors, key=lambda ev: ev.eigenvalue)
    E = [T_vec.eigenvalue, N_vec.eigenvalue, P_vec.eigenvalue]

    moment = E_moment(E)
    if moment == 0:
        raise TensorInputError("moment tensor has zero scalar moment")

    T = PrincipalAxis.from_eigenvector("T", T_vec)
    N = PrincipalAxis.from_eigenvector("N", N_vec)
    P = PrincipalAxis.from_eigenvector("P", P_vec)

    # plane normals bisect T and P
    N1, N2 = TP_FP(T.vector, P.vector)
    NP1 = NodalPlane.from_vectors(N1, N2)
    NP2 = NodalPlane.from_vectors(N2, N1)

    percent_dc = E_percentDC(E)
    gamma, delta = E_GD(E)
    magnitude = tensor.magnitude if tensor.magnitude is not None else moment_Mw(moment)
    exponent, scale = moment_exponent(moment)

    logger.debug(
        f"Decomposed {tensor.source_type}: M0={moment:.3e} {tensor.units}, "
        f"DC={percent_dc * 100:.0f}%, NP1={NP1.strike:.0f}/{NP1.dip:.0f}/{NP1.rake:.0f}"
    )

    return Tensor(
        source=tensor,
        T=T,
        N=N,
        P=P,
        NP1=NP1,
        NP2=NP2,
        moment=moment,
        percent_dc=percent_dc,
        gamma=gamma,
        delta=delta,
        magnitude=magnitude,
        depth=tensor.depth,
        scale=scale,
        exponent=exponent,
        units=tensor.units,
    )
