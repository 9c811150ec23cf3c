"""
Build moment tensors from earthquake product properties.

Products follow the ComCat GeoJSON layout: a mapping with a ``type``
(``"moment-tensor"`` or ``"focal-mechanism"``) and a ``properties`` mapping
whose values are usually strings, e.g.::

    {
        "type": "moment-tensor",
        "properties": {
            "tensor-mrr": "1.2e+19",
            ...
            "derived-magnitude": "7.1",
            "derived-magnitude-type": "Mww",
            "derived-depth": "11.5",
        },
    }
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import TensorInputError
from .matrix import DEFAULT_MAX_ROTATIONS
from .moment_tensor_conversion import DEFAULT_UNITS, Mw_moment
from .tensor import FOCAL_MECHANISM, MOMENT_TENSOR, MomentTensor, Tensor, decompose

logger = logging.getLogger(__name__)

TENSOR_KEYS = (
    "tensor-mrr",
    "tensor-mtt",
    "tensor-mpp",
    "tensor-mrt",
    "tensor-mrp",
    "tensor-mtp",
)
PLANE_KEYS = ("nodal-plane-1-strike", "nodal-plane-1-dip")
# older focal mechanism products call the rake "slip"
RAKE_KEYS = ("nodal-plane-1-rake", "nodal-plane-1-slip")

TITLES = {
    "MWW": "W-phase Moment Tensor (Mww)",
    "MWC": "Centroid Moment Tensor (Mwc)",
    "MWB": "Body-wave Moment Tensor (Mwb)",
    "MWR": "Regional Moment Tensor (Mwr)",
}


def _split_product(
    product: Mapping[str, Any], product_type: Optional[str]
) -> Tuple[Mapping[str, Any], str]:
    if not isinstance(product, Mapping):
        raise TensorInputError(f"product must be a mapping, got {type(product).__name__}")
    properties = product.get("properties", product)
    if not isinstance(properties, Mapping):
        raise TensorInputError("product properties must be a mapping")
    if product_type is None:
        product_type = product.get("type", MOMENT_TENSOR)
    # anything that is not a focal mechanism is handled as a moment tensor
    if product_type != FOCAL_MECHANISM:
        product_type = MOMENT_TENSOR
    return properties, product_type


def _required_number(properties: Mapping[str, Any], key: str) -> float:
    value = properties[key]
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise TensorInputError(f"{key} must be numeric, got {value!r}") from None
    if not math.isfinite(number):
        raise TensorInputError(f"{key} must be finite, got {value!r}")
    return number


def _optional_number(properties: Mapping[str, Any], *keys: str) -> Optional[float]:
    """
    First of ``keys`` present with a usable numeric value, else ``None``.
    """
    for key in keys:
        value = properties.get(key)
        if value is None or value == "":
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-numeric product property {key}={value!r}")
            continue
        if not math.isfinite(number):
            logger.warning(f"Ignoring non-finite product property {key}={value!r}")
            continue
        return number
    return None


def _check_keys(properties: Mapping[str, Any], required) -> None:
    missing = [k for k in required if k not in properties]
    if missing:
        raise TensorInputError(f"Missing required product properties: {missing}")


def moment_tensor_from_product(
    product: Mapping[str, Any],
    product_type: Optional[str] = None,
) -> MomentTensor:
    """
    Parse a moment-tensor or focal-mechanism product.

    Parameters
    ----------
    product : mapping
        A product with ``type`` and ``properties``, or a bare properties
        mapping.
    product_type : str, optional
        Overrides the product's ``type``. Anything other than
        ``"focal-mechanism"`` is parsed as a moment tensor.

    Returns
    -------
    MomentTensor

    Raises
    ------
    TensorInputError
        If required properties are missing or not numeric.
    """
    properties, product_type = _split_product(product, product_type)

    metadata: Dict[str, Any] = {
        "magnitude": _optional_number(properties, "derived-magnitude"),
        "depth": _optional_number(properties, "derived-depth", "depth"),
        "units": DEFAULT_UNITS,
        "source_type": product_type,
        "magnitude_type": properties.get("derived-magnitude-type") or None,
    }

    if product_type == FOCAL_MECHANISM:
        rake_key = next((k for k in RAKE_KEYS if k in properties), RAKE_KEYS[0])
        _check_keys(properties, PLANE_KEYS + (rake_key,))
        strike, dip = (_required_number(properties, k) for k in PLANE_KEYS)
        rake = _required_number(properties, rake_key)

        moment = _optional_number(properties, "scalar-moment")
        if moment is not None and moment <= 0:
            logger.warning(f"Ignoring non-positive product property scalar-moment={moment!r}")
            moment = None
        if moment is None and metadata["magnitude"] is not None:
            moment = Mw_moment(metadata["magnitude"])
        if moment is None:
            # geometry only, the size of a first-motion solution is unknown
            logger.debug("Focal mechanism without scalar moment, using unit moment")
            moment = 1.0
        return MomentTensor.from_strike_dip_rake(strike, dip, rake, moment, **metadata)

    _check_keys(properties, TENSOR_KEYS)
    components = [_required_number(properties, k) for k in TENSOR_KEYS]
    return MomentTensor.from_components(components, **metadata)


def tensor_from_product(
    product: Mapping[str, Any],
    product_type: Optional[str] = None,
    max_rotations: Optional[int] = DEFAULT_MAX_ROTATIONS,
) -> Tensor:
    """
    Parse and decompose a product in one step.

    See :func:`moment_tensor_from_product` and
    :func:`beachballs.tensor.decompose`.
    """
    return decompose(moment_tensor_from_product(product, product_type), max_rotations)


def product_title(source_type: str, magnitude_type: Optional[str] = None) -> str:
    """
    Human readable title for a moment-tensor or focal-mechanism solution.
    """
    if source_type == FOCAL_MECHANISM:
        return "Focal Mechanism"
    title = TITLES.get((magnitude_type or "").upper())
    if title:
        return title
    if magnitude_type:
        return f"Moment Tensor ({magnitude_type})"
    return "Moment Tensor"
