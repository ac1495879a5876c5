"""Weather analysis: values derived from decoded groups."""

from typing import Optional, List

from metar_decoder.models.values import Unit, Value, ValueType, Quantity
from metar_decoder.models.metar import CloudCover, CloudLayer

# Covers that leave the ceiling unlimited unless a later layer says otherwise
_NON_CEILING_COVERS = (
    CloudCover.CLEAR,
    CloudCover.SKY_CLEAR,
    CloudCover.NIL_SIGNIFICANT_CLOUD,
    CloudCover.NO_CLOUD_DETECTED,
    CloudCover.FEW,
    CloudCover.SCATTERED,
    CloudCover.CEILING_OK,
)

_CEILING_COVERS = (
    CloudCover.BROKEN,
    CloudCover.OVERCAST,
    CloudCover.VERTICAL_VISIBILITY,
)


class WeatherAnalyzer:
    """
    Aviation weather analysis functions.

    All methods are static and keep no state.
    """

    @staticmethod
    def ceiling(cloud_layers: List[CloudLayer]) -> Optional[Quantity]:
        """
        Determine the ceiling from cloud layers.

        The ceiling is the lowest broken, overcast or vertical visibility
        layer.

        Args:
            cloud_layers: Decoded cloud layers in report order

        Returns:
            None if no cloud cover was reported,
            unlimited if no layer forms a ceiling,
            exact lowest height in feet,
            indefinite if ceiling layers were reported without usable height
        """
        is_unlimited = None
        lowest = None

        for layer in cloud_layers:
            if layer.cover in _NON_CEILING_COVERS:
                if is_unlimited is None:
                    is_unlimited = True
            elif layer.cover in _CEILING_COVERS:
                is_unlimited = False
                height = layer.height
                if height is not None and height.value.value_type == ValueType.EXACT:
                    if lowest is None or height.value.value < lowest:
                        lowest = height.value.value

        if is_unlimited is None:
            return None
        if is_unlimited:
            return Quantity(Value.unlimited(), Unit.FOOT)
        if lowest is not None:
            return Quantity(Value.exact(lowest), Unit.FOOT)
        return Quantity(Value.indefinite(), Unit.FOOT)
