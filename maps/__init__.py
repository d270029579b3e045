"""
Map descriptions shared between the render pipeline and the web settings.
"""

from .colors import Color, parse_color  # noqa: F401
from .schemas import MapConfig, MapGeometry, RenderedMapView  # noqa: F401
