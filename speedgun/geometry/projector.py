from typing import Tuple

from speedgun.utils.types import Rect, ViewSize


def project_region(region: Tuple[float, float, float, float], view_size: ViewSize) -> Rect:
    """
    Normalized detector box (origin bottom-left) -> view rect (origin top-left).
    No clamping: the rect may extend past the view bounds.
    """
    x, y, w, h = region
    return Rect(
        x=x * view_size.width,
        y=(1.0 - y - h) * view_size.height,
        width=w * view_size.width,
        height=h * view_size.height,
    )
