"""Display ordering for roll lists."""

import re
from enum import Enum

from filmnotes.db.models import Camera, Roll

_NUMBER_PREFIX = re.compile(r"^(\d+)", re.DOTALL)


class RollSortMode(str, Enum):
    DATE = "date"
    NAME = "name"
    CAMERA = "camera"


def sort_rolls(rolls: list[Roll], mode: RollSortMode,
               cameras: dict[int, Camera] | None = None) -> list[Roll]:
    """Return rolls ordered for display.

    DATE is newest load date first. NAME puts rolls with a numeric name prefix
    first in ascending numeric order. CAMERA groups by camera name and needs
    `cameras` keyed by id; rolls whose camera is unknown come first. Ties in
    NAME and CAMERA fall back to `Roll.latest_date`, newest first.
    """
    if mode == RollSortMode.DATE:
        return sorted(rolls, key=lambda r: r.date or "", reverse=True)

    # Sorts are stable, so apply the tie-breaker first.
    ordered = sorted(rolls, key=lambda r: r.latest_date or "", reverse=True)
    if mode == RollSortMode.NAME:
        def name_key(roll: Roll):
            match = _NUMBER_PREFIX.match(roll.name or "")
            prefix = int(match.group(1)) if match else None
            return (prefix is None, prefix or 0, roll.name or "")
        ordered.sort(key=name_key)
    elif mode == RollSortMode.CAMERA:
        cameras = cameras or {}

        def camera_key(roll: Roll):
            camera = cameras.get(roll.camera_id)
            return (camera is not None, camera.name.lower() if camera else "")
        ordered.sort(key=camera_key)
    return ordered
