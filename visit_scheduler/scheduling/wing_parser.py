"""Wing lookup from a prisoner's internal location.

Internal locations look like ``BLI-C-1-007``: the prison code followed by the
housing levels. The layout differs between prisons, so only prisons listed in
``WING_ELEMENTS_BY_PRISON`` are parsed.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

LOCATION_DELIMITER = "-"

# prison code -> (expected number of elements, index of the wing element)
WING_ELEMENTS_BY_PRISON: Dict[str, Tuple[int, int]] = {
    "BLI": (4, 1),
}


def get_prisoner_wing_from_location(internal_location: Optional[str]) -> Optional[str]:
    if not internal_location or not internal_location.strip():
        return None

    values = internal_location.split(LOCATION_DELIMITER)
    layout = WING_ELEMENTS_BY_PRISON.get(values[0])
    if layout is None:
        return None

    expected_elements, wing_index = layout
    if len(values) == expected_elements and len(values) > wing_index:
        return values[wing_index]
    return None
