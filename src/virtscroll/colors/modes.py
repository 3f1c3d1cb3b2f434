from typing import Literal, Optional
from PySide6.QtGui import QColor


RoleName = Literal["viewport", "item", "item-alternate", "text-base", "text-muted"]


class ColorMap:
    """Theme colors for the virtual list widgets, in light and dark mode."""

    # (light, dark) per neutral level
    _neutral_levels: dict[int, tuple[QColor, QColor]] = {
        0: (QColor(255, 255, 255), QColor(0, 0, 0)),
        50: (QColor(246, 247, 249), QColor(20, 24, 31)),
        100: (QColor(237, 240, 242), QColor(31, 38, 51)),
        600: (QColor(146, 159, 177), QColor(138, 150, 163)),
        900: (QColor(24, 29, 37), QColor(237, 239, 243)),
    }

    # role -> (light level, dark level)
    _roles: dict[str, tuple[int, int]] = {
        "viewport": (100, 0),
        "item": (0, 50),
        "item-alternate": (50, 100),
        "text-base": (900, 900),
        "text-muted": (600, 600),
    }

    def __init__(self, darkmode: bool = True) -> None:
        """Create color map. darkmode=True for dark theme, False for light theme."""
        self.darkmode: bool = darkmode

    def get_role_color(self, role: RoleName, darkmode: Optional[bool] = None) -> QColor:
        """Get color for a widget role. Uses instance darkmode if not specified."""
        loc = self._mode_loc(darkmode)
        return ColorMap._neutral_levels[ColorMap._roles[role][loc]][loc]

    def _mode_loc(self, darkmode: Optional[bool]) -> int:
        if darkmode is None:
            darkmode = self.darkmode
        return 1 if darkmode else 0
