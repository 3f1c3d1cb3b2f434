import unittest
from typing import get_args

from PySide6.QtGui import QColor

from virtscroll.colors.modes import ColorMap, RoleName


class TestColorMap(unittest.TestCase):
    def test_roles_match_declared_names(self):
        self.assertEqual(set(get_args(RoleName)), set(ColorMap._roles))

    def test_every_role_resolves_in_both_modes(self):
        color_map = ColorMap(darkmode=False)
        for role in get_args(RoleName):
            self.assertIsInstance(color_map.get_role_color(role), QColor)
            self.assertIsInstance(color_map.get_role_color(role, darkmode=True), QColor)

    def test_mode_switch(self):
        light = ColorMap(darkmode=False)
        dark = ColorMap(darkmode=True)
        self.assertEqual(light.get_role_color("viewport", darkmode=True), dark.get_role_color("viewport"))
        self.assertNotEqual(light.get_role_color("viewport"), dark.get_role_color("viewport"))
        self.assertNotEqual(dark.get_role_color("text-muted"), dark.get_role_color("text-base"))


if __name__ == '__main__':
    unittest.main()
