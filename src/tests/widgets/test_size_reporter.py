import os
import unittest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QSize
from PySide6.QtGui import QResizeEvent
from PySide6.QtWidgets import QApplication, QWidget

from virtscroll.widgets.size_reporter import SizeReporter


def resize(widget, width, height):
    widget.resize(width, height)
    QApplication.sendEvent(widget, QResizeEvent(QSize(width, height), QSize(0, 0)))


class TestSizeReporter(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = QApplication.instance() or QApplication([])

    def setUp(self):
        self.widget = QWidget()
        self.calls = []

    def report(self, key, size, has_initial):
        self.calls.append((key, size, has_initial))

    def test_reports_height_changes(self):
        SizeReporter(self.widget, "row-1", self.report)
        resize(self.widget, 120, 40)
        resize(self.widget, 200, 40)
        resize(self.widget, 120, 60)
        self.assertEqual(self.calls, [("row-1", 40.0, False), ("row-1", 60.0, True)])

    def test_horizontal_reports_width(self):
        SizeReporter(self.widget, 7, self.report, orientation='x')
        resize(self.widget, 120, 40)
        self.assertEqual(self.calls, [(7, 120.0, False)])

    def test_forced_report(self):
        reporter = SizeReporter(self.widget, "k", self.report)
        self.widget.resize(50, 25)
        reporter.report()
        reporter.report()
        self.assertEqual(self.calls, [("k", 25.0, False), ("k", 25.0, True)])
        self.assertTrue(reporter.has_initial)

    def test_paused_reporter_stays_quiet(self):
        reporter = SizeReporter(self.widget, "k", self.report)
        reporter.paused = True
        resize(self.widget, 120, 40)
        self.assertEqual(self.calls, [])
        self.assertFalse(reporter.has_initial)
        reporter.paused = False
        reporter.report_if_changed()
        reporter.report_if_changed()
        self.assertEqual(self.calls, [("k", 40.0, False)])

    def test_detach(self):
        reporter = SizeReporter(self.widget, "k", self.report)
        reporter.detach()
        resize(self.widget, 120, 40)
        reporter.report()
        self.assertEqual(self.calls, [])


if __name__ == '__main__':
    unittest.main()
