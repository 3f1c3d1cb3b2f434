import os
import unittest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtTest import QTest
from PySide6.QtWidgets import QApplication, QLabel

from virtscroll.core.range import Range
from virtscroll.widgets.virtual_list_widget import BOTTOM_RETRY_LIMIT, VirtualListWidget, unique_ids_from_sources


def make_rows(count):
    return [{"id": i, "text": f"row {i}"} for i in range(count)]


def label_factory(source, index):
    return QLabel(source["text"])


def wait_until(predicate, timeout=2000):
    waited = 0
    while not predicate() and waited < timeout:
        QTest.qWait(5)
        waited += 5
    return predicate()


class TestUniqueIds(unittest.TestCase):
    def test_key_name_and_callable(self):
        rows = [{"id": "a"}, {"id": 2}, {"name": "x"}, {"id": 1.5}, {"id": True}]
        self.assertEqual(unique_ids_from_sources(rows, "id"), ["a", 2, None, None, None])
        self.assertEqual(unique_ids_from_sources(rows, lambda row: row.get("name")), [None, None, "x", None, None])


class TestVirtualListWidget(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = QApplication.instance() or QApplication([])

    def setUp(self):
        self.widget = VirtualListWidget(make_rows(100), "id", label_factory, keeps=6, estimate_size=20)

    def tearDown(self):
        self.widget.dispose()
        self.widget.deleteLater()

    def test_initial_render(self):
        # keeps=6 -> buffer 2 -> window of 10 items
        self.assertEqual(self.widget.get_range(), Range(0, 9, 0, 90 * 20))
        self.assertEqual(self.widget.rendered_keys(), list(range(10)))

    def test_set_data_sources(self):
        self.widget.set_data_sources(make_rows(5))
        self.assertEqual(self.widget.get_range().end, 4)
        self.assertEqual(self.widget.rendered_keys(), list(range(5)))
        self.widget.set_data_sources([])
        self.assertEqual(self.widget.rendered_keys(), [])
        self.assertEqual(self.widget.get_range(), Range(0, 0, 0, 0))

    def test_rows_without_key_are_not_rendered(self):
        rows = make_rows(4)
        del rows[2]["id"]
        with self.assertLogs("virtscroll.widgets", level="WARNING"):
            self.widget.set_data_sources(rows)
        self.assertEqual(self.widget.rendered_keys(), [0, 1, 3])

    def test_item_sizes_reach_engine(self):
        resized = []
        self.widget.on_resized = lambda key, size: resized.append((key, size))
        item = self.widget._items[0]
        item.reporter.report()
        size = item.reporter.current_size()
        self.assertEqual(self.widget.get_size(0), size)
        self.assertGreaterEqual(self.widget.get_sizes(), 1)
        self.assertIn((0, size), resized)

    def test_set_keeps(self):
        self.widget.set_keeps(10)
        self.assertEqual(self.widget.get_range().end, 13)
        self.assertEqual(len(self.widget.rendered_keys()), 14)

    def test_header_size_shifts_front_padding(self):
        header = QLabel("header")
        widget = VirtualListWidget(make_rows(50), "id", label_factory, keeps=6, estimate_size=20, header=header)
        try:
            widget._header.reporter.report()
            header_size = widget._header.reporter.current_size()
            self.assertEqual(widget.engine.config.slot_header_size, header_size)
            self.assertEqual(widget.get_range().pad_front, header_size)
            self.assertEqual(widget.get_range().start, 0)
        finally:
            widget.dispose()
            widget.deleteLater()

    def test_scrolling_moves_window(self):
        ranges = []
        self.widget.on_scroll = ranges.append
        self.widget.resize(240, 100)
        self.widget.show()
        QApplication.processEvents()
        self.widget.scroll_to_offset(600)
        QApplication.processEvents()
        self.assertTrue(ranges)
        self.assertGreater(self.widget.get_range().start, 0)
        self.assertIn(self.widget.get_range().start, self.widget.rendered_keys())

    def test_dispose(self):
        self.widget.dispose()
        self.assertIsNone(self.widget.engine)
        self.assertEqual(self.widget.rendered_keys(), [])


class TestVirtualListWidgetScrolling(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = QApplication.instance() or QApplication([])

    def setUp(self):
        self.widget = VirtualListWidget(make_rows(100), "id", label_factory, keeps=6, estimate_size=20)
        self.widget.resize(240, 100)
        self.widget.show()
        QTest.qWait(20)

    def tearDown(self):
        self.widget.hide()
        self.widget.dispose()
        self.widget.deleteLater()

    def at_bottom(self):
        return self.widget.get_offset() + self.widget.get_client_size() >= self.widget.get_scroll_size()

    def test_sizes_are_not_saved_during_scroll_handling(self):
        engine = self.widget.engine
        handle_scroll, save_size = engine.handle_scroll, engine.save_size
        active = []
        nested = []
        saved = []

        def tracked_scroll(offset):
            active.append(offset)
            try:
                handle_scroll(offset)
            finally:
                active.pop()

        def tracked_save(key, size):
            saved.append(key)
            if active:
                nested.append(key)
            save_size(key, size)

        engine.handle_scroll = tracked_scroll
        engine.save_size = tracked_save
        for offset in (400, 1200, 300, 900):
            self.widget.scroll_to_offset(offset)
            QTest.qWait(10)

        self.assertTrue(saved)
        self.assertEqual(nested, [])

    def test_mounted_items_report_laid_out_size(self):
        self.widget.scroll_to_offset(800)
        QTest.qWait(20)
        for key, item in self.widget._items.items():
            self.assertEqual(self.widget.get_size(key), item.reporter.current_size())

    def test_scroll_to_index_moves_to_item_offset(self):
        expected = int(round(self.widget.engine.get_offset(20)))
        self.widget.scroll_to_index(20)
        self.assertEqual(self.widget.get_offset(), expected)
        self.assertIn(20, self.widget.rendered_keys())

    def test_scroll_to_last_index_reaches_bottom(self):
        self.widget.scroll_to_index(99)
        self.assertTrue(wait_until(self.at_bottom))
        self.assertTrue(wait_until(lambda: not self.widget._bottom_timer.isActive()))
        self.assertEqual(self.widget.get_range().end, 99)
        self.assertIn(99, self.widget.rendered_keys())

    def test_scroll_to_bottom_restarts_pending_retry(self):
        self.widget.scroll_to_bottom()
        self.widget._bottom_attempts = 7
        self.widget.scroll_to_bottom()
        self.assertEqual(self.widget._bottom_attempts, 0)
        self.assertTrue(self.widget._bottom_timer.isActive())
        self.assertTrue(wait_until(lambda: not self.widget._bottom_timer.isActive()))
        self.assertTrue(self.at_bottom())
        self.assertLess(self.widget._bottom_attempts, BOTTOM_RETRY_LIMIT)

    def test_scroll_to_bottom_gives_up_after_retry_limit(self):
        # A scroll size that is never reached keeps the retry going until the limit
        self.widget.get_scroll_size = lambda: 10 ** 9
        self.widget.scroll_to_bottom()
        self.assertTrue(wait_until(lambda: not self.widget._bottom_timer.isActive(), timeout=5000))
        self.assertEqual(self.widget._bottom_attempts, BOTTOM_RETRY_LIMIT)

    def test_to_bottom_respects_threshold(self):
        hits = []
        self.widget.on_to_bottom = lambda: hits.append("bottom")
        bar = self.widget.verticalScrollBar()
        self.widget.scroll_to_offset(bar.maximum() - 50)
        self.assertEqual(hits, [])
        self.widget.bottom_threshold = 60
        self.widget.scroll_to_offset(bar.maximum() - 40)
        self.assertEqual(hits, ["bottom"])

    def test_to_top_respects_threshold(self):
        hits = []
        self.widget.on_to_top = lambda: hits.append("top")
        self.widget.scroll_to_offset(300)
        self.widget.scroll_to_offset(100)
        self.assertEqual(hits, [])
        self.widget.scroll_to_offset(0)
        self.assertEqual(hits, ["top"])
        self.widget.top_threshold = 50
        self.widget.scroll_to_offset(300)
        self.widget.scroll_to_offset(40)
        self.assertEqual(hits, ["top", "top"])

    def test_show_restores_last_offset(self):
        self.widget.scroll_to_offset(500)
        QTest.qWait(20)
        offset = int(round(self.widget.engine.offset))
        self.assertGreater(offset, 0)

        self.widget.hide()
        bar = self.widget.verticalScrollBar()
        bar.blockSignals(True)
        bar.setValue(0)
        bar.blockSignals(False)
        self.widget.show()
        self.assertEqual(self.widget.get_offset(), offset)


if __name__ == '__main__':
    unittest.main()
