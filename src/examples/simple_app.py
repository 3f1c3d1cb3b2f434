from PySide6.QtWidgets import QMainWindow, QApplication, QLabel

from virtscroll.widgets.virtual_list_widget import VirtualListWidget


class MyWindow(QMainWindow):
    def __init__(self):
        super().__init__()

        # A hundred thousand rows, only a few dozen widgets alive at any time
        rows = [{"key": f"row-{i}", "title": f"Row {i}"} for i in range(100_000)]
        self.widget = VirtualListWidget(rows, "key", lambda row, index: QLabel(row["title"]), keeps=40, estimate_size=20)
        self.setCentralWidget(self.widget)


if __name__ == "__main__":
    app = QApplication([])
    window = MyWindow()
    window.show()
    app.exec()
