import random

from PySide6.QtGui import QPalette
from PySide6.QtWidgets import (QApplication, QHBoxLayout, QLabel, QMainWindow, QPushButton, QSpinBox,
                               QVBoxLayout, QWidget)

from virtscroll.colors.modes import ColorMap
from virtscroll.widgets.virtual_list_widget import VirtualListWidget

WORDS = "lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod tempor incididunt ut labore".split()


class ChatWindow(QMainWindow):
    """Long message list with variable row heights; scrolling to the end loads older history."""

    def __init__(self):
        super().__init__()
        self.setWindowTitle("Virtual List Chat")
        self.setMinimumSize(480, 640)
        self.color_map = ColorMap(darkmode=True)
        self.messages = [self.random_message(i) for i in range(10000)]

        header = self.muted_label("Start of conversation")
        self.footer = self.muted_label("")
        self.list_widget = VirtualListWidget(
            self.messages,
            "id",
            self.build_row,
            keeps=30,
            estimate_size=40,
            header=header,
            footer=self.footer,
            bottom_threshold=20,
            color_map=self.color_map,
        )
        self.list_widget.on_to_bottom = self.load_more
        self.list_widget.on_scroll = self.show_range

        self.jump_box = QSpinBox()
        self.jump_box.setRange(0, len(self.messages) - 1)
        jump_button = QPushButton("Jump")
        jump_button.clicked.connect(lambda: self.list_widget.scroll_to_index(self.jump_box.value()))
        bottom_button = QPushButton("Bottom")
        bottom_button.clicked.connect(self.list_widget.scroll_to_bottom)
        self.status = QLabel()

        toolbar = QHBoxLayout()
        toolbar.addWidget(self.jump_box)
        toolbar.addWidget(jump_button)
        toolbar.addWidget(bottom_button)
        toolbar.addWidget(self.status, 1)

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.addLayout(toolbar)
        layout.addWidget(self.list_widget, 1)
        self.setCentralWidget(central)

    def random_message(self, index):
        text = " ".join(random.choice(WORDS) for _ in range(random.randint(3, 60)))
        return {"id": index, "author": random.choice(["ana", "bo", "cy"]), "text": text}

    def muted_label(self, text):
        label = QLabel(text)
        label.setMargin(6)
        palette = label.palette()
        palette.setColor(QPalette.ColorRole.WindowText, self.color_map.get_role_color("text-muted"))
        label.setPalette(palette)
        return label

    def build_row(self, message, index):
        label = QLabel(f"<b>{message['author']}</b> #{index}<br>{message['text']}")
        label.setWordWrap(True)
        label.setMargin(6)
        label.setAutoFillBackground(True)
        palette = label.palette()
        role = "item" if index % 2 == 0 else "item-alternate"
        palette.setColor(QPalette.ColorRole.Window, self.color_map.get_role_color(role))
        palette.setColor(QPalette.ColorRole.WindowText, self.color_map.get_role_color("text-base"))
        label.setPalette(palette)
        return label

    def load_more(self):
        start = len(self.messages)
        self.messages.extend(self.random_message(i) for i in range(start, start + 500))
        self.jump_box.setMaximum(len(self.messages) - 1)
        self.list_widget.set_data_sources(self.messages)
        self.footer.setText(f"{len(self.messages)} messages loaded")

    def show_range(self, current):
        self.status.setText(f"rendering {current.start}-{current.end}, measured {self.list_widget.get_sizes()}")

    def closeEvent(self, event):
        self.list_widget.dispose()
        super().closeEvent(event)


if __name__ == "__main__":
    app = QApplication([])
    window = ChatWindow()
    window.show()
    app.exec()
