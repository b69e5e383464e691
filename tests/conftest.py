import pytest


class FakeLink:
    """Заглушка SerialLink, записывающая отправленные байты."""

    def __init__(self) -> None:
        self.connect_ok = True
        self.send_ok = True
        self.connected = False
        self.connect_calls: list[str] = []
        self.sent: list[bytes] = []
        self.disconnect_calls = 0

    def connect(self, device: str) -> bool:
        self.connect_calls.append(device)
        self.connected = self.connect_ok
        return self.connect_ok

    def send(self, data: bytes) -> bool:
        self.sent.append(data)
        return self.send_ok

    def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False

    def is_connected(self) -> bool:
        return self.connected


@pytest.fixture
def fake_link() -> FakeLink:
    return FakeLink()
