import socket, threading

import pytest

from highscores import HighScores
from server import DatagramTransport, ScoreServer


class FakeTransport:
    """Feeds queued datagrams to the server and records replies."""

    def __init__(self, packets=()):
        self.packets = list(packets)
        self.sent = []
        self.fail_send = False

    @property
    def address(self):
        return ("127.0.0.1", 0)

    def receive(self):
        if not self.packets:
            raise OSError("socket closed")
        return self.packets.pop(0)

    def send(self, address, data):
        if self.fail_send:
            raise OSError("destination unreachable")
        self.sent.append((address, data))


@pytest.fixture
def scores_file(tmp_path):
    return str(tmp_path / "scores.txt")


@pytest.fixture
def fake_server(scores_file):
    return ScoreServer(FakeTransport(), HighScores(), scores_file)


@pytest.fixture
def live_server(scores_file):
    """Real server on a loopback port, served from a background thread."""
    transport = DatagramTransport("127.0.0.1", 0, timeout=0.1).bind()
    server = ScoreServer(transport, HighScores(), scores_file)
    stop = threading.Event()

    def run():
        while not stop.is_set():
            try:
                server.serve_once()
            except socket.timeout:
                continue

    t = threading.Thread(target=run, daemon=True)
    t.start()
    yield server
    stop.set()
    t.join(timeout=2)
    transport.close()
