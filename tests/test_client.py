import socket

import pytest

from client import ScoreClient, fetch_scores, format_leaderboard
from protocol import ScoreEntry


@pytest.fixture
def peer():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2)
    yield sock
    sock.close()


def test_submit_score_wire_format(peer):
    client = ScoreClient(*peer.getsockname())
    try:
        client.submit_score("  Alice ", "50")
        data, _ = peer.recvfrom(1024)
        assert data == b"score Alice & 50 &"
    finally:
        client.close()


@pytest.mark.parametrize("name, score", [("", 5), ("  ", 5), ("A&B", 5), ("Al", ""), ("Al", "x"), ("Al", "1_000")])
def test_submit_score_rejects_bad_input(peer, name, score):
    client = ScoreClient(*peer.getsockname())
    try:
        with pytest.raises(ValueError):
            client.submit_score(name, score)
    finally:
        client.close()


def test_receive_skips_non_score_replies(peer):
    client = ScoreClient(*peer.getsockname())
    try:
        client.request_scores()
        data, addr = peer.recvfrom(1024)
        assert data == b"get"
        peer.sendto(b"noise", addr)
        peer.sendto(b"HIGH$$ Bob & 7 & ", addr)
        assert client.receive(timeout=2) == [ScoreEntry("Bob", 7)]
    finally:
        client.close()


def test_fetch_scores_times_out_without_server(peer):
    host, port = peer.getsockname()
    with pytest.raises(socket.timeout):
        fetch_scores(host, port, timeout=0.2)


def test_fetch_scores_from_live_server(live_server):
    host, port = live_server.transport.address
    live_server.store.insert("Cy", 3)
    assert fetch_scores(host, port) == [ScoreEntry("Cy", 3)]


def test_format_leaderboard():
    text = format_leaderboard([ScoreEntry("Alice", 50), ScoreEntry("Bob", 20)])
    lines = text.splitlines()
    assert "HIGH SCORES" in lines[1]
    assert lines[5].split() == ["1", "Alice", "50"]
    assert lines[6].split() == ["2", "Bob", "20"]
    assert "(no scores yet)" in format_leaderboard([])
