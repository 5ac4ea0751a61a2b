"""
High-Score UDP Client
=======================
Interactive CLI client for the high-score server.

Score submissions get no reply; leaderboard replies are printed by a
listener thread whenever they arrive.
"""

import socket, threading, argparse

from protocol import (BUFSIZE, GET_KEYWORD, HIGH_PREFIX, SEPARATOR, ProtocolError,
                      format_score_request, parse_score, decode_scores,
                      decode_text, encode_text)

HOST = "127.0.0.1"
PORT = 1234


class ScoreClient:
    def __init__(self, host=HOST, port=PORT):
        self.server = (host, port)
        self._sock  = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    def close(self):
        self._sock.close()

    def _send(self, text):
        self._sock.sendto(encode_text(text), self.server)

    def request_scores(self):
        self._send(GET_KEYWORD)

    def submit_score(self, name, score):
        name = name.strip()
        if not name:
            raise ValueError("No name entered")
        if SEPARATOR in name:
            raise ValueError(f"Name may not contain '{SEPARATOR}'")
        self._send(format_score_request(name, parse_score(str(score))))

    def receive(self, timeout=None):
        """Wait for one HIGH$$ reply and return its entries (socket.timeout on expiry)."""
        self._sock.settimeout(timeout)
        while True:
            data, addr = self._sock.recvfrom(BUFSIZE)
            text = decode_text(data)
            if text.startswith(HIGH_PREFIX):
                return decode_scores(text)

    def get_scores(self, timeout=2.0):
        self.request_scores()
        return self.receive(timeout)


def fetch_scores(host=HOST, port=PORT, timeout=2.0):
    client = ScoreClient(host, port)
    try:
        return client.get_scores(timeout)
    finally:
        client.close()


def format_leaderboard(entries):
    lines = ["=" * 36, f"{'HIGH SCORES':^36}", "=" * 36,
             f"{'#':<4} {'Name':<20} {'Score':>8}", "-" * 36]
    for rank, e in enumerate(entries, 1):
        lines.append(f"{rank:<4} {e.name:<20} {e.score:>8}")
    if not entries:
        lines.append(f"{'(no scores yet)':^36}")
    lines.append("=" * 36)
    return "\n".join(lines)


def listen(client, stop):
    while not stop.is_set():
        try:
            entries = client.receive(timeout=0.5)
        except socket.timeout:
            continue
        except ProtocolError as e:
            print(f"\nProblem parsing high scores: {e}")
            continue
        except OSError:
            break
        print("\n" + format_leaderboard(entries))


def interactive_menu(client):
    print("\n=== High-Score Client ===")
    print(f"Server: {client.server[0]}:{client.server[1]}")
    stop = threading.Event()
    threading.Thread(target=listen, args=(client, stop), daemon=True).start()
    try:
        while True:
            print("\n[1] Submit score   [2] Get scores   [Q] Quit")
            choice = input("Choice: ").strip().lower()

            if choice == "1":
                name  = input("Name: ")
                score = input("Score: ").strip()
                try:
                    client.submit_score(name, score)
                    print(f"Sent {name.strip()} & {score}")
                except ValueError as e:
                    print(f"Send score error: {e}")
            elif choice == "2":
                client.request_scores()
                print("Sent a get command")
            elif choice in ("q", "quit", "exit"):
                print("Goodbye!")
                break
            else:
                print("Unknown option.")
    finally:
        stop.set()


if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="UDP high-score client")
    ap.add_argument("--host", default=HOST)
    ap.add_argument("--port", type=int, default=PORT)
    args = ap.parse_args()

    c = ScoreClient(args.host, args.port)
    try:
        interactive_menu(c)
    except KeyboardInterrupt:
        print("\nInterrupted.")
    finally:
        c.close()
