"""
High-Score UDP Server
=======================
Single-threaded UDP server keeping a top-10 high-score list:
  - Each datagram is self-contained; replies go to the sender's address
  - Ranked insertion with a fixed capacity of 10
  - Write-through persistence after every request (atomic file replace)
  - Request counters logged on shutdown

Usage:  python server.py [--port 1234] [--scores-file scores.txt]
"""

import socket, time, logging, argparse, sys

from protocol import (BUFSIZE, GetRequest, ScoreRequest, ProtocolError,
                      parse_request, decode_text, encode_text, encode_scores)
from highscores import SCORES_FILE, load_scores, save_scores

HOST, PORT = "0.0.0.0", 1234

log = logging.getLogger("server")


class DatagramTransport:
    """Bound UDP endpoint; blocking receive, reply to any address."""

    def __init__(self, host=HOST, port=PORT, bufsize=BUFSIZE, timeout=None):
        self.host, self.port = host, port
        self.bufsize = bufsize
        self.timeout = timeout
        self._sock = None

    def bind(self):
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind((self.host, self.port))
            sock.settimeout(self.timeout)
        except OSError:
            sock.close()
            raise
        self._sock = sock
        return self

    @property
    def address(self):
        return self._sock.getsockname()

    def receive(self):
        return self._sock.recvfrom(self.bufsize)

    def send(self, address, data):
        self._sock.sendto(data, address)

    def close(self):
        if self._sock:
            self._sock.close()
            self._sock = None

    def __enter__(self):
        return self.bind()

    def __exit__(self, *exc):
        self.close()


class ScoreServer:
    """
    Service context: one transport, one store, one score file.

    Loop per datagram: receive -> decode -> apply -> reply (get only) -> save.
    """

    def __init__(self, transport, store, scores_file=SCORES_FILE):
        self.transport   = transport
        self.store       = store
        self.scores_file = scores_file
        self._counts = {"get": 0, "score": 0, "rejected": 0, "ignored": 0, "send_errors": 0}
        self._start_time = time.time()

    def handle(self, payload, address):
        """Apply one datagram to the store. Returns reply bytes, or None."""
        text = decode_text(payload)
        log.debug(f"Packet from {address}: {text!r}")
        try:
            request = parse_request(text)
        except ProtocolError as e:
            self._counts["rejected"] += 1
            log.warning(f"Dropped malformed score from {address}: {e}")
            return None

        if isinstance(request, GetRequest):
            self._counts["get"] += 1
            log.info(f"Processing 'get' from {address}")
            return encode_text(encode_scores(self.store.snapshot()))
        if isinstance(request, ScoreRequest):
            self._counts["score"] += 1
            rank = self.store.insert(request.name, request.score)
            log.info(f"Processing 'score' {request.name}={request.score} from {address} "
                     f"(rank {rank or '-'})")
            return None

        self._counts["ignored"] += 1
        log.info(f"Ignoring input from {address}: {text[:40]!r}")
        return None

    def serve_once(self):
        payload, address = self.transport.receive()
        t0 = time.perf_counter()
        reply = self.handle(payload, address)
        if reply is not None:
            try:
                self.transport.send(address, reply)
            except OSError as e:
                self._counts["send_errors"] += 1
                log.warning(f"Reply to {address} failed: {e}")
        save_scores(self.store, self.scores_file)
        log.debug(f"Request done in {(time.perf_counter() - t0) * 1000:.3f} ms")

    def serve_forever(self):
        log.info(f"High-score server on {self.transport.address[0]}:{self.transport.address[1]}")
        try:
            while True:
                self.serve_once()
        except KeyboardInterrupt:
            log.info("Interrupted")
        finally:
            s = self.stats()
            log.info(f"STATS | Gets:{s['get']} Scores:{s['score']} Rejected:{s['rejected']} "
                     f"Ignored:{s['ignored']} SendErrors:{s['send_errors']} "
                     f"Rate:{s['requests_per_sec']}/s")
            log.info("Server stopped.")

    def stats(self):
        elapsed = time.time() - self._start_time
        total = sum(self._counts.values()) - self._counts["send_errors"]
        return {
            **self._counts,
            "uptime_seconds"   : round(elapsed, 2),
            "requests_per_sec" : round(total / max(elapsed, 1), 2),
        }


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="UDP high-score server")
    ap.add_argument("--host", default=HOST)
    ap.add_argument("--port", type=int, default=PORT)
    ap.add_argument("--scores-file", default=SCORES_FILE)
    ap.add_argument("--log-level", default="INFO",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return ap.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level,
                        format="%(asctime)s [%(levelname)s] %(message)s",
                        datefmt="%H:%M:%S")

    store = load_scores(args.scores_file)
    transport = DatagramTransport(args.host, args.port)
    try:
        transport.bind()
    except OSError as e:
        log.error(f"Cannot bind {args.host}:{args.port}: {e}")
        return 1

    try:
        ScoreServer(transport, store, args.scores_file).serve_forever()
    except OSError as e:
        log.error(f"Transport failure: {e}")
        return 1
    finally:
        transport.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
