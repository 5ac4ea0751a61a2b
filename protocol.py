"""
High-Score Wire Protocol
==========================
Plain-text datagrams shared by the server, the client and the score file.

Requests:
  get                       -- ask for the high-score list
  score <name> & <score> &  -- add a score for name (no reply)

Reply (to get only):
  HIGH$$ <name> & <score> & <name> & <score> & ...
"""

import re
from dataclasses import dataclass

BUFSIZE       = 1024          # max size of a datagram
ENCODING      = "utf-8"
HIGH_PREFIX   = "HIGH$$"
SEPARATOR     = "&"
SCORE_KEYWORD = "score"
GET_KEYWORD   = "get"
INT_MIN, INT_MAX = -2**31, 2**31 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+\Z")


class ProtocolError(ValueError):
    """Raised for wire text that looks like a known message but is malformed."""


@dataclass(frozen=True)
class ScoreEntry:
    name: str
    score: int


@dataclass(frozen=True)
class GetRequest:
    pass


@dataclass(frozen=True)
class ScoreRequest:
    name: str
    score: int


def decode_text(payload):
    """bytes -> str; truncated multi-byte sequences are replaced, never raised."""
    return payload.decode(ENCODING, errors="replace")


def encode_text(text):
    return text.encode(ENCODING)


def parse_score(raw):
    """Signed decimal digits only; int() alone would also take '1_000' or '٣'."""
    raw = raw.strip()
    if not _INT_RE.match(raw):
        raise ProtocolError(f"score is not an integer: {raw!r}")
    value = int(raw)
    if not INT_MIN <= value <= INT_MAX:
        raise ProtocolError(f"score out of range: {value}")
    return value


def parse_request(text):
    """
    Turn one datagram's text into a request.

    Returns GetRequest, ScoreRequest, or None for text that is neither.
    Raises ProtocolError for a 'score' message missing its '&' separators
    or carrying a bad score.
    """
    msg = text.strip()
    if msg.lower() == GET_KEYWORD:
        return GetRequest()
    if len(msg) >= 6 and msg[:5].lower() == SCORE_KEYWORD:
        parts = msg[5:].split(SEPARATOR, 2)
        if len(parts) < 3:
            raise ProtocolError(f"expected 'name & score &', got {msg[5:]!r}")
        return ScoreRequest(parts[0].strip(), parse_score(parts[1]))
    return None


def format_score_request(name, score):
    return f"{SCORE_KEYWORD} {name} {SEPARATOR} {score} {SEPARATOR}"


def encode_scores(entries):
    body = "".join(f"{e.name} {SEPARATOR} {e.score} {SEPARATOR} " for e in entries)
    return f"{HIGH_PREFIX} {body}"


def decode_scores(text):
    """Inverse of encode_scores; the HIGH$$ prefix is optional."""
    body = text.strip()
    if body.startswith(HIGH_PREFIX):
        body = body[len(HIGH_PREFIX):]
    tokens = [t.strip() for t in body.split(SEPARATOR)]
    # "a & 1 & " splits into [..., ""]: the trailing separator leaves one empty token
    if tokens and tokens[-1] == "":
        tokens.pop()
    if len(tokens) % 2:
        raise ProtocolError(f"unpaired name/score in {text!r}")
    return [ScoreEntry(tokens[i], parse_score(tokens[i + 1]))
            for i in range(0, len(tokens), 2)]
