"""
High-Score Store
==================
Top-10 ranked list of (name, score) entries with write-through persistence.

The score file holds the same text the server sends in reply to 'get', so
it can be read back with the wire decoder.
"""

import logging, os, tempfile

from protocol import ScoreEntry, ProtocolError, encode_scores, decode_scores

MAX_SCORES  = 10
SCORES_FILE = "scores.txt"

log = logging.getLogger("highscores")


class HighScores:
    """Scores sorted high to low; equal scores keep their arrival order."""

    def __init__(self, capacity=MAX_SCORES):
        self.capacity = capacity
        self._entries = []

    def insert(self, name, score):
        """
        Add an entry and drop the lowest one if over capacity.
        Returns the 1-based rank it landed at, 0 if it did not make the list.
        """
        pos = len(self._entries)
        for i, e in enumerate(self._entries):
            if e.score < score:
                pos = i
                break
        self._entries.insert(pos, ScoreEntry(name, score))
        if len(self._entries) > self.capacity:
            self._entries.pop()
        return pos + 1 if pos < self.capacity else 0

    def snapshot(self):
        return tuple(self._entries)

    def serialize(self):
        return encode_scores(self._entries)

    @classmethod
    def deserialize(cls, text, capacity=MAX_SCORES):
        store = cls(capacity)
        if text.strip():
            for e in decode_scores(text):
                store.insert(e.name, e.score)
        return store

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self.snapshot())

    def __repr__(self):
        return f"HighScores({list(self._entries)!r})"


def _set_aside(path):
    bad_path = path + ".bad"
    try:
        os.replace(path, bad_path)
    except OSError as e:
        log.warning(f"Could not move {path} to {bad_path}: {e}")
        return None
    return bad_path


def load_scores(path=SCORES_FILE, capacity=MAX_SCORES):
    """Missing or empty file gives an empty store; a corrupt one is set aside."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            store = HighScores.deserialize(f.read(), capacity)
    except FileNotFoundError:
        log.info(f"No score file at {path}; starting empty")
        return HighScores(capacity)
    except (UnicodeDecodeError, ProtocolError) as e:
        bad_path = _set_aside(path)
        log.warning(f"Score file {path} unreadable ({e}); "
                    f"{'moved to ' + bad_path if bad_path else 'left in place'}, starting empty")
        return HighScores(capacity)

    log.info(f"Loaded {len(store)} scores from {path}")
    return store


def save_scores(store, path=SCORES_FILE):
    """Atomically replace the score file. Returns False if the write failed."""
    dir_name = os.path.dirname(path) or "."
    temp_path = None
    try:
        os.makedirs(dir_name, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=dir_name, prefix=".scores.", text=True)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(store.serialize())
        os.replace(temp_path, path)
        return True
    except OSError as e:
        log.warning(f"Could not save scores to {path}: {e}")
        return False
    finally:
        if temp_path and os.path.exists(temp_path):
            os.remove(temp_path)
