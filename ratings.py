# ratings.py
"""The three-value rating scale shared by every report and form."""
import enum


class Rating(enum.Enum):
    EASILY_MEETING = "EASILY_MEETING"
    MEETING = "MEETING"
    NEEDS_PRACTICE = "NEEDS_PRACTICE"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def short_label(self) -> str:
        return _SHORT_LABELS[self]

    @property
    def score(self) -> int:
        return _SCORES[self]

    @classmethod
    def values(cls):
        return tuple(r.value for r in cls)

    @classmethod
    def choices(cls):
        return [(r.value, r.label) for r in cls]


_SYMBOLS = {
    Rating.EASILY_MEETING: "+",
    Rating.MEETING: "=",
    Rating.NEEDS_PRACTICE: "x",
}

_LABELS = {
    Rating.EASILY_MEETING: "Easily Meeting Expectations",
    Rating.MEETING: "Meeting Expectations",
    Rating.NEEDS_PRACTICE: "Needs Practice",
}

_SHORT_LABELS = {
    Rating.EASILY_MEETING: "Easily Meeting",
    Rating.MEETING: "Meeting",
    Rating.NEEDS_PRACTICE: "Needs Practice",
}

# highest = best
_SCORES = {
    Rating.EASILY_MEETING: 3,
    Rating.MEETING: 2,
    Rating.NEEDS_PRACTICE: 1,
}

MAX_SCORE = max(_SCORES.values())


def parse_rating(value):
    """Return the Rating for a wire value, or None if it is not one."""
    if isinstance(value, Rating):
        return value
    try:
        return Rating(value)
    except ValueError:
        return None


def from_symbol(symbol):
    s = (symbol or "").strip().lower()
    for r, sym in _SYMBOLS.items():
        if sym == s:
            return r
    return None


def rating_score(value):
    r = parse_rating(value)
    return r.score if r else None
