from ratings import MAX_SCORE, Rating, from_symbol, parse_rating, rating_score


def test_scale_order_and_scores():
    assert [r.value for r in Rating] == ["EASILY_MEETING", "MEETING", "NEEDS_PRACTICE"]
    assert [r.score for r in Rating] == [3, 2, 1]
    assert MAX_SCORE == 3


def test_symbols_and_labels():
    assert Rating.EASILY_MEETING.symbol == "+"
    assert Rating.MEETING.symbol == "="
    assert Rating.NEEDS_PRACTICE.symbol == "x"
    assert Rating.MEETING.label == "Meeting Expectations"
    assert Rating.EASILY_MEETING.short_label == "Easily Meeting"


def test_parse_rating_tolerates_unknown_values():
    assert parse_rating("MEETING") is Rating.MEETING
    assert parse_rating(Rating.MEETING) is Rating.MEETING
    assert parse_rating("meeting") is None
    assert parse_rating(None) is None
    assert rating_score("LEGACY") is None
    assert rating_score("NEEDS_PRACTICE") == 1


def test_from_symbol():
    assert from_symbol("+") is Rating.EASILY_MEETING
    assert from_symbol(" X ") is Rating.NEEDS_PRACTICE
    assert from_symbol("?") is None
    assert from_symbol(None) is None


def test_choices_feed_the_form_select():
    assert Rating.choices()[0] == ("EASILY_MEETING", "Easily Meeting Expectations")
    assert Rating.values() == ("EASILY_MEETING", "MEETING", "NEEDS_PRACTICE")
