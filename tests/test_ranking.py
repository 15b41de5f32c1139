from dnscouch.models import MILLISECOND
from dnscouch.ranking import rank

CATALOG = {"A": "alpha", "B": "bravo", "C": "charlie"}


def test_rank_sorts_ascending():
    averaged = {"A": 50 * MILLISECOND, "B": 10 * MILLISECOND, "C": 30 * MILLISECOND}
    assert [r.endpoint for r in rank(CATALOG, averaged)] == ["B", "C", "A"]


def test_rank_joins_descriptions_and_keeps_everything():
    averaged = {"A": 3, "B": 2, "C": 1, "D": 0}
    results = rank(CATALOG, averaged)
    assert len(results) == 4
    assert [(r.endpoint, r.description) for r in results] == [("D", ""), ("C", "charlie"), ("B", "bravo"), ("A", "alpha")]


def test_rank_is_idempotent_and_stable():
    averaged = {"C": 7, "A": 7, "B": 1}
    first = rank(CATALOG, averaged)
    assert first == rank(CATALOG, averaged)
    assert [r.endpoint for r in first] == ["B", "C", "A"]


def test_rank_carries_timeout_counts():
    results = rank(CATALOG, {"A": 1, "B": 2}, timeouts={"B": 3})
    assert [r.timeouts for r in results] == [0, 3]
