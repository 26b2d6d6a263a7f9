import pytest
from barcode_deconvolver.hits import HitError
from barcode_deconvolver.assign import classify, Unique, Ambiguous, is_ambiguous


class TestClassify:
    """Unique vs. ambiguous assignment of a read's hits."""

    def test_single_hit(self, hit):
        h = hit(10, 30, pattern='A')
        assert classify([h]) == Unique('A', [h])

    def test_same_pattern_sorted_by_mismatches(self, hit):
        worse, better = hit(10, 30, pattern='A', num_mismatches=2), hit(60, 80, '-', pattern='A', num_mismatches=0)
        assert classify([worse, better]) == Unique('A', [better, worse])

    def test_tied_patterns_are_ambiguous(self, hit):
        a, b = hit(10, 30, pattern='A'), hit(60, 80, pattern='B')
        outcome = classify([a, b])
        assert isinstance(outcome, Ambiguous)
        assert outcome.hits == [a, b]

    def test_lopsided_mismatches_still_ambiguous(self, hit):
        a, b = hit(10, 30, pattern='A', num_mismatches=0), hit(60, 80, pattern='B', num_mismatches=5)
        assert is_ambiguous(classify([b, a]))

    def test_ambiguous_keeps_every_hit(self, hit):
        hits = [hit(0, 20, pattern='A', num_mismatches=1), hit(30, 50, pattern='A', num_mismatches=0),
                hit(60, 80, pattern='B', num_mismatches=2)]
        outcome = classify(hits)
        assert is_ambiguous(outcome)
        assert [h.num_mismatches for h in outcome.hits] == [0, 1, 2]

    def test_stable_tie_break(self, hit):
        first, second = hit(10, 30, pattern='A', num_mismatches=1), hit(60, 80, pattern='A', num_mismatches=1)
        assert classify([first, second]).hits == [first, second]
        assert classify([second, first]).hits == [second, first]

    def test_accepts_iterables(self, hit):
        assert classify(iter([hit(10, 30)])).pattern == 'BC1'

    def test_empty_raises(self):
        with pytest.raises(HitError):
            classify([])

    def test_repeatable(self, hit):
        hits = [hit(10, 30, pattern='A', num_mismatches=2), hit(60, 80, pattern='A')]
        assert classify(hits) == classify(hits)
