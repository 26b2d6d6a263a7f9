import bz2
import pytest
from barcode_deconvolver.hits import (Hit, HitError, SourceExhaustedEarly, ReadHitGroup, check_hit,
    parse_fuzznuc_line, iter_fuzznuc_hits, iter_fuzznuc_report, group_hits,
    filter_redundant_hits, merge_overlapping_hits)

EXCEL = """SeqName\tStart\tEnd\tLength\tStrand\tPattern_name\tMismatch
read_1\t5\t26\t22\t+\tBC01 <mismatch=2>\t.
read_1\t171\t192\t22\t-\tBC01 <mismatch=2>\t1
read_2\t1\t22\t22\t+\tBC02 <mismatch=2>\t2
"""

REPORT = """########################################
# Program: fuzznuc
########################################

#=======================================
#
# Sequence: read_1     from: 1   to: 200
# HitCount: 2
#=======================================

  Start     End  Pattern_name  Mismatch  Sequence
      5      26  BC01                 .  ACGTACGTACGTACGTACGTAC
    192     171  BC01                 1  GTACGTACGTACGTACGTACGT

#=======================================
#
# Sequence: read_2     from: 1   to: 120
# HitCount: 1
#=======================================

  Start     End  Pattern_name  Mismatch  Sequence
      1      22  BC02                 2  ACGTACGTACGTACGTACGTAC
"""


class TestHit:
    """Hit records."""

    def test_length_and_location(self, hit):
        h = hit(10, 30, '-', 'BC9', 2)
        assert h.length == 20
        assert h.location() == 'BC9:10..30:-:2'

    def test_csv_round_trip(self, hit):
        h = hit(10, 30, '-', 'BC9', 2)
        assert parse_fuzznuc_line(h.to_csv_string()) == h

    @pytest.mark.parametrize('min,max,strand,mismatches', [(30, 30, '+', 0), (31, 30, '+', 0),
                                                           (10, 30, '*', 0), (10, 30, '+', -1)])
    def test_check_hit_rejects(self, min, max, strand, mismatches):
        with pytest.raises(HitError):
            check_hit(Hit('r', min, max, strand, 'A', mismatches))


class TestFuzznucParsing:
    """fuzznuc 'excel' & report output."""

    def test_parse_line(self):
        line = 'read_1\t5\t26\t22\t+\tBC01 <mismatch=2>\t.\n'
        assert parse_fuzznuc_line(line) == Hit('read_1', 4, 26, '+', 'BC01', 0)

    def test_parse_line_reversed_coordinates(self):
        line = 'read_1\t192\t171\t22\t-\tBC01\t1'
        assert parse_fuzznuc_line(line) == Hit('read_1', 170, 192, '-', 'BC01', 1)

    def test_parse_line_too_few_columns(self):
        with pytest.raises(HitError):
            parse_fuzznuc_line('read_1\t5\t26\n')

    def test_parse_line_bad_number(self):
        with pytest.raises(HitError):
            parse_fuzznuc_line('read_1\tfive\t26\t22\t+\tBC01\t0')

    def test_iter_hits_skips_header(self, tmp_path):
        f = tmp_path / 'hits.csv'
        f.write_text(EXCEL)
        hits = list(iter_fuzznuc_hits(f))
        assert [h.read_id for h in hits] == ['read_1', 'read_1', 'read_2']
        assert hits[1] == Hit('read_1', 170, 192, '-', 'BC01', 1)

    def test_iter_hits_multiple_compressed_files(self, tmp_path):
        first, second = tmp_path / 'a.csv', tmp_path / 'b.csv.bz2'
        first.write_text(EXCEL)
        with bz2.open(str(second), 'wt') as f:
            f.write('read_3\t1\t22\t22\t+\tBC03\t0\n\n')
        hits = list(iter_fuzznuc_hits([str(first), str(second)]))
        assert len(hits) == 4
        assert hits[-1].pattern == 'BC03'

    def test_iter_report(self, tmp_path):
        f = tmp_path / 'hits.fuzznuc'
        f.write_text(REPORT)
        hits = list(iter_fuzznuc_report(f))
        assert hits == [Hit('read_1', 4, 26, '+', 'BC01', 0),
                        Hit('read_1', 170, 192, '-', 'BC01', 1),
                        Hit('read_2', 0, 22, '+', 'BC02', 2)]


class TestGroupHits:
    """Grouping of contiguous hits by read."""

    def test_groups(self, hit):
        hits = [hit(0, 10, read_id='a'), hit(20, 30, read_id='a'), hit(0, 10, read_id='b')]
        groups = list(group_hits(hits))
        assert [g.read_id for g in groups] == ['a', 'b']
        assert groups[0] == ReadHitGroup('a', hits[:2])

    def test_reappearing_read_is_a_new_group(self, hit):
        hits = [hit(0, 10, read_id='a'), hit(0, 10, read_id='b'), hit(20, 30, read_id='a')]
        assert [g.read_id for g in group_hits(hits)] == ['a', 'b', 'a']

    def test_empty(self):
        assert list(group_hits([])) == []

    def test_lazy(self, hit):
        def source():
            yield hit(0, 10, read_id='a')
            yield hit(0, 10, read_id='b')
            raise AssertionError("read too far")
        groups = group_hits(source())
        assert next(groups).read_id == 'a'

    def test_source_failure(self, hit):
        def source():
            yield hit(0, 10, read_id='a')
            raise IOError("disk on fire")
        with pytest.raises(SourceExhaustedEarly) as e:
            list(group_hits(source()))
        assert isinstance(e.value.__cause__, IOError)


class TestRedundantHits:
    """Duplicate & overlapping hit handling."""

    def test_filter_duplicates(self, hit):
        a = hit(0, 10)
        with pytest.warns(UserWarning):
            assert list(filter_redundant_hits([a, a, hit(0, 10, '-')])) == [a, hit(0, 10, '-')]

    def test_filter_warns_once_per_read(self, hit):
        a, b = hit(0, 10, read_id='a'), hit(0, 10, read_id='b')
        with pytest.warns(UserWarning) as record:
            assert list(filter_redundant_hits([a, a, a, b, b])) == [a, b]
        assert [str(w.message) for w in record] == [
            'Dropped 2 duplicate hit(s) to read a.', 'Dropped 1 duplicate hit(s) to read b.']

    def test_filter_keeps_other_patterns_at_same_location(self, hit):
        hits = [hit(0, 10, pattern='A'), hit(0, 10, pattern='B')]
        assert list(filter_redundant_hits(hits)) == hits

    def test_filter_per_read(self, hit):
        hits = [hit(0, 10, read_id='a'), hit(0, 10, read_id='b')]
        assert list(filter_redundant_hits(hits)) == hits

    def test_merge_overlapping(self, hit):
        hits = [hit(0, 22, num_mismatches=2), hit(1, 23, num_mismatches=0), hit(150, 172, '-')]
        assert merge_overlapping_hits(hits) == [hit(0, 23, num_mismatches=0), hit(150, 172, '-')]

    def test_merge_keeps_strands_and_patterns_apart(self, hit):
        hits = [hit(0, 22, '+'), hit(1, 23, '-'), hit(2, 24, '+', pattern='B')]
        assert len(merge_overlapping_hits(hits)) == 3
