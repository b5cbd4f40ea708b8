"""Tests for tail attribution and the tier-2 overtime fold."""

from decimal import Decimal

from overtime_tool.engine.allocator import allocate_day, split_overtime_tiers, split_work
from overtime_tool.models import EntryClass

W, B, P = EntryClass.WORK, EntryClass.BREAK, EntryClass.PTO


def _d(value) -> Decimal:
    return Decimal(str(value))


class TestSplitWork:
    def test_fits_under_capacity(self):
        s = split_work(_d(3), _d(2), _d(8))
        assert (s.regular, s.overtime) == (_d(3), _d(0))

    def test_crosses_boundary(self):
        s = split_work(_d(4), _d(6), _d(8))
        assert (s.regular, s.overtime) == (_d(2), _d(2))

    def test_already_over_capacity(self):
        s = split_work(_d(2), _d(9), _d(8))
        assert (s.regular, s.overtime) == (_d(0), _d(2))

    def test_exactly_at_capacity(self):
        s = split_work(_d(2), _d(6), _d(8))
        assert (s.regular, s.overtime) == (_d(2), _d(0))


class TestAllocateDay:
    def test_breaks_do_not_count_toward_capacity(self):
        # 3h work, 2h break, 5h work against an 8h day: 10h regular, no overtime
        splits = allocate_day([(W, _d(3)), (B, _d(2)), (W, _d(5))], _d(8))
        assert [s.regular for s in splits] == [_d(3), _d(2), _d(5)]
        assert [s.overtime for s in splits] == [_d(0), _d(0), _d(0)]

    def test_overtime_goes_to_last_entries(self):
        splits = allocate_day([(W, _d(4)), (W, _d(3)), (W, _d(3))], _d(8))
        assert [(s.regular, s.overtime) for s in splits] == [
            (_d(4), _d(0)), (_d(3), _d(0)), (_d(1), _d(2)),
        ]

    def test_zero_capacity_makes_all_work_overtime(self):
        splits = allocate_day([(W, _d(4)), (P, _d(8))], _d(0))
        assert (splits[0].regular, splits[0].overtime) == (_d(0), _d(4))
        assert (splits[1].regular, splits[1].overtime) == (_d(8), _d(0))

    def test_pto_never_accumulates(self):
        splits = allocate_day([(P, _d(4)), (W, _d(6))], _d(6))
        assert splits[1].overtime == _d(0)

    def test_conservation(self):
        items = [(W, _d("2.25")), (B, _d("0.5")), (W, _d("5.5")), (P, _d(1)), (W, _d("3.75"))]
        splits = allocate_day(items, _d("7.5"))
        for (_, duration), split in zip(items, splits):
            assert split.regular + split.overtime == duration
        work_regular = sum(s.regular for (c, _), s in zip(items, splits) if c is W)
        assert work_regular <= _d("7.5")

    def test_empty_day(self):
        assert allocate_day([], _d(8)) == []


class TestTierSplit:
    def test_crosses_threshold(self):
        # 3h of prior overtime, threshold 4, 2h more: 1h tier-1, 1h tier-2
        t = split_overtime_tiers(_d(2), _d(3), _d(4), True)
        assert (t.tier1, t.tier2, t.accumulated) == (_d(1), _d(1), _d(5))

    def test_below_threshold(self):
        t = split_overtime_tiers(_d(1), _d(2), _d(4), True)
        assert (t.tier1, t.tier2, t.accumulated) == (_d(1), _d(0), _d(3))

    def test_already_past_threshold(self):
        t = split_overtime_tiers(_d(2), _d(5), _d(4), True)
        assert (t.tier1, t.tier2, t.accumulated) == (_d(0), _d(2), _d(7))

    def test_zero_threshold_is_all_tier2(self):
        t = split_overtime_tiers(_d(2), _d(0), _d(0), True)
        assert (t.tier1, t.tier2) == (_d(0), _d(2))

    def test_disabled_is_all_tier1_but_accumulates(self):
        t = split_overtime_tiers(_d(2), _d(3), _d(4), False)
        assert (t.tier1, t.tier2, t.accumulated) == (_d(2), _d(0), _d(5))

    def test_no_overtime(self):
        t = split_overtime_tiers(_d(0), _d(5), _d(4), True)
        assert (t.tier1, t.tier2, t.accumulated) == (_d(0), _d(0), _d(5))

    def test_fold_never_exceeds_threshold_in_tier1(self):
        accumulated = _d(0)
        tier1_total = _d(0)
        for overtime in (_d("1.5"), _d("2.25"), _d(3), _d("0.5")):
            t = split_overtime_tiers(overtime, accumulated, _d(4), True)
            assert t.tier1 + t.tier2 == overtime
            tier1_total += t.tier1
            accumulated = t.accumulated
        assert tier1_total == _d(4)
        assert accumulated == _d("7.25")
