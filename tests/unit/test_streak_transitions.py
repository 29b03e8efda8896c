"""Streak state machine: consecutive days, freeze bridging, resets."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from finmimo.gamification.streak_service import (
    StreakState,
    advance_streak,
    effective_current,
    utc_today,
)

DAY1 = date(2026, 3, 2)
NEW = StreakState(current=0, longest=0, last_active_date=None, freeze_count=1)


def _day(n: int) -> date:
    return DAY1 + timedelta(days=n - 1)


class TestAdvanceStreak:
    def test_first_activity(self):
        s = advance_streak(NEW, _day(1))
        assert (s.current, s.longest, s.last_active_date) == (1, 1, _day(1))

    def test_consecutive_day(self):
        s = advance_streak(advance_streak(NEW, _day(1)), _day(2))
        assert (s.current, s.longest) == (2, 2)

    def test_freeze_bridges_one_missed_day(self):
        s = advance_streak(advance_streak(NEW, _day(1)), _day(2))
        s = advance_streak(s, _day(4))
        assert (s.current, s.longest, s.freeze_count) == (3, 3, 0)
        assert s.last_active_date == _day(4)

    def test_two_missed_days_reset(self):
        s = advance_streak(advance_streak(NEW, _day(1)), _day(2))
        s = advance_streak(s, _day(5))
        assert s.current == 1
        assert s.longest == 2
        assert s.freeze_count == 1

    def test_one_missed_day_without_freeze_resets(self):
        s = StreakState(current=4, longest=4, last_active_date=_day(1), freeze_count=0)
        s = advance_streak(s, _day(3))
        assert (s.current, s.longest, s.freeze_count) == (1, 4, 0)

    def test_same_day_is_noop(self):
        s = advance_streak(NEW, _day(1))
        assert advance_streak(s, _day(1)) == s

    def test_longest_never_below_current(self):
        s = NEW
        for n in (1, 2, 3, 7, 8):
            s = advance_streak(s, _day(n))
            assert s.longest >= s.current
        assert (s.current, s.longest) == (2, 3)


class TestCalendarDays:
    def test_time_of_day_is_irrelevant(self):
        """23:59 then 00:01 the next day is a one-day gap."""
        late = datetime(2026, 3, 2, 23, 59, tzinfo=timezone.utc)
        early = datetime(2026, 3, 3, 0, 1, tzinfo=timezone.utc)
        s = advance_streak(NEW, utc_today(late))
        s = advance_streak(s, utc_today(early))
        assert s.current == 2

    def test_utc_today_normalizes_offsets(self):
        tz = timezone(timedelta(hours=-5))
        assert utc_today(datetime(2026, 3, 2, 21, 0, tzinfo=tz)) == date(2026, 3, 3)


class TestEffectiveCurrent:
    def test_never_active(self):
        assert effective_current(NEW, _day(1)) == 0

    def test_active_today_or_yesterday(self):
        s = StreakState(current=5, longest=5, last_active_date=_day(3), freeze_count=0)
        assert effective_current(s, _day(3)) == 5
        assert effective_current(s, _day(4)) == 5

    def test_freeze_keeps_it_alive_one_more_day(self):
        s = StreakState(current=5, longest=5, last_active_date=_day(3), freeze_count=1)
        assert effective_current(s, _day(5)) == 5
        assert effective_current(s, _day(6)) == 0

    def test_broken_without_freeze(self):
        s = StreakState(current=5, longest=5, last_active_date=_day(3), freeze_count=0)
        assert effective_current(s, _day(5)) == 0
