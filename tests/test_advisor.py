from datetime import datetime, timedelta, timezone

import pytest

from dinnerlog.services.advisor import (
    RepeatServingAdvisor,
    ServingRecord,
    RepeatAlert,
    DishServingSummary,
    InvalidArgument,
    collapse_repeats,
    summarize_dishes,
    months_before,
    window_start,
)

NOW = datetime(2024, 6, 15, 19, 0)


def record(guest_id, dish_id, event_id, served_at, title=None):
    return ServingRecord(guest_id=guest_id, dish_id=dish_id, event_id=event_id,
                         event_title=title or f'Event {event_id}', served_at=served_at)


class FakeSource:
    """Serving-record source that ignores filters and counts calls."""

    def __init__(self, records):
        self.records = records
        self.calls = []

    def __call__(self, user_id, since=None, guest_ids=None, dish_ids=None):
        self.calls.append({'user_id': user_id, 'since': since, 'guest_ids': guest_ids, 'dish_ids': dish_ids})
        return list(self.records)


# ── Month arithmetic ─────────────────────────────────────────────────────


def test_months_before_same_day():
    assert months_before(datetime(2024, 6, 15, 19, 0), 3) == datetime(2024, 3, 15, 19, 0)


def test_months_before_crosses_year():
    assert months_before(datetime(2024, 2, 10), 3) == datetime(2023, 11, 10)


def test_months_before_clamps_day():
    assert months_before(datetime(2024, 5, 31), 3) == datetime(2024, 2, 29)
    assert months_before(datetime(2023, 5, 31), 3) == datetime(2023, 2, 28)


def test_window_start_timedelta():
    assert window_start(NOW, timedelta(days=10)) == NOW - timedelta(days=10)


@pytest.mark.parametrize('window', [-1, 'three', True, timedelta(days=-1)])
def test_window_start_rejects_bad_window(window):
    with pytest.raises(InvalidArgument):
        window_start(NOW, window)


# ── find_repeat_alerts ───────────────────────────────────────────────────


def test_no_candidates_means_no_alerts():
    source = FakeSource([record(1, 1, 1, NOW - timedelta(days=1))])
    advisor = RepeatServingAdvisor(source)

    assert advisor.find_repeat_alerts('u1', [], [1], now=NOW) == []
    assert advisor.find_repeat_alerts('u1', [1], [], now=NOW) == []
    assert source.calls == []


def test_window_lower_bound_is_inclusive():
    boundary = months_before(NOW, 3)
    source = FakeSource([
        record(1, 1, 1, boundary, 'On the edge'),
        record(2, 1, 2, boundary - timedelta(days=1), 'Too old'),
    ])
    advisor = RepeatServingAdvisor(source)

    alerts = advisor.find_repeat_alerts('u1', [1, 2], [1], now=NOW)

    assert alerts == [RepeatAlert(guest_id=1, dish_id=1, last_served=boundary, event_title='On the edge')]
    assert source.calls[0]['since'] == boundary


def test_window_excluding_everything_returns_empty_list():
    source = FakeSource([record(1, 1, 1, NOW - timedelta(days=200))])
    advisor = RepeatServingAdvisor(source)

    assert advisor.find_repeat_alerts('u1', [1], [1], now=NOW) == []


def test_repeats_collapse_to_most_recent():
    d1, d2, d3 = NOW - timedelta(days=60), NOW - timedelta(days=30), NOW - timedelta(days=5)
    source = FakeSource([
        record(7, 3, 10, d2, 'Spring supper'),
        record(7, 3, 11, d3, 'Birthday'),
        record(7, 3, 12, d1, 'Potluck'),
    ])
    advisor = RepeatServingAdvisor(source)

    alerts = advisor.find_repeat_alerts('u1', {7}, {3}, now=NOW)

    assert alerts == [RepeatAlert(guest_id=7, dish_id=3, last_served=d3, event_title='Birthday')]


def test_alerts_ordered_newest_first():
    source = FakeSource([
        record(1, 1, 1, datetime(2024, 1, 1)),
        record(2, 1, 2, datetime(2024, 3, 1)),
        record(3, 1, 3, datetime(2024, 2, 1)),
    ])
    advisor = RepeatServingAdvisor(source, window=12)

    alerts = advisor.find_repeat_alerts('u1', [1, 2, 3], [1], now=NOW)

    assert [a.last_served for a in alerts] == [datetime(2024, 3, 1), datetime(2024, 2, 1), datetime(2024, 1, 1)]


def test_alert_ties_break_on_guest_then_dish():
    same_day = NOW - timedelta(days=3)
    source = FakeSource([
        record(2, 5, 1, same_day),
        record(1, 9, 1, same_day),
        record(1, 5, 1, same_day),
    ])
    advisor = RepeatServingAdvisor(source)

    alerts = advisor.find_repeat_alerts('u1', [1, 2], [5, 9], now=NOW)

    assert [(a.guest_id, a.dish_id) for a in alerts] == [(1, 5), (1, 9), (2, 5)]


def test_same_date_pair_uses_lowest_event_title():
    same_day = NOW - timedelta(days=3)
    records = [record(1, 1, 8, same_day, 'Late entry'), record(1, 1, 4, same_day, 'Early entry')]

    alerts = collapse_repeats(records, {1}, {1}, NOW - timedelta(days=30))

    assert alerts[0].event_title == 'Early entry'


def test_non_candidate_records_are_ignored():
    records = [
        record(1, 1, 1, NOW - timedelta(days=1)),
        record(1, 2, 1, NOW - timedelta(days=1)),
        record(3, 1, 1, NOW - timedelta(days=1)),
    ]

    alerts = collapse_repeats(records, {1}, {1}, NOW - timedelta(days=30))

    assert [(a.guest_id, a.dish_id) for a in alerts] == [(1, 1)]


def test_explicit_window_overrides_default():
    source = FakeSource([record(1, 1, 1, NOW - timedelta(days=20))])
    advisor = RepeatServingAdvisor(source)

    assert advisor.find_repeat_alerts('u1', [1], [1], window=timedelta(days=7), now=NOW) == []
    assert len(advisor.find_repeat_alerts('u1', [1], [1], window=1, now=NOW)) == 1


def test_repeat_alerts_are_idempotent():
    source = FakeSource([
        record(1, 1, 1, NOW - timedelta(days=3)),
        record(2, 1, 2, NOW - timedelta(days=3)),
        record(1, 2, 3, NOW - timedelta(days=9)),
    ])
    advisor = RepeatServingAdvisor(source)

    first = advisor.find_repeat_alerts('u1', [1, 2], [1, 2], now=NOW)
    second = advisor.find_repeat_alerts('u1', [1, 2], [1, 2], now=NOW)

    assert first == second


def test_aware_now_is_compared_as_utc():
    source = FakeSource([
        record(1, 1, 1, datetime(2024, 3, 15, 12, 0), 'Edge dinner'),
        record(1, 2, 2, datetime(2024, 3, 15, 9, 0), 'Too early'),
    ])
    advisor = RepeatServingAdvisor(source)
    aware_now = datetime(2024, 6, 15, 14, 0, tzinfo=timezone(timedelta(hours=2)))

    alerts = advisor.find_repeat_alerts('u1', [1], [1, 2], now=aware_now)

    assert alerts == [RepeatAlert(guest_id=1, dish_id=1, last_served=datetime(2024, 3, 15, 12, 0),
                                  event_title='Edge dinner')]
    assert source.calls[0]['since'] == datetime(2024, 3, 15, 12, 0)


@pytest.mark.parametrize('guest_ids', [[0], [-3], ['1'], [1.5], [True], 'abc', 5])
def test_malformed_ids_rejected(guest_ids):
    advisor = RepeatServingAdvisor(FakeSource([]))
    with pytest.raises(InvalidArgument):
        advisor.find_repeat_alerts('u1', guest_ids, [1], now=NOW)


def test_missing_user_rejected():
    advisor = RepeatServingAdvisor(FakeSource([]))
    with pytest.raises(InvalidArgument):
        advisor.find_repeat_alerts('', [1], [1], now=NOW)


# ── recently_served_dishes ───────────────────────────────────────────────


def test_summary_counts_records_and_keeps_latest_date():
    source = FakeSource([
        record(1, 4, 1, datetime(2024, 1, 5)),
        record(2, 4, 1, datetime(2024, 1, 5)),
        record(1, 4, 2, datetime(2024, 4, 2)),
        record(1, 6, 2, datetime(2024, 4, 2)),
    ])
    advisor = RepeatServingAdvisor(source)

    summaries = advisor.recently_served_dishes('u1')

    assert summaries == [
        DishServingSummary(dish_id=4, last_served=datetime(2024, 4, 2), times_served=3),
        DishServingSummary(dish_id=6, last_served=datetime(2024, 4, 2), times_served=1),
    ]


def test_summary_counts_every_guest_at_one_dinner():
    same_day = datetime(2024, 2, 1)
    records = [record(guest_id, 4, 1, same_day) for guest_id in (1, 2, 3)]

    summaries = summarize_dishes(records, 10)

    assert summaries == [DishServingSummary(dish_id=4, last_served=same_day, times_served=3)]


def test_recently_served_is_idempotent():
    source = FakeSource([
        record(1, 4, 1, datetime(2024, 1, 5)),
        record(2, 6, 2, datetime(2024, 3, 9)),
        record(1, 6, 3, datetime(2024, 2, 1)),
    ])
    advisor = RepeatServingAdvisor(source)

    first = advisor.recently_served_dishes('u1', 5)
    second = advisor.recently_served_dishes('u1', 5)

    assert first == second
    assert [s.dish_id for s in first] == [6, 4]


def test_limit_applies_after_aggregation():
    records = [record(1, dish_id, dish_id, datetime(2024, 1, dish_id)) for dish_id in range(1, 16)]
    advisor = RepeatServingAdvisor(FakeSource(records))

    summaries = advisor.recently_served_dishes('u1', 10)

    assert len(summaries) == 10
    assert [s.dish_id for s in summaries] == list(range(15, 5, -1))


def test_limit_tie_at_cutoff_keeps_lower_dish_id():
    same_day = datetime(2024, 2, 1)
    records = [record(1, dish_id, 1, same_day) for dish_id in (12, 3, 7)]

    summaries = summarize_dishes(records, 2)

    assert [s.dish_id for s in summaries] == [3, 7]


def test_default_limit_is_ten():
    records = [record(1, dish_id, dish_id, datetime(2024, 1, dish_id)) for dish_id in range(1, 16)]
    advisor = RepeatServingAdvisor(FakeSource(records))

    assert len(advisor.recently_served_dishes('u1')) == 10


def test_no_history_means_no_summaries():
    advisor = RepeatServingAdvisor(FakeSource([]))
    assert advisor.recently_served_dishes('u1', 5) == []


@pytest.mark.parametrize('limit', [0, -1, '10', 2.5, False])
def test_bad_limit_rejected(limit):
    advisor = RepeatServingAdvisor(FakeSource([]))
    with pytest.raises(InvalidArgument):
        advisor.recently_served_dishes('u1', limit)
