from __future__ import annotations

from collections import Counter

from conftest import make_show
from whatsontv.services.grouping_service import (
    collation_key,
    group_shows_by_network,
    sort_network_groups,
    sort_shows,
    sort_shows_by_name,
    sort_shows_by_time,
    sorted_network_names,
)


def test_grouping_keeps_every_show_including_duplicates() -> None:
    shows = [
        make_show(id=1, network="ABC"),
        make_show(id=2, network="NBC"),
        make_show(id=3, network="ABC"),
        make_show(id=4, network="Unknown Network"),
        make_show(id=1, network="ABC"),
    ]

    groups = group_shows_by_network(shows)

    flattened = [show for members in groups.values() for show in members]
    assert Counter(flattened) == Counter(shows)
    assert all(show.network == network for network, members in groups.items() for show in members)
    assert [show.id for show in groups["ABC"]] == [1, 3, 1]
    assert len(flattened) == len(shows)


def test_grouping_of_empty_input() -> None:
    assert group_shows_by_network([]) == {}


def test_time_sort_puts_unparseable_last_and_is_stable() -> None:
    shows = [
        make_show(id=1, airtime=None),
        make_show(id=2, airtime="21:00"),
        make_show(id=3, airtime="bogus"),
        make_show(id=4, airtime="8:00 PM"),
        make_show(id=5, airtime="20:00"),
    ]

    ordered = sort_shows_by_time(shows)

    assert [show.id for show in ordered] == [4, 5, 2, 1, 3]


def test_name_sort_is_case_insensitive() -> None:
    shows = [
        make_show(id=1, name="zebra"),
        make_show(id=2, name="Apple"),
        make_show(id=3, name="mango"),
    ]

    assert [show.name for show in sort_shows_by_name(shows)] == ["Apple", "mango", "zebra"]


def test_sort_shows_dispatches_on_order() -> None:
    shows = [make_show(id=1, name="B", airtime="19:00"), make_show(id=2, name="A", airtime="20:00")]

    assert [show.id for show in sort_shows(shows, "time")] == [1, 2]
    assert [show.id for show in sort_shows(shows, "name")] == [2, 1]


def test_network_names_use_collation_order() -> None:
    groups = {"nbc": [], "ABC": [], "Hulu": [], "abc": []}

    assert sorted_network_names(groups) == ["ABC", "abc", "Hulu", "nbc"]
    assert collation_key("ABC") < collation_key("abc")


def test_sort_network_groups_orders_keys_and_members() -> None:
    groups = {
        "NBC": [make_show(id=1, network="NBC", airtime="22:00"), make_show(id=2, network="NBC", airtime="20:00")],
        "ABC": [make_show(id=3, network="ABC")],
    }

    ordered = sort_network_groups(groups)

    assert list(ordered) == ["ABC", "NBC"]
    assert [show.id for show in ordered["NBC"]] == [2, 1]
