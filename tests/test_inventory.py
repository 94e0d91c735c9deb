from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from shop.inventory import (
    CardFilter, GroupedCard, apply_filters, card_number_key, distinct_values, filter_records,
    group_by_set, group_cards, identity_of, sort_records, stock_count,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def rec(id, name, set_name="Base Set", number="1", price="1.00", rarity="Common", condition="Near Mint",
        minutes=0):
    return {
        "id": id, "name": name, "set_name": set_name, "card_number": number, "price": Decimal(price),
        "rarity": rarity, "condition": condition, "created_at": T0 + timedelta(minutes=minutes),
    }


@pytest.fixture
def base_records():
    return [
        rec(1, "Pikachu", number="58"),
        rec(2, "Pikachu", number="58"),
        rec(3, "Charizard", number="4"),
    ]


def test_grouping_counts_every_record_once(base_records):
    records = base_records + [rec(4, "Pikachu", set_name="Jungle", number="60"), rec(5, "Charizard", number="4")]
    grouped = group_cards(records)

    assert sum(g.quantity for g in grouped) == len(records)
    identities = [g.identity for g in grouped]
    assert len(identities) == len(set(identities))
    assert {identity_of(r) for r in records} == set(identities)


def test_grouping_keeps_first_seen_order(base_records):
    first = [g.identity for g in group_cards(base_records)]
    second = [g.identity for g in group_cards(base_records)]
    assert first == second == [("Pikachu", "Base Set", "58"), ("Charizard", "Base Set", "4")]


def test_grouped_card_exposes_representative_fields(base_records):
    pikachu, charizard = group_cards(base_records)
    assert pikachu.quantity == 2
    assert charizard.quantity == 1
    assert pikachu.id == 1
    assert pikachu.name == "Pikachu"
    assert [v["id"] for v in pikachu.variants] == [1, 2]
    with pytest.raises(AttributeError):
        pikachu.no_such_field


def test_identity_is_exact_and_stringly(base_records):
    records = base_records + [rec(9, "pikachu", number="58"), {"name": "Pikachu", "set_name": "Base Set",
                                                              "card_number": 58}]
    grouped = group_cards(records)
    # case differs -> different card; int 58 and "58" are the same number
    assert [g.quantity for g in grouped] == [3, 1, 1]


def test_stock_count_matches_copies(base_records):
    assert stock_count(base_records, ("Pikachu", "Base Set", "58")) == 2
    assert stock_count(base_records, ("Charizard", "Base Set", "4")) == 1
    assert stock_count(base_records, ("Mew", "Base Set", "1")) == 0


def test_deleting_a_copy_reduces_quantity(base_records):
    remaining = [r for r in base_records if r["id"] != 1]
    pikachu, charizard = group_cards(remaining)
    assert (pikachu.quantity, charizard.quantity) == (1, 1)
    assert pikachu.id == 2


def test_empty_input_groups_to_nothing():
    assert group_cards([]) == []
    assert group_by_set([]) == {}


def test_group_by_set_sorts_sets():
    grouped = group_cards([rec(1, "Mew", set_name="jungle"), rec(2, "Abra", set_name="Base Set"),
                           rec(3, "Eevee", set_name="Fossil")])
    assert list(group_by_set(grouped)) == ["Base Set", "Fossil", "jungle"]


def test_distinct_values_skips_blanks():
    records = [rec(1, "A", rarity="Rare"), rec(2, "B", rarity=""), rec(3, "C", rarity="common"), rec(4, "D", rarity="Rare")]
    assert distinct_values(records, "rarity") == ["common", "Rare"]


def test_noop_filter_returns_everything(base_records):
    cfg = CardFilter(search_text="", set_filter="all", rarity_filter=())
    assert filter_records(base_records, cfg) == base_records


def test_search_is_case_insensitive_substring(base_records):
    assert [r["id"] for r in filter_records(base_records, CardFilter(search_text="CHAR"))] == [3]


def test_search_fields_are_configurable(base_records):
    records = base_records + [dict(rec(7, "Mew", number="151"), description="a rare pink cat")]
    cfg = CardFilter(search_text="pink", search_fields=("name", "description"))
    assert [r["id"] for r in filter_records(records, cfg)] == [7]
    assert filter_records(records, CardFilter(search_text="pink")) == []


def test_set_and_rarity_filters():
    records = [rec(1, "A", set_name="Jungle", rarity="Rare"), rec(2, "B", set_name="Jungle", rarity="Common"),
               rec(3, "C", set_name="Fossil", rarity="Rare")]
    assert [r["id"] for r in filter_records(records, CardFilter(set_filter="Jungle"))] == [1, 2]
    assert [r["id"] for r in filter_records(records, CardFilter(rarity_filter=("Rare",)))] == [1, 3]
    cfg = CardFilter(set_filter="Jungle", rarity_filter=("Rare", "Uncommon"))
    assert [r["id"] for r in filter_records(records, cfg)] == [1]


def test_price_sorts_are_monotonic():
    records = [rec(i, f"Card {i}", price=p) for i, p in enumerate(["3.50", "0.99", "12.00", "3.50", "1.25"])]
    up = [r["price"] for r in sort_records(records, "price-asc")]
    down = [r["price"] for r in sort_records(records, "price-desc")]
    assert up == sorted(up)
    assert down == sorted(down, reverse=True)
    assert sort_records(records, "price-low") == sort_records(records, "price-asc")
    assert sort_records(records, "price-high") == sort_records(records, "price-desc")


def test_name_sort_ignores_case():
    records = [rec(1, "bulbasaur"), rec(2, "Abra"), rec(3, "Charmander"), rec(4, "abra")]
    names = [r["name"] for r in sort_records(records, "name-asc")]
    assert names == ["Abra", "abra", "bulbasaur", "Charmander"]
    assert [r["name"] for r in sort_records(records, "name-desc")][0] == "Charmander"


def test_newest_and_oldest_use_created_at():
    records = [rec(1, "A", minutes=5), rec(2, "B", minutes=1), rec(3, "C", minutes=9)]
    assert [r["id"] for r in sort_records(records, "newest")] == [3, 1, 2]
    assert [r["id"] for r in sort_records(records, "oldest")] == [2, 1, 3]


def test_stock_sorts_on_grouped_cards(base_records):
    grouped = group_cards(base_records)
    assert [g.name for g in sort_records(grouped, "stock-desc")] == ["Pikachu", "Charizard"]
    assert [g.name for g in sort_records(grouped, "stock-asc")] == ["Charizard", "Pikachu"]


def test_set_name_sort_uses_natural_card_numbers():
    records = [rec(1, "A", set_name="Jungle", number="10"), rec(2, "B", set_name="Base Set", number="2"),
               rec(3, "C", set_name="Jungle", number="2"), rec(4, "D", set_name="Base Set", number="SV1")]
    assert [r["id"] for r in sort_records(records, "set-name")] == [2, 4, 3, 1]


def test_card_number_key_orders_naturally():
    numbers = ["SV10", "10", "2", "10a", "SV2", "TG05"]
    assert sorted(numbers, key=card_number_key) == ["2", "10", "10a", "SV2", "SV10", "TG05"]


def test_rarity_sort_then_name():
    records = [rec(1, "Zubat", rarity="Common"), rec(2, "Mew", rarity="Rare"), rec(3, "Abra", rarity="Common")]
    assert [r["id"] for r in sort_records(records, "rarity")] == [2, 3, 1]


def test_unknown_sort_key_raises(base_records):
    with pytest.raises(ValueError):
        sort_records(base_records, "random")


def test_from_querydict_falls_back_to_default_sort():
    from django.http import QueryDict

    params = QueryDict("q=+pika+&set=Jungle&rarity=Rare&rarity=all&sort=bogus")
    cfg = CardFilter.from_querydict(params, default_sort="set-name")
    assert cfg == CardFilter(search_text="pika", set_filter="Jungle", rarity_filter=("Rare",),
                             sort_key="set-name", search_fields=("name",))


def test_apply_filters_filters_then_sorts(base_records):
    grouped = group_cards(base_records + [rec(4, "Pichu", number="12", price="9.00")])
    cfg = CardFilter(search_text="pi", sort_key="price-desc")
    result = apply_filters(grouped, cfg)
    assert [g.name for g in result] == ["Pichu", "Pikachu"]
    assert all(isinstance(g, GroupedCard) for g in result)
