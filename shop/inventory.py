# shop/inventory.py
"""
Stock lives in rows, not in a counter: every physical card is one ``Card``
row and a logical card is the set of rows sharing (name, set_name,
card_number). This module groups rows into logical cards, counts stock and
runs the search/filter/sort pipeline used by the shop and the back office.

Everything here works on model instances, plain mappings or ``GroupedCard``
objects and does no I/O, except ``safe_stock_for``.
"""
import logging
import re
from collections import OrderedDict
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, List, Sequence, Tuple

from django.db import DatabaseError

from .query import execute_with_retry

logger = logging.getLogger(__name__)

IDENTITY_FIELDS = ("name", "set_name", "card_number")

# fields every physical copy of a logical card is expected to share
SHARED_FIELDS = ("name", "set_name", "card_number", "rarity", "price", "description", "is_featured")

ADMIN_SEARCH_FIELDS = ("name", "description", "card_number", "set_name")

Identity = Tuple[str, str, str]


def _value(record, field_name, default=None):
    if isinstance(record, Mapping):
        return record.get(field_name, default)
    return getattr(record, field_name, default)


def normalize_identity(identity) -> Identity:
    name, set_name, card_number = identity
    return (str(name or ""), str(set_name or ""), str(card_number or ""))


def identity_of(record) -> Identity:
    return normalize_identity(tuple(_value(record, f) for f in IDENTITY_FIELDS))


@dataclass
class GroupedCard:
    """
    One logical card: the representative row's fields, the number of copies
    and the copies themselves. Attribute access falls through to the
    representative, so templates can use ``group.name`` or ``group.price``.
    """
    representative: Any
    variants: List[Any] = field(default_factory=list)

    @property
    def quantity(self):
        return len(self.variants)

    @property
    def identity(self):
        return identity_of(self.representative)

    @property
    def in_stock(self):
        return self.quantity > 0

    def __getattr__(self, name):
        if name.startswith("__"):
            raise AttributeError(name)
        representative = self.__dict__.get("representative")
        if representative is None:
            raise AttributeError(name)
        if isinstance(representative, Mapping):
            try:
                return representative[name]
            except KeyError:
                raise AttributeError(name) from None
        return getattr(representative, name)


def group_cards(records) -> List[GroupedCard]:
    """Fold rows into one GroupedCard per identity, keeping first-seen order."""
    groups = OrderedDict()
    for record in records:
        key = identity_of(record)
        group = groups.get(key)
        if group is None:
            groups[key] = GroupedCard(record, [record])
        else:
            group.variants.append(record)
    return list(groups.values())


def group_by_set(grouped) -> "OrderedDict[str, List[GroupedCard]]":
    by_set = {}
    for group in grouped:
        by_set.setdefault(_value(group, "set_name") or "", []).append(group)
    return OrderedDict(sorted(by_set.items(), key=lambda item: item[0].casefold()))


def distinct_values(records, field_name) -> List[str]:
    values = {_value(r, field_name) for r in records}
    return sorted((v for v in values if v), key=lambda v: str(v).casefold())


def stock_count(records, identity) -> int:
    identity = normalize_identity(identity)
    return sum(1 for r in records if identity_of(r) == identity)


def safe_stock_for(identity) -> int:
    """Live stock for a logical card; a failed read counts as out of stock."""
    from .models import Card

    identity = normalize_identity(identity)
    try:
        return execute_with_retry(lambda: Card.objects.stock_for(identity))
    except DatabaseError:
        logger.warning("Stock read failed for %s, treating as out of stock", identity, exc_info=True)
        return 0


# -----------------------
# Filter / sort pipeline
# -----------------------
@dataclass
class CardFilter:
    search_text: str = ""
    set_filter: str = ""
    rarity_filter: Sequence[str] = ()
    sort_key: str = "newest"
    search_fields: Sequence[str] = ("name",)

    @classmethod
    def from_querydict(cls, params, default_sort="newest", search_fields=("name",)):
        sort_key = params.get("sort") or default_sort
        if sort_key not in SORTS:
            sort_key = default_sort
        if hasattr(params, "getlist"):
            rarities = params.getlist("rarity")
        else:
            rarities = params.get("rarity") or []
            if isinstance(rarities, str):
                rarities = [rarities]
        return cls(
            search_text=(params.get("q") or "").strip(),
            set_filter=(params.get("set") or "").strip(),
            rarity_filter=tuple(r for r in rarities if r and r != "all"),
            sort_key=sort_key,
            search_fields=tuple(search_fields),
        )


def filter_records(records, cfg: CardFilter) -> list:
    result = list(records)

    needle = (cfg.search_text or "").strip().casefold()
    if needle:
        result = [
            r for r in result
            if any(needle in str(_value(r, f) or "").casefold() for f in cfg.search_fields)
        ]

    if cfg.set_filter and cfg.set_filter.lower() != "all":
        result = [r for r in result if _value(r, "set_name") == cfg.set_filter]

    if cfg.rarity_filter:
        wanted = set(cfg.rarity_filter)
        result = [r for r in result if _value(r, "rarity") in wanted]

    return result


_DIGITS = re.compile(r"([0-9]+)")


def card_number_key(number):
    """Natural order for card numbers: 2 < 10 < 10a < SV2 < SV10."""
    text = str(number or "").strip().casefold()
    parts = tuple(
        (0, int(part), "") if _DIGITS.fullmatch(part) else (1, 0, part)
        for part in _DIGITS.split(text) if part
    )
    return (0 if text[:1].isdigit() else 1, parts)


def _name_key(r):
    return str(_value(r, "name") or "").casefold()


def _price_key(r):
    try:
        return Decimal(str(_value(r, "price") or "0"))
    except InvalidOperation:
        return Decimal("0")


def _stock_key(r):
    return _value(r, "quantity", 1) or 0


def _created_key(r):
    created = _value(r, "created_at")
    timestamp = getattr(created, "timestamp", None)
    if timestamp is None:
        return (0, 0.0)
    return (1, timestamp())


def _set_key(r):
    return str(_value(r, "set_name") or "").casefold()


def _number_key(r):
    return card_number_key(_value(r, "card_number"))


def _rarity_key(r):
    return str(_value(r, "rarity") or "").casefold()


# sort key -> [(key function, reverse)], most significant first
SORTS = {
    "name-asc": [(_name_key, False)],
    "name-desc": [(_name_key, True)],
    "price-asc": [(_price_key, False)],
    "price-desc": [(_price_key, True)],
    "price-low": [(_price_key, False)],
    "price-high": [(_price_key, True)],
    "stock-asc": [(_stock_key, False)],
    "stock-desc": [(_stock_key, True)],
    "newest": [(_created_key, True)],
    "oldest": [(_created_key, False)],
    "set-name": [(_set_key, False), (_number_key, False)],
    "rarity": [(_rarity_key, True), (_name_key, False)],
}

SORT_CHOICES = [
    ("newest", "Newest"),
    ("oldest", "Oldest"),
    ("name-asc", "Name A-Z"),
    ("name-desc", "Name Z-A"),
    ("price-asc", "Price: low to high"),
    ("price-desc", "Price: high to low"),
    ("stock-desc", "Most in stock"),
    ("stock-asc", "Least in stock"),
    ("set-name", "Set & number"),
    ("rarity", "Rarity"),
]


def sort_records(records, sort_key="newest") -> list:
    try:
        keys = SORTS[sort_key]
    except KeyError:
        raise ValueError(f"Unknown sort key: {sort_key!r}") from None
    ordered = list(records)
    # stable sorts, least significant key first
    for keyfunc, reverse in reversed(keys):
        ordered.sort(key=keyfunc, reverse=reverse)
    return ordered


def apply_filters(records, cfg: CardFilter) -> list:
    return sort_records(filter_records(records, cfg), cfg.sort_key)
