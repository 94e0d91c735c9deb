# browse/catalog.py
"""
Thin wrapper over the Pokémon TCG API (pokemontcgsdk). Results are turned
into plain dicts so they can be cached and rendered without touching the SDK
objects again.
"""
import logging
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from django.conf import settings
from pokemontcgsdk import Card as PtcgCard, RestClient, Set as PtcgSet

from shop.exceptions import CatalogUnavailable
from shop.query import RETRYABLE_ERRORS, cached_query

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 36
IMPORT_CONDITION = "Near Mint"

RARITY_PRICES = {
    "Common": "0.99",
    "Uncommon": "1.99",
    "Rare": "3.99",
    "Rare Holo": "5.99",
    "Rare Ultra": "9.99",
    "Rare Holo EX": "14.99",
    "Rare Holo GX": "14.99",
    "Rare Holo V": "12.99",
    "Rare Holo VMAX": "19.99",
    "Rare BREAK": "7.99",
    "Rare Prism Star": "8.99",
    "Rare ACE": "9.99",
    "Rare Rainbow": "24.99",
    "Rare Secret": "29.99",
    "Rare Shiny": "19.99",
    "Rare Shiny GX": "29.99",
    "Rare Holo LV.X": "19.99",
    "LEGEND": "24.99",
    "Rare Prime": "9.99",
    "Amazing Rare": "14.99",
    "Rare Holo Star": "19.99",
    "Promo": "4.99",
    "Trainer Gallery Rare Holo": "9.99",
    "Radiant Rare": "12.99",
    "Illustration Rare": "14.99",
    "Special Illustration Rare": "29.99",
    "Hyper Rare": "24.99",
    "Trainer Gallery": "9.99",
}
FALLBACK_PRICE = "1.99"


def _get(obj, name, default=None):
    """Attribute or key lookup; SDK objects and raw API JSON both work."""
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _decimal(value) -> Optional[Decimal]:
    if value in (None, ""):
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return None
    return amount if amount > 0 else None


def _configure():
    api_key = settings.POKEMONTCG_IO_API_KEY
    if api_key:
        RestClient.configure(api_key)


def _call(fn, what):
    _configure()
    try:
        return fn()
    except RETRYABLE_ERRORS as exc:
        logger.error("Pokémon TCG API unavailable while fetching %s: %s", what, exc)
        raise CatalogUnavailable(f"Could not load {what} from the card catalog.") from exc


# -------------------------------
# Pricing
# -------------------------------
def _tcgplayer_prices(card) -> Iterable[Any]:
    prices = _get(_get(card, "tcgplayer"), "prices")
    if prices is None:
        return []
    if isinstance(prices, Mapping):
        return list(prices.values())
    # dataclass with one optional field per finish (normal, holofoil, ...)
    return list(vars(prices).values())


def market_price(card) -> Optional[Decimal]:
    """Cardmarket average sell price, then trend price, then TCGplayer market."""
    cm = _get(_get(card, "cardmarket"), "prices")
    for field_name in ("averageSellPrice", "trendPrice"):
        price = _decimal(_get(cm, field_name))
        if price is not None:
            return price
    for finish in _tcgplayer_prices(card):
        price = _decimal(_get(finish, "market"))
        if price is not None:
            return price
    return None


def default_price(rarity) -> Decimal:
    return Decimal(RARITY_PRICES.get(rarity or "", FALLBACK_PRICE))


def import_price(card) -> Decimal:
    price = card.get("market_price") if isinstance(card, Mapping) and "market_price" in card else market_price(card)
    return (price or default_price(_get(card, "rarity"))).quantize(Decimal("0.01"))


# -------------------------------
# Conversion
# -------------------------------
def _set_to_dict(s) -> Dict[str, Any]:
    images = _get(s, "images")
    return {
        "id": _get(s, "id", ""),
        "name": _get(s, "name", ""),
        "series": _get(s, "series", "") or "",
        "release_date": _get(s, "releaseDate", "") or "",
        "total": _get(s, "total", 0) or 0,
        "logo": _get(images, "logo", "") or "",
        "symbol": _get(images, "symbol", "") or "",
    }


def _card_to_dict(c) -> Dict[str, Any]:
    card_set = _get(c, "set")
    images = _get(c, "images")
    cm = _get(_get(c, "cardmarket"), "prices")
    return {
        "id": _get(c, "id", ""),
        "name": _get(c, "name", ""),
        "number": _get(c, "number", "") or "",
        "rarity": _get(c, "rarity", "") or "",
        "set_id": _get(card_set, "id", "") or "",
        "set_name": _get(card_set, "name", "") or "",
        "image_small": _get(images, "small", "") or "",
        "image_large": _get(images, "large", "") or "",
        "market_price": market_price(c),
        "prices": {
            "average_sell": _decimal(_get(cm, "averageSellPrice")),
            "trend": _decimal(_get(cm, "trendPrice")),
            "low": _decimal(_get(cm, "lowPrice")),
        },
    }


def to_card_row(card: Dict[str, Any]) -> Dict[str, Any]:
    """Field values for a new ``shop.Card`` row made from a catalog card."""
    name, set_name = card["name"], card["set_name"]
    return {
        "name": name,
        "set_name": set_name,
        "card_number": card.get("number", ""),
        "rarity": card.get("rarity") or "Unknown",
        "image_url": card.get("image_large") or card.get("image_small", ""),
        "price": import_price(card),
        "condition": IMPORT_CONDITION,
        "description": f"{name} from the {set_name} set.",
        "seller_notes": f"{name} card in {IMPORT_CONDITION} condition from {set_name} set.",
    }


# -------------------------------
# Queries
# -------------------------------
def list_sets() -> List[Dict[str, Any]]:
    """Every set in the catalog, newest release first."""
    def fetch():
        sets = [_set_to_dict(s) for s in PtcgSet.all()]
        return sorted(sets, key=lambda s: s["release_date"], reverse=True)

    return _call(lambda: cached_query("catalog_sets", "all", fetch), "sets")


def _escape(text):
    return text.replace('"', "")


def search_cards(query=None, set_id=None, page=1, page_size=DEFAULT_PAGE_SIZE, order_by="-set.releaseDate"):
    """One page of catalog cards matching a name query and/or set."""
    clauses = []
    if query:
        clauses.append(f'name:"{_escape(query)}*"')
    if set_id:
        clauses.append(f"set.id:{_escape(set_id)}")
    q = " ".join(clauses)

    def fetch():
        params = {"page": page, "pageSize": page_size, "orderBy": order_by}
        if q:
            params["q"] = q
        return [_card_to_dict(c) for c in PtcgCard.where(**params)]

    key = (q, page, page_size, order_by)
    return _call(lambda: cached_query("catalog_cards", key, fetch), "cards")


def set_cards(set_id) -> List[Dict[str, Any]]:
    """Every card in one set, in card-number order."""
    def fetch():
        return [_card_to_dict(c) for c in PtcgCard.where(q=f"set.id:{_escape(set_id)}", orderBy="number")]

    return _call(lambda: cached_query("catalog_cards", ("set", set_id), fetch), f"cards of set {set_id}")


def get_cards_by_ids(set_id, ids) -> List[Dict[str, Any]]:
    wanted = set(ids)
    return [c for c in set_cards(set_id) if c["id"] in wanted]


def price_tracker(query=None, page=1, page_size=DEFAULT_PAGE_SIZE):
    """Catalog cards that carry a market price, most valuable first."""
    cards = [c for c in search_cards(query=query, page=page, page_size=page_size) if c["market_price"]]
    return sorted(cards, key=lambda c: c["market_price"], reverse=True)
