# cart/utils.py
from decimal import Decimal
from typing import Dict, List

from django.contrib import messages

from shop.inventory import safe_stock_for
from shop.models import Card

SESSION_KEY = "cart"


def get_cart(session) -> Dict[str, dict]:
    cart = session.get(SESSION_KEY)
    if not isinstance(cart, dict):
        cart = {}
        session[SESSION_KEY] = cart
    return cart


def _save(session):
    session.modified = True


def line_identity(line):
    return (line.get("name", ""), line.get("set_name", ""), line.get("card_number", ""))


def add_line(session, card: Card, quantity: int, stock: int) -> int:
    """
    Add ``quantity`` copies of ``card``, capped at ``stock``. Returns the
    resulting line quantity.
    """
    cart = get_cart(session)
    key = str(card.id)
    line = cart.get(key) or {
        "qty": 0,
        "price": str(card.price),
        "name": card.name,
        "set_name": card.set_name,
        "card_number": card.card_number,
        "image_url": card.image_url,
    }
    line["qty"] = max(0, min(int(line.get("qty", 0)) + quantity, stock))
    if line["qty"]:
        cart[key] = line
    else:
        cart.pop(key, None)
    _save(session)
    return line["qty"]


def set_quantity(session, card_id, quantity: int) -> None:
    cart = get_cart(session)
    key = str(card_id)
    if key not in cart:
        return
    if quantity <= 0:
        cart.pop(key)
    else:
        cart[key]["qty"] = quantity
    _save(session)


def remove_line(session, card_id) -> bool:
    removed = get_cart(session).pop(str(card_id), None) is not None
    _save(session)
    return removed


def clear_cart(session) -> None:
    session[SESSION_KEY] = {}
    _save(session)


def cart_count(session) -> int:
    return sum(int(line.get("qty", 0) or 0) for line in get_cart(session).values())


def cart_lines(session) -> List[dict]:
    """Cart lines for display, each with ``card_id`` and ``line_total``."""
    lines = []
    for key, line in get_cart(session).items():
        price = Decimal(str(line.get("price", "0")))
        qty = int(line.get("qty", 0) or 0)
        lines.append(dict(line, card_id=key, price=price, qty=qty, line_total=price * qty))
    return lines


def cart_total(session) -> Decimal:
    return sum((line["line_total"] for line in cart_lines(session)), Decimal("0.00"))


def held_elsewhere(session, key, identity) -> int:
    """Copies of the logical card ``identity`` held under cart lines other than ``key``."""
    return sum(
        int(line.get("qty", 0) or 0)
        for other, line in get_cart(session).items()
        if other != str(key) and line_identity(line) == tuple(identity)
    )


def sync_cart_with_stock(request) -> None:
    """
    Ensure the cart never holds more than live stock of a logical card.
    Lines holding copies of the same card share its stock in cart order.
    Mutates the session cart in-place.
    """
    cart = get_cart(request.session)
    if not cart:
        return

    removed = []
    reduced = []
    remaining = {}

    for key, line in list(cart.items()):
        identity = line_identity(line)
        if identity not in remaining:
            remaining[identity] = safe_stock_for(identity)
        wanted = int(line.get("qty", 0) or 0)
        available = remaining[identity]

        if available <= 0 or wanted <= 0:
            removed.append(line.get("name", key))
            cart.pop(key, None)
            continue

        if wanted > available:
            reduced.append(line.get("name", key))
            line["qty"] = wanted = available
        remaining[identity] = available - wanted

    _save(request.session)

    if removed:
        messages.warning(request, "Some items in your cart are no longer available and were removed.")
    if reduced:
        messages.info(request, "We reduced some quantities to match current stock.")
