# orders/services.py
"""
Order placement. Each cart line claims specific, still-available copies of
its logical card inside one locked transaction, so two shoppers can never
both buy the last copy.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Case, IntegerField, Value, When

from shop.exceptions import InsufficientStock
from shop.models import Card
from shop.query import invalidate
from .models import Order, OrderItem

logger = logging.getLogger(__name__)


def _claim_copies(item, card, quantity):
    """Claim ``quantity`` available copies of ``card``'s logical card for ``item``."""
    candidates = (
        Card.objects.select_for_update()
        .available()
        .siblings_of(card)
        # the copy the shopper picked goes first, then oldest stock
        .annotate(picked=Case(When(id=card.id, then=Value(0)), default=Value(1), output_field=IntegerField()))
        .order_by("picked", "created_at", "id")
    )
    ids = list(candidates.values_list("id", flat=True)[:quantity])
    if len(ids) < quantity:
        raise InsufficientStock(card.name, requested=quantity, available=len(ids))

    claimed = Card.objects.filter(id__in=ids, claimed_by__isnull=True).update(claimed_by=item)
    if claimed != quantity:
        raise InsufficientStock(card.name, requested=quantity, available=claimed)
    return ids


@transaction.atomic
def place_order(user, lines, shipping_address="", contact_number="", payment_method="cod",
                status="pending", email=""):
    """
    Create an order from ``lines``, an iterable of ``(card, quantity)`` where
    ``card`` is a Card or a card id.

    Each item is charged at the card's current price; checkout refreshes cart
    prices and asks the shopper to confirm before calling this.

    Raises InsufficientStock (and rolls everything back) when any line asks
    for more copies than are available.
    """
    order = Order.objects.create(
        user=user,
        email=email or getattr(user, "email", "") or "",
        status=status,
        shipping_address=shipping_address,
        contact_number=contact_number,
        payment_method=payment_method,
    )

    total = Decimal("0.00")
    for card, quantity in lines:
        quantity = int(quantity)
        if quantity <= 0:
            continue
        if not isinstance(card, Card):
            card_id = card
            card = Card.objects.filter(id=card_id).first()
            if card is None:
                raise InsufficientStock(f"card #{card_id}", requested=quantity, available=0)

        item = OrderItem.objects.create(
            order=order,
            card=card,
            name=card.name,
            set_name=card.set_name,
            card_number=card.card_number,
            image_url=card.image_url,
            price=card.price,
            quantity=quantity,
        )
        _claim_copies(item, card, quantity)
        total += item.line_total()

    if not order.items.exists():
        raise ValueError("Cannot place an empty order.")

    order.total_amount = total
    order.save(update_fields=["total_amount"])
    transaction.on_commit(lambda: invalidate("cards"))

    logger.info("Order #%s placed by %s: %s items, total %s", order.id, user, order.item_count, total)
    return order
