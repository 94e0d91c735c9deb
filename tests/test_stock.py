from decimal import Decimal
from unittest import mock

import pytest
from django.db import OperationalError
from django.db.models import ProtectedError

from orders.models import Order
from orders.services import place_order
from shop.exceptions import InsufficientStock
from shop.inventory import safe_stock_for
from shop.models import Card

PIKACHU = ("Pikachu", "Base Set", "58")


@pytest.mark.django_db
def test_stock_query_counts_rows(make_card):
    make_card(copies=3)
    make_card(name="Charizard", card_number="4")
    assert Card.objects.stock_for(PIKACHU) == 3
    assert Card.objects.stock_for(("Charizard", "Base Set", "4")) == 1
    assert Card.objects.stock_for(("Mew", "Base Set", "1")) == 0


@pytest.mark.django_db
def test_claimed_rows_are_not_stock(make_card, create_user):
    first, second = make_card(copies=2)
    user, _ = create_user()
    place_order(user, [(first, 1)])
    assert Card.objects.stock_for(PIKACHU) == 1
    assert safe_stock_for(PIKACHU) == 1


@pytest.mark.django_db
def test_safe_stock_for_fails_closed(make_card):
    make_card(copies=2)
    with mock.patch.object(Card.objects, "stock_for", side_effect=OperationalError("db down")):
        assert safe_stock_for(PIKACHU) == 0


@pytest.mark.django_db
def test_place_order_claims_picked_copy_first(make_card, create_user):
    older, picked, newest = make_card(copies=3)
    user, _ = create_user()

    order = place_order(user, [(picked, 2)], shipping_address="1 Main St", contact_number="555",
                        payment_method="gcash")

    item = order.items.get()
    claimed = set(Card.objects.filter(claimed_by=item).values_list("id", flat=True))
    assert picked.id in claimed
    assert len(claimed) == 2
    assert order.total_amount == Decimal("9.98")
    assert order.status == "pending"
    assert order.payment_method == "gcash"
    assert (item.name, item.set_name, item.card_number, item.quantity) == ("Pikachu", "Base Set", "58", 2)
    assert Card.objects.stock_for(PIKACHU) == 1


@pytest.mark.django_db
def test_place_order_snapshots_price(make_card, create_user):
    card, = make_card(price=Decimal("10.00"))
    user, _ = create_user()
    order = place_order(user, [(card.id, 1)])
    Card.objects.filter(id=card.id).update(price=Decimal("99.00"))
    assert order.items.get().price == Decimal("10.00")


@pytest.mark.django_db
def test_second_checkout_of_last_copy_fails(make_card, create_user):
    last, = make_card()
    alice, _ = create_user(email="alice@example.com")
    bob, _ = create_user(email="bob@example.com")

    place_order(alice, [(last, 1)])
    with pytest.raises(InsufficientStock) as exc:
        place_order(bob, [(last, 1)])

    assert exc.value.available == 0
    assert Order.objects.filter(user=bob).count() == 0
    assert Card.objects.stock_for(PIKACHU) == 0


@pytest.mark.django_db
def test_shortage_rolls_back_whole_order(make_card, create_user):
    pikachu, = make_card()
    charizard, = make_card(name="Charizard", card_number="4")
    user, _ = create_user()

    with pytest.raises(InsufficientStock):
        place_order(user, [(pikachu, 1), (charizard, 2)])

    assert Order.objects.count() == 0
    assert Card.objects.available().count() == 2


@pytest.mark.django_db
def test_unknown_card_id_is_out_of_stock(create_user):
    user, _ = create_user()
    with pytest.raises(InsufficientStock):
        place_order(user, [(999999, 1)])


@pytest.mark.django_db
def test_empty_order_is_rejected(create_user):
    user, _ = create_user()
    with pytest.raises(ValueError):
        place_order(user, [])
    assert Order.objects.count() == 0


@pytest.mark.django_db
def test_cancel_releases_claimed_copies(make_card, create_user):
    cards = make_card(copies=2)
    user, _ = create_user()
    order = place_order(user, [(cards[0], 2)])
    assert Card.objects.stock_for(PIKACHU) == 0

    released = order.cancel()

    assert released == 2
    assert order.status == "cancelled"
    assert Card.objects.stock_for(PIKACHU) == 2


@pytest.mark.django_db
def test_deleting_an_open_order_keeps_copies_sold(make_card, create_user):
    card, = make_card()
    user, _ = create_user()
    order = place_order(user, [(card, 1)])

    with pytest.raises(ProtectedError):
        order.delete()

    assert Card.objects.stock_for(PIKACHU) == 0
    assert Order.objects.filter(id=order.id).exists()

    order.cancel()
    order.delete()
    assert Card.objects.stock_for(PIKACHU) == 1
