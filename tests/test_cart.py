from decimal import Decimal

import pytest
from django.urls import reverse

from cart.utils import SESSION_KEY
from shop.models import Card


def cart_of(client):
    return client.session.get(SESSION_KEY, {})


@pytest.mark.django_db
def test_add_to_cart_snapshots_line(client, make_card):
    card, = make_card(copies=1, price=Decimal("4.99"), image_url="https://img.example/58.png")

    resp = client.post(reverse("cart:add_to_cart", args=[card.id]))

    assert resp.status_code == 302
    line = cart_of(client)[str(card.id)]
    assert line["qty"] == 1
    assert line["price"] == "4.99"
    assert (line["name"], line["set_name"], line["card_number"]) == ("Pikachu", "Base Set", "58")
    assert line["image_url"] == "https://img.example/58.png"


@pytest.mark.django_db
def test_add_to_cart_caps_at_stock(client, make_card):
    card = make_card(copies=2)[0]

    client.post(reverse("cart:add_to_cart", args=[card.id]), {"quantity": 5})

    assert cart_of(client)[str(card.id)]["qty"] == 2


@pytest.mark.django_db
def test_add_to_cart_counts_other_copies_of_same_card(client, make_card):
    first, second = make_card(copies=2)

    client.post(reverse("cart:add_to_cart", args=[first.id]), {"quantity": 2})
    client.post(reverse("cart:add_to_cart", args=[second.id]))

    cart = cart_of(client)
    assert cart[str(first.id)]["qty"] == 2
    assert str(second.id) not in cart


@pytest.mark.django_db
def test_add_out_of_stock_is_rejected(client, make_card):
    card, = make_card()
    Card.objects.filter(id=card.id).delete()
    assert client.post(reverse("cart:add_to_cart", args=[card.id])).status_code == 404

    other, = make_card(name="Mew", card_number="151")
    client.post(reverse("cart:add_to_cart", args=[other.id]))
    Card.objects.filter(id=other.id).delete()
    resp = client.get(reverse("cart:cart"))
    assert resp.context["cart_items"] == []


@pytest.mark.django_db
def test_view_cart_caps_lines_to_live_stock(client, make_card):
    cards = make_card(copies=3)
    client.post(reverse("cart:add_to_cart", args=[cards[0].id]), {"quantity": 3})
    Card.objects.filter(id__in=[cards[1].id, cards[2].id]).delete()

    resp = client.get(reverse("cart:cart"))

    items = resp.context["cart_items"]
    assert [(i["name"], i["qty"]) for i in items] == [("Pikachu", 1)]
    assert resp.context["total_price"] == Decimal("4.99")
    assert "reduced" in " ".join(str(m) for m in resp.context["messages"])


@pytest.mark.django_db
def test_view_cart_shares_stock_between_lines_of_same_card(client, make_card):
    first, second = make_card(copies=2)
    client.post(reverse("cart:add_to_cart", args=[first.id]))
    client.post(reverse("cart:add_to_cart", args=[second.id]))
    Card.objects.filter(id=first.id).delete()

    resp = client.get(reverse("cart:cart"))

    assert sum(i["qty"] for i in resp.context["cart_items"]) == 1
    assert list(cart_of(client)) == [str(first.id)]


@pytest.mark.django_db
def test_update_counts_other_lines_of_same_card(client, make_card):
    first, second, _ = make_card(copies=3)
    client.post(reverse("cart:add_to_cart", args=[first.id]))
    client.post(reverse("cart:add_to_cart", args=[second.id]))
    update = reverse("cart:update_cart_quantity", args=[first.id])

    client.post(update, {"action": "increase"})
    client.post(update, {"action": "increase"})

    cart = cart_of(client)
    assert (cart[str(first.id)]["qty"], cart[str(second.id)]["qty"]) == (2, 1)

    client.post(update, {"quantity": 5})
    assert cart_of(client)[str(first.id)]["qty"] == 2


@pytest.mark.django_db
def test_update_increase_decrease_and_remove(client, make_card):
    card = make_card(copies=2)[0]
    add = reverse("cart:add_to_cart", args=[card.id])
    update = reverse("cart:update_cart_quantity", args=[card.id])
    client.post(add)

    client.post(update, {"action": "increase"})
    assert cart_of(client)[str(card.id)]["qty"] == 2
    client.post(update, {"action": "increase"})
    assert cart_of(client)[str(card.id)]["qty"] == 2

    client.post(update, {"action": "decrease"})
    client.post(update, {"action": "decrease"})
    assert str(card.id) not in cart_of(client)

    client.post(add)
    client.post(reverse("cart:remove_from_cart", args=[card.id]))
    assert cart_of(client) == {}


@pytest.mark.django_db
def test_clear_cart_and_count_in_context(client, make_card):
    a, = make_card()
    b, = make_card(name="Mew", card_number="151")
    client.post(reverse("cart:add_to_cart", args=[a.id]))
    client.post(reverse("cart:add_to_cart", args=[b.id]))

    assert client.get(reverse("shop:home")).context["cart_count"] == 2

    client.post(reverse("cart:clear"))
    assert client.get(reverse("shop:home")).context["cart_count"] == 0
