# cart/views.py
import logging
from decimal import Decimal

import stripe
from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import HttpResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods, require_POST

from orders.models import Order
from orders.services import place_order
from shop.exceptions import InsufficientStock
from shop.inventory import safe_stock_for
from shop.models import Card
from .forms import CheckoutForm
from .utils import (
    add_line, cart_lines, cart_total, clear_cart, get_cart, held_elsewhere, line_identity,
    remove_line, set_quantity, sync_cart_with_stock,
)

logger = logging.getLogger(__name__)


def _back(request, fallback='cart:cart'):
    return redirect(request.META.get('HTTP_REFERER') or fallback)


# -----------------------
# Cart basics
# -----------------------
@require_POST
def add_to_cart(request, card_id):
    card = get_object_or_404(Card, id=card_id)
    try:
        quantity = max(1, int(request.POST.get('quantity', 1)))
    except ValueError:
        quantity = 1

    stock = safe_stock_for(card.identity) - held_elsewhere(request.session, card.id, card.identity)
    if stock <= 0:
        messages.error(request, "This item is out of stock.")
        return _back(request, card.get_absolute_url())

    before = int(get_cart(request.session).get(str(card.id), {}).get("qty", 0))
    qty = add_line(request.session, card, quantity, stock)
    if qty - before < quantity:
        messages.info(request, f"Only {stock} of '{card.name}' available; your cart has been adjusted.")
    else:
        messages.success(request, f"Added '{card.name}' to your cart.")
    return _back(request, card.get_absolute_url())


def view_cart(request):
    sync_cart_with_stock(request)
    return render(request, 'cart/cart.html', {
        'cart_items': cart_lines(request.session),
        'total_price': cart_total(request.session),
    })


@require_POST
def remove_from_cart(request, card_id):
    if remove_line(request.session, card_id):
        messages.success(request, "Item removed from cart.")
    else:
        messages.warning(request, "Item not found in your cart.")
    return redirect('cart:cart')


@require_POST
def update_cart_quantity(request, card_id):
    line = get_cart(request.session).get(str(card_id))
    if not line:
        return redirect('cart:cart')

    action = request.POST.get('action')
    current = int(line.get("qty", 0) or 0)
    if action == 'increase':
        wanted = current + 1
    elif action == 'decrease':
        wanted = current - 1
    else:
        try:
            wanted = int(request.POST.get('quantity', current))
        except ValueError:
            wanted = current

    identity = line_identity(line)
    stock = safe_stock_for(identity) - held_elsewhere(request.session, card_id, identity)
    if wanted > stock:
        wanted = stock
        messages.info(request, "You've reached the maximum available stock for this item.")
    set_quantity(request.session, card_id, wanted)
    return redirect('cart:cart')


@require_POST
def clear(request):
    clear_cart(request.session)
    messages.success(request, "Your cart is empty.")
    return redirect('cart:cart')


# -----------------------
# Checkout
# -----------------------
def _initial_from_profile(user):
    profile = getattr(user, 'profile', None)
    initial = {'full_name': user.get_full_name()}
    if profile is not None:
        initial.update({
            'full_name': profile.full_name or initial['full_name'],
            'address': profile.shipping_address,
            'phone': profile.phone_number,
        })
    return initial


def _line_card(key, line):
    card = Card.objects.filter(id=key).first() if key.isdigit() else None
    if card is None:
        # the row was deleted; any copy of the same logical card will do
        card = Card.objects.available().for_identity(line_identity(line)).first()
    return card


def _order_lines(session):
    lines = []
    for key, line in get_cart(session).items():
        card = _line_card(key, line)
        lines.append((card if card is not None else key, line.get("qty", 0)))
    return lines


def _refresh_prices(session):
    """Bring cart prices up to date. Returns True when any line changed."""
    changed = False
    for key, line in get_cart(session).items():
        card = _line_card(key, line)
        if card is not None and Decimal(str(line.get("price", "0"))) != card.price:
            line["price"] = str(card.price)
            changed = True
    if changed:
        session.modified = True
    return changed


def _save_shipping_to_profile(user, address, phone):
    profile = getattr(user, 'profile', None)
    if profile is None:
        return
    changed = []
    if not profile.shipping_address:
        profile.shipping_address = address
        changed.append('shipping_address')
    if not profile.phone_number:
        profile.phone_number = phone
        changed.append('phone_number')
    if changed:
        profile.save(update_fields=changed)


@login_required
@require_http_methods(["GET", "POST"])
def checkout(request):
    sync_cart_with_stock(request)
    if not get_cart(request.session):
        messages.warning(request, "Your cart is empty.")
        return redirect('cart:cart')

    if request.method == "POST":
        form = CheckoutForm(request.POST)
        if not form.is_valid():
            messages.error(request, "Please fix the errors below.")
        elif _refresh_prices(request.session):
            # orders are charged at the live price: show the new total before placing it
            messages.warning(request, "Some prices changed since you added them to your cart. "
                                      "Please review your order total.")
        else:
            payment_method = form.cleaned_data['payment_method']
            status = "pending"
            if payment_method == "credit-card" and not settings.STRIPE_SECRET_KEY:
                # no gateway configured: card payments are recorded as settled
                status = "completed"

            address = form.shipping_address()
            try:
                order = place_order(
                    request.user,
                    _order_lines(request.session),
                    shipping_address=f"{form.cleaned_data['full_name']}, {address}",
                    contact_number=form.cleaned_data['phone'],
                    payment_method=payment_method,
                    status=status,
                )
            except InsufficientStock as exc:
                messages.error(request, str(exc))
                sync_cart_with_stock(request)
                return redirect('cart:cart')

            _save_shipping_to_profile(request.user, address, form.cleaned_data['phone'])
            clear_cart(request.session)
            request.session['last_order_id'] = order.id

            if payment_method == "credit-card" and settings.STRIPE_SECRET_KEY:
                return _redirect_to_stripe(request, order)
            messages.success(request, f"Order #{order.id} placed.")
            return redirect('cart:thank_you')
    else:
        form = CheckoutForm(initial=_initial_from_profile(request.user))

    return render(request, 'cart/checkout.html', {
        'form': form,
        'cart_items': cart_lines(request.session),
        'total_price': cart_total(request.session),
    })


# -----------------------
# Stripe
# -----------------------
def _redirect_to_stripe(request, order):
    stripe.api_key = settings.STRIPE_SECRET_KEY
    currency = settings.CURRENCY.lower()
    line_items = [{
        "price_data": {
            "currency": currency,
            "unit_amount": int(it.price * 100),
            "product_data": {"name": f"{it.name} ({it.set_name} #{it.card_number})"},
        },
        "quantity": it.quantity,
    } for it in order.items.all()]

    try:
        session = stripe.checkout.Session.create(
            mode="payment",
            line_items=line_items,
            success_url=request.build_absolute_uri("/cart/thank-you/") + "?session_id={CHECKOUT_SESSION_ID}",
            cancel_url=request.build_absolute_uri(order.get_absolute_url()),
            customer_email=order.email or None,
            metadata={"order_id": str(order.id)},
        )
    except stripe.StripeError:
        logger.exception("Stripe session for order #%s failed", order.id)
        messages.error(request, "We couldn't reach the payment provider. Your order is saved as pending.")
        return redirect(order.get_absolute_url())

    order.gateway_id = session.id
    order.save(update_fields=["gateway_id"])
    return redirect(session.url)


@require_POST
@login_required
def stripe_checkout(request, order_id):
    """Retry card payment for a pending order."""
    order = get_object_or_404(Order, id=order_id, user=request.user, status="pending",
                              payment_method="credit-card")
    if not settings.STRIPE_SECRET_KEY:
        messages.error(request, "Card payments are not available right now.")
        return redirect(order.get_absolute_url())
    return _redirect_to_stripe(request, order)


def thank_you(request):
    order = None
    order_id = request.session.get('last_order_id')
    if order_id and request.user.is_authenticated:
        order = Order.objects.filter(id=order_id, user=request.user).first()

    session_id = request.GET.get("session_id")
    if order and session_id and order.status == "pending" and settings.STRIPE_SECRET_KEY:
        stripe.api_key = settings.STRIPE_SECRET_KEY
        try:
            sess = stripe.checkout.Session.retrieve(session_id)
        except stripe.StripeError:
            logger.warning("Could not verify Stripe session %s for order #%s", session_id, order.id)
        else:
            if sess.payment_status == "paid" and str(sess.metadata["order_id"]) == str(order.id):
                order.mark_paid(gateway_id=sess.id)
                logger.info("Order #%s paid via Stripe session %s", order.id, sess.id)

    return render(request, 'cart/thank_you.html', {'order': order})


@csrf_exempt
@require_POST
def stripe_webhook(request):
    secret = settings.STRIPE_WEBHOOK_SECRET
    if not secret:
        return HttpResponse(status=400)
    try:
        event = stripe.Webhook.construct_event(request.body, request.META.get("HTTP_STRIPE_SIGNATURE"), secret)
    except (ValueError, stripe.SignatureVerificationError):
        logger.warning("Rejected Stripe webhook with bad payload or signature")
        return HttpResponse(status=400)

    if event.type == "checkout.session.completed":
        sess = event.data.object
        order = Order.objects.filter(id=sess.metadata["order_id"]).first()
        if order is None:
            logger.warning("Stripe webhook for unknown order %s", sess.metadata["order_id"])
        elif order.status == "pending":
            order.mark_paid(gateway_id=sess.id)
            logger.info("Order #%s paid (webhook)", order.id)
    return HttpResponse(status=200)
