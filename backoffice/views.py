# backoffice/views.py
import csv
import logging
from decimal import Decimal

from django.contrib import messages
from django.contrib.admin.views.decorators import staff_member_required
from django.contrib.auth.models import User
from django.core.paginator import Paginator
from django.db.models import Q, Sum
from django.http import HttpResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.views.decorators.http import require_POST

from browse import catalog
from orders.models import Order
from shop.exceptions import CatalogUnavailable, ImportFailed
from shop.inventory import (
    ADMIN_SEARCH_FIELDS, SORT_CHOICES, CardFilter, apply_filters, group_cards,
)
from shop.models import Card
from userprofile.models import UserProfile
from . import services
from .forms import AddCardForm, EditCardForm, OrderStatusForm

logger = logging.getLogger(__name__)

CARDS_PER_PAGE = 10
ORDERS_PER_PAGE = 20
USERS_PER_PAGE = 25


def admin_required(view):
    return staff_member_required(view, login_url="accounts:login")


# ---------- dashboard ----------
@admin_required
def dashboard(request):
    units = Card.objects.available()
    revenue = (
        Order.objects.exclude(status="cancelled").aggregate(total=Sum("total_amount")).get("total")
        or Decimal("0.00")
    )
    ctx = {
        "user_count": User.objects.count(),
        "admin_count": User.objects.filter(is_staff=True).count(),
        "unit_count": units.count(),
        "card_count": units.order_by().values("name", "set_name", "card_number").distinct().count(),
        "order_count": Order.objects.count(),
        "revenue": revenue,
        "recent_orders": Order.objects.select_related("user")[:5],
    }
    return render(request, "backoffice/dashboard.html", ctx)


# ---------- cards ----------
@admin_required
def cards_list(request):
    rows = list(Card.objects.available())
    cfg = CardFilter.from_querydict(request.GET, default_sort="set-name", search_fields=ADMIN_SEARCH_FIELDS)
    listed = apply_filters(group_cards(rows), cfg)
    page = Paginator(listed, CARDS_PER_PAGE).get_page(request.GET.get("page"))
    return render(request, "backoffice/cards_list.html", {
        "page": page,
        "filters": cfg,
        "sets": Card.objects.available().set_names(),
        "sort_choices": SORT_CHOICES,
        "total_cards": len(listed),
    })


@admin_required
def card_add(request):
    if request.method == "POST":
        form = AddCardForm(request.POST)
        if form.is_valid():
            quantity = form.cleaned_data["quantity"]
            rows = services.add_cards(form.card_fields(), quantity)
            messages.success(request, f"Added {quantity} × {rows[0].name}.")
            return redirect("backoffice:cards_list")
    else:
        form = AddCardForm()
    return render(request, "backoffice/card_form.html", {"form": form, "adding": True})


@admin_required
def card_edit(request, card_id):
    card = get_object_or_404(Card, id=card_id)
    # binding the form mutates ``card``, so remember the identity it had
    old_identity = card.identity

    if request.method == "POST":
        form = EditCardForm(request.POST, instance=card)
        if form.is_valid():
            updated = services.update_card(form.instance, old_identity, form.cleaned_data["apply_to_all"])
            msg = "Card updated."
            if updated:
                msg = f"Card updated along with {updated} other copies."
            messages.success(request, msg)
            return redirect("backoffice:card_edit", card_id=card.id)
    else:
        form = EditCardForm(instance=card)

    variants = Card.objects.for_identity(old_identity).order_by("created_at", "id")
    return render(request, "backoffice/card_form.html", {
        "form": form,
        "card": card,
        "variants": variants,
        "stock": sum(1 for v in variants if v.is_available),
        "adding": False,
    })


@admin_required
@require_POST
def card_add_variant(request, card_id):
    card = get_object_or_404(Card, id=card_id)
    copy = services.add_variant(card)
    messages.success(request, f"Added another copy of {card.name}.")
    return redirect("backoffice:card_edit", card_id=copy.id)


@admin_required
@require_POST
def card_delete(request, card_id):
    card = get_object_or_404(Card.objects.available(), id=card_id)
    sibling = Card.objects.siblings_of(card).exclude(id=card.id).first()
    services.delete_card(card)
    messages.success(request, f"Removed one copy of {card.name}.")
    if sibling and request.POST.get("next") == "edit":
        return redirect("backoffice:card_edit", card_id=sibling.id)
    return redirect("backoffice:cards_list")


@admin_required
@require_POST
def card_delete_all(request, card_id):
    card = get_object_or_404(Card, id=card_id)
    deleted = services.delete_all_copies(card)
    messages.success(request, f"Removed {deleted} copies of {card.name}.")
    return redirect("backoffice:cards_list")


# ---------- catalog import ----------
@admin_required
def card_import(request):
    set_id = (request.POST.get("set") or request.GET.get("set") or "").strip()
    query = request.GET.get("q", "").strip()

    if request.method == "POST":
        ids = request.POST.getlist("card_ids")
        if not set_id or not ids:
            messages.error(request, "Please select at least one card to import.")
            return redirect(f"{request.path}?set={set_id}")
        try:
            chosen = catalog.get_cards_by_ids(set_id, ids)
        except CatalogUnavailable as exc:
            messages.error(request, str(exc))
            return redirect(f"{request.path}?set={set_id}")

        try:
            result = services.import_catalog_cards(chosen)
        except ImportFailed:
            messages.error(request, "Failed to import cards. Please try again.")
            return redirect(f"{request.path}?set={set_id}")

        if not result.ok:
            messages.warning(request, f"Imported {result.imported} of {result.requested} cards.")
        else:
            messages.success(request, f"Successfully imported {result.imported} of {result.requested} cards.")
        return redirect("backoffice:cards_list")

    sets, cards, error = [], [], None
    try:
        sets = catalog.list_sets()
        if set_id:
            cards = catalog.set_cards(set_id)
    except CatalogUnavailable as exc:
        error = str(exc)

    if query:
        needle = query.casefold()
        cards = [c for c in cards if needle in c["name"].casefold() or needle in c["number"].casefold()]

    return render(request, "backoffice/card_import.html", {
        "sets": sets,
        "set_id": set_id,
        "cards": cards,
        "query": query,
        "error": error,
    })


# ---------- users ----------
@admin_required
def users_list(request):
    qs = User.objects.select_related("profile").order_by("-date_joined")
    q = request.GET.get("q", "").strip()
    if q:
        qs = qs.filter(Q(email__icontains=q) | Q(username__icontains=q) | Q(profile__full_name__icontains=q))
    page = Paginator(qs, USERS_PER_PAGE).get_page(request.GET.get("page"))
    return render(request, "backoffice/users_list.html", {"page": page, "q": q})


@admin_required
@require_POST
def user_toggle_admin(request, user_id):
    user = get_object_or_404(User, id=user_id)
    if user == request.user:
        messages.error(request, "You can't change your own admin status.")
        return redirect("backoffice:users_list")

    profile, _ = UserProfile.objects.get_or_create(user=user, defaults={"username": user.username})
    make_admin = not user.is_staff
    profile.set_admin(make_admin)
    logger.info("%s set admin=%s for %s", request.user, make_admin, user)
    messages.success(request, f"{user.email or user.username} is {'now' if make_admin else 'no longer'} an admin.")
    return redirect("backoffice:users_list")


# ---------- orders: shared filtering ----------
def _filtered_orders(request):
    qs = Order.objects.select_related("user").order_by("-created_at", "-id")
    q = request.GET.get("q", "").strip()
    status = request.GET.get("status", "")
    payment = request.GET.get("payment", "")

    if q:
        cond = Q(email__icontains=q) | Q(user__username__icontains=q) | Q(shipping_address__icontains=q)
        if q.isdigit():
            cond |= Q(id=int(q))
        qs = qs.filter(cond)
    if status:
        qs = qs.filter(status=status)
    if payment:
        qs = qs.filter(payment_method=payment)
    return qs


@admin_required
def orders_list(request):
    page = Paginator(_filtered_orders(request), ORDERS_PER_PAGE).get_page(request.GET.get("page"))
    return render(request, "backoffice/orders_list.html", {
        "page": page,
        "statuses": Order.STATUS_CHOICES,
        "payments": Order.PAYMENT_CHOICES,
        "current": request.GET,
    })


@admin_required
def orders_export_csv(request):
    resp = HttpResponse(content_type="text/csv")
    resp["Content-Disposition"] = 'attachment; filename="orders.csv"'
    w = csv.writer(resp)
    w.writerow(["ID", "Created", "Email", "Items", "Total", "Status", "Payment", "Paid at",
                "Contact", "Shipping address"])
    for o in _filtered_orders(request).prefetch_related("items"):
        w.writerow([
            o.id, o.created_at.isoformat(), o.email, o.item_count, o.total_amount, o.status,
            o.payment_method, o.paid_at.isoformat() if o.paid_at else "", o.contact_number,
            o.shipping_address,
        ])
    return resp


@admin_required
def order_detail(request, order_id):
    o = get_object_or_404(Order.objects.select_related("user").prefetch_related("items"), id=order_id)
    prev_status = o.status

    if request.method == "POST":
        form = OrderStatusForm(request.POST, instance=o)
        if form.is_valid():
            new_status = form.cleaned_data["status"]
            if prev_status == "cancelled" and new_status != "cancelled":
                messages.error(request, "Cancelled orders can't be reopened; their cards are back in stock.")
                return redirect("backoffice:order_detail", order_id=o.id)

            if new_status == "cancelled" and prev_status != "cancelled":
                o.admin_note = form.cleaned_data["admin_note"]
                o.save(update_fields=["admin_note"])
                released = o.cancel()
                messages.success(request, f"Order cancelled; {released} cards returned to stock.")
            else:
                if new_status == "paid" and not o.paid_at:
                    o.paid_at = timezone.now()
                o.save()
                messages.success(request, "Order updated.")
            return redirect("backoffice:order_detail", order_id=o.id)
    else:
        form = OrderStatusForm(instance=o)

    return render(request, "backoffice/order_detail.html", {"o": o, "form": form})
