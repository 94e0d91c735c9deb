from django.core.paginator import Paginator
from django.http import Http404
from django.shortcuts import render, get_object_or_404

from .inventory import (
    CardFilter, SORT_CHOICES, apply_filters, distinct_values, group_by_set,
    group_cards, safe_stock_for, sort_records,
)
from .models import Card
from .query import cached_query

CARDS_PER_PAGE = 24
HOME_SECTION_SIZE = 8
RELATED_LIMIT = 4


def available_cards():
    """Every card row still for sale, newest first (cached)."""
    return cached_query("cards", "available", lambda: list(Card.objects.available()))


def _featured(grouped):
    featured = [g for g in grouped if any(v.is_featured for v in g.variants)]
    if not featured:
        # nothing flagged yet: show the most valuable cards instead
        featured = grouped
    return sort_records(featured, "price-desc")


def home(request):
    grouped = group_cards(available_cards())
    return render(request, 'shop/home.html', {
        'featured_cards': _featured(grouped)[:HOME_SECTION_SIZE],
        'new_arrivals': grouped[:HOME_SECTION_SIZE],
    })


def shop_index(request):
    grouped = group_cards(available_cards())
    sets = [
        {
            'name': set_name,
            'card_count': len(groups),
            'unit_count': sum(g.quantity for g in groups),
            'image_url': next((g.image_url for g in groups if g.image_url), ''),
        }
        for set_name, groups in group_by_set(grouped).items()
    ]
    return render(request, 'shop/shop.html', {'sets': sets})


def all_cards(request):
    cards = available_cards()
    cfg = CardFilter.from_querydict(request.GET, default_sort="newest")
    listed = apply_filters(group_cards(cards), cfg)
    page = Paginator(listed, CARDS_PER_PAGE).get_page(request.GET.get("page"))

    return render(request, 'shop/all_cards.html', {
        'page': page,
        'filters': cfg,
        'sets': distinct_values(cards, 'set_name'),
        'rarities': distinct_values(cards, 'rarity'),
        'sort_choices': SORT_CHOICES,
        'total_cards': len(listed),
    })


def featured(request):
    grouped = group_cards(available_cards())
    return render(request, 'shop/featured.html', {
        'cards': _featured(grouped),
    })


def set_detail(request, set_name):
    rows = [c for c in available_cards() if c.set_name == set_name]
    if not rows:
        raise Http404("No cards in this set")

    cfg = CardFilter.from_querydict(request.GET, default_sort="set-name")
    cfg.set_filter = set_name
    return render(request, 'shop/set_detail.html', {
        'set_name': set_name,
        'cards': apply_filters(group_cards(rows), cfg),
        'filters': cfg,
        'rarities': distinct_values(rows, 'rarity'),
        'sort_choices': SORT_CHOICES,
    })


def card_detail(request, card_id):
    card = get_object_or_404(Card, id=card_id)
    stock = safe_stock_for(card.identity)

    copies = list(Card.objects.available().siblings_of(card).order_by('condition', 'id'))

    same_set = [
        c for c in available_cards()
        if c.set_name == card.set_name and c.identity != card.identity
    ]
    related = group_cards(same_set)[:RELATED_LIMIT]

    return render(request, 'shop/card_detail.html', {
        'card': card,
        'stock': stock,
        'copies': copies,
        'conditions': distinct_values(copies, 'condition'),
        'related_cards': related,
    })
