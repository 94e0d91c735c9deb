# browse/views.py
from django.shortcuts import render

from shop.exceptions import CatalogUnavailable
from . import catalog


def _page_number(request):
    try:
        return max(1, int(request.GET.get('page', 1)))
    except ValueError:
        return 1


def browse(request):
    """Catalog gallery: every card the API knows, not just what we stock."""
    query = request.GET.get('q', '').strip()
    set_id = request.GET.get('set', '').strip()
    page = _page_number(request)

    sets, cards, error = [], [], None
    try:
        sets = catalog.list_sets()
        cards = catalog.search_cards(query=query or None, set_id=set_id or None, page=page)
    except CatalogUnavailable as exc:
        error = str(exc)

    return render(request, 'browse/browse.html', {
        'sets': sets,
        'cards': cards,
        'query': query,
        'set_id': set_id,
        'page': page,
        'has_next': len(cards) == catalog.DEFAULT_PAGE_SIZE,
        'error': error,
    })


def tracker(request):
    query = request.GET.get('q', '').strip()
    page = _page_number(request)

    cards, error = [], None
    try:
        cards = catalog.price_tracker(query=query or None, page=page)
    except CatalogUnavailable as exc:
        error = str(exc)

    return render(request, 'browse/tracker.html', {
        'cards': cards,
        'query': query,
        'page': page,
        'error': error,
    })
