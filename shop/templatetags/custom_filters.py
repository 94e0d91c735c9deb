from decimal import Decimal, InvalidOperation

from django import template
from django.conf import settings

register = template.Library()


@register.filter
def money(value):
    try:
        amount = Decimal(str(value or "0"))
    except InvalidOperation:
        return value
    return f"{settings.CURRENCY_SYMBOL}{amount.quantize(Decimal('0.01')):,}"


@register.filter
def stock_label(quantity):
    if not quantity:
        return "Out of stock"
    if quantity == 1:
        return "Last one!"
    return f"{quantity} in stock"


@register.simple_tag(takes_context=True)
def query_with(context, **kwargs):
    """Current query string with some parameters replaced (pagination links)."""
    params = context["request"].GET.copy()
    for key, value in kwargs.items():
        if value in (None, ""):
            params.pop(key, None)
        else:
            params[key] = value
    return params.urlencode()
