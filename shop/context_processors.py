from django.conf import settings


def shop_settings(request):
    return {
        "CURRENCY_SYMBOL": settings.CURRENCY_SYMBOL,
    }
