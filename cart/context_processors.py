# cart/context_processors.py
from .utils import cart_count


def cart_summary(request):
    return {"cart_count": cart_count(request.session)}
