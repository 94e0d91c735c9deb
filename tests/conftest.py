from decimal import Decimal

import pytest
from django.contrib.auth.models import User

from shop.models import Card


@pytest.fixture(autouse=True)
def _shop_settings(settings):
    # on_commit hooks never fire inside a test transaction, so the read cache
    # would never be invalidated; read straight from the database instead
    settings.QUERY_CACHE_TTL = 0
    settings.QUERY_RETRY_BASE_DELAY = 0
    settings.CATALOG_IMPORT_BATCH_DELAY = 0
    settings.STRIPE_SECRET_KEY = ""
    settings.STRIPE_WEBHOOK_SECRET = ""
    settings.ADMIN_SETUP_SECRET = ""
    settings.POKEMONTCG_IO_API_KEY = ""


@pytest.fixture
def make_card(db):
    def _make_card(name="Pikachu", set_name="Base Set", card_number="58", copies=1, **fields):
        fields.setdefault("rarity", "Common")
        fields.setdefault("price", Decimal("4.99"))
        return [
            Card.objects.create(name=name, set_name=set_name, card_number=card_number, **fields)
            for _ in range(copies)
        ]

    return _make_card


@pytest.fixture
def create_user(db):
    def _create_user(*, email="user@example.com", username=None, password="s3cret-Passw0rd",
                     is_admin=False, first_name="Ash", last_name="Ketchum"):
        user = User.objects.create_user(
            username=username or email.split("@")[0],
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            is_staff=is_admin,
        )
        return user, password

    return _create_user


@pytest.fixture
def user_client(client, create_user):
    user, _ = create_user()
    client.force_login(user)
    client.user = user
    return client


@pytest.fixture
def admin_client(client, create_user):
    user, _ = create_user(email="admin@example.com", is_admin=True)
    client.force_login(user)
    client.user = user
    return client
