import json

import pytest
from django.test import Client
from django.urls import reverse

from userprofile.models import UserProfile

URL = "/api/admin/set-admin"


def post(client, payload):
    return client.post(URL, data=json.dumps(payload), content_type="application/json")


def test_url_is_wired():
    assert reverse("api_set_admin") == URL


@pytest.mark.django_db
def test_missing_user_id_is_400(client):
    resp = post(client, {"adminSecret": "x"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "User ID is required"}


@pytest.mark.django_db
def test_bad_json_is_400(client):
    resp = client.post(URL, data="not json", content_type="application/json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_wrong_secret_is_401(client, create_user, settings):
    settings.ADMIN_SETUP_SECRET = "let-me-in"
    user, _ = create_user()
    assert post(client, {"userId": user.id, "adminSecret": "nope"}).status_code == 401


@pytest.mark.django_db
def test_empty_setting_disables_secret(client, create_user):
    user, _ = create_user()
    assert post(client, {"userId": user.id, "adminSecret": ""}).status_code == 401


@pytest.mark.django_db
def test_secret_grants_admin(client, create_user, settings):
    settings.ADMIN_SETUP_SECRET = "let-me-in"
    user, _ = create_user()

    resp = post(client, {"userId": user.id, "adminSecret": "let-me-in"})

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    user.refresh_from_db()
    profile = UserProfile.objects.get(user=user)
    assert user.is_staff
    assert profile.is_admin and profile.role == "admin"


@pytest.mark.django_db
def test_admin_session_grants_admin(admin_client, create_user):
    user, _ = create_user(email="misty@example.com")
    resp = post(admin_client, {"userId": user.id})
    assert resp.status_code == 200
    user.refresh_from_db()
    assert user.is_staff


@pytest.mark.django_db
def test_admin_session_needs_csrf_token(create_user):
    admin, _ = create_user(email="admin@example.com", is_admin=True)
    target, _ = create_user(email="misty@example.com")
    client = Client(enforce_csrf_checks=True)
    client.force_login(admin)

    assert post(client, {"userId": target.id}).status_code == 401


@pytest.mark.django_db
def test_non_admin_session_is_401(user_client, create_user):
    target, _ = create_user(email="misty@example.com")
    assert post(user_client, {"userId": target.id}).status_code == 401


@pytest.mark.django_db
def test_unknown_user_is_404(admin_client):
    assert post(admin_client, {"userId": 987654}).status_code == 404
    assert post(admin_client, {"userId": "abc"}).status_code == 404


@pytest.mark.django_db
def test_get_not_allowed(client):
    assert client.get(URL).status_code == 405
