# backoffice/api.py
"""JSON endpoints for the back office."""
import hmac
import json
import logging

from django.conf import settings
from django.contrib.auth.models import User
from django.http import JsonResponse
from django.middleware.csrf import CsrfViewMiddleware
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from userprofile.models import UserProfile

logger = logging.getLogger(__name__)


def _csrf_passes(request):
    """Session callers still need a CSRF token; secret callers don't have a session."""
    check = CsrfViewMiddleware(lambda req: None)
    check.process_request(request)
    return check.process_view(request, None, (), {}) is None


def _secret_matches(given):
    expected = settings.ADMIN_SETUP_SECRET
    if not expected or not isinstance(given, str):
        return False
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


@csrf_exempt
@require_POST
def set_admin(request):
    """
    Grant admin rights to ``userId``. Allowed for an admin session or for a
    caller presenting ``ADMIN_SETUP_SECRET`` (bootstrapping the first admin).
    """
    try:
        payload = json.loads(request.body or b"{}")
    except ValueError:
        return JsonResponse({"error": "Invalid JSON body"}, status=400)
    if not isinstance(payload, dict):
        return JsonResponse({"error": "Invalid JSON body"}, status=400)

    user_id = payload.get("userId")
    if not user_id:
        return JsonResponse({"error": "User ID is required"}, status=400)

    caller = request.user
    via_session = caller.is_authenticated and caller.is_staff and _csrf_passes(request)
    if not (via_session or _secret_matches(payload.get("adminSecret"))):
        logger.warning("Rejected set-admin request for user %s", user_id)
        return JsonResponse({"error": "Unauthorized"}, status=401)

    try:
        user = User.objects.get(pk=int(user_id))
    except (User.DoesNotExist, TypeError, ValueError):
        return JsonResponse({"error": "User not found"}, status=404)

    profile, _ = UserProfile.objects.get_or_create(user=user, defaults={"username": user.username})
    profile.set_admin(True)
    logger.info("User %s granted admin by %s", user, caller if via_session else "setup secret")
    return JsonResponse({"success": True, "message": "User admin status updated successfully"})
