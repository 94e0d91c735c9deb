# accounts/views.py
import logging

from django.contrib import messages
from django.contrib.auth import login
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme

from .forms import EmailLoginForm, SignupForm

logger = logging.getLogger(__name__)


def _next_url(request, default="shop:home"):
    target = request.POST.get("next") or request.GET.get("next")
    if target and url_has_allowed_host_and_scheme(target, allowed_hosts={request.get_host()}):
        return target
    return default


def register(request):
    if request.user.is_authenticated:
        return redirect("shop:home")
    if request.method == "POST":
        form = SignupForm(request.POST)
        if form.is_valid():
            user = form.save()
            login(request, user, backend="django.contrib.auth.backends.ModelBackend")
            logger.info("New account %s registered", user.username)
            messages.success(request, "Welcome! Your account has been created.")
            return redirect(_next_url(request))
    else:
        form = SignupForm()
    return render(request, "accounts/register.html", {"form": form})


def login_view(request):
    if request.method == "POST":
        form = EmailLoginForm(request, data=request.POST)
        if form.is_valid():
            login(request, form.get_user())
            return redirect(_next_url(request))
        messages.error(request, "Incorrect email or password.")
    else:
        form = EmailLoginForm(request)
    return render(request, "accounts/login.html", {"form": form, "next": request.GET.get("next", "")})
