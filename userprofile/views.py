from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.db.models import Prefetch, Sum
from django.shortcuts import redirect, render
from decimal import Decimal

from orders.models import Order, OrderItem
from .forms import UserProfileForm, UserUpdateForm
from .models import UserProfile


@login_required
def profile_view(request):
    user = request.user
    profile, _ = UserProfile.objects.get_or_create(user=user, defaults={'username': user.username})

    if request.method == "POST":
        user_form = UserUpdateForm(request.POST, instance=user)
        profile_form = UserProfileForm(request.POST, instance=profile)
        if user_form.is_valid() and profile_form.is_valid():
            user_form.save()
            profile_form.save()
            messages.success(request, "Profile updated successfully!")
            return redirect("userprofile:profile")
        messages.error(request, "Please fix the errors below.")
    else:
        user_form = UserUpdateForm(instance=user)
        profile_form = UserProfileForm(instance=profile)

    orders = (
        Order.objects.filter(user=user)
        .prefetch_related(Prefetch("items", queryset=OrderItem.objects.select_related("card")))
        .order_by("-created_at", "-id")
    )
    lifetime_spend = (
        orders.exclude(status="cancelled").aggregate(total=Sum("total_amount")).get("total")
        or Decimal("0.00")
    )

    return render(request, "userprofile/profile.html", {
        "form": user_form,
        "profile_form": profile_form,
        "orders": orders,
        "lifetime_spend": lifetime_spend,
    })
