from decimal import Decimal

from django.conf import settings
from django.db import models, transaction
from django.urls import reverse
from django.utils import timezone

from shop.query import invalidate


# -------------------------------
# Orders / Items
# -------------------------------
class Order(models.Model):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("paid", "Paid"),
        ("completed", "Completed"),
        ("shipped", "Shipped"),
        ("cancelled", "Cancelled"),
    ]
    PAYMENT_CHOICES = [
        ("credit-card", "Credit card"),
        ("gcash", "GCash"),
        ("cod", "Cash on delivery"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="orders"
    )
    email = models.EmailField(blank=True)
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default="pending")
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    # --- shipping / payment snapshot ---
    shipping_address = models.CharField(max_length=500, blank=True)
    contact_number = models.CharField(max_length=30, blank=True)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_CHOICES, default="cod")
    gateway_id = models.CharField(max_length=255, blank=True)   # Stripe checkout session id

    created_at = models.DateTimeField(auto_now_add=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    admin_note = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Order #{self.id} - {self.status}"

    def get_absolute_url(self):
        return reverse("orders:detail", args=[self.pk])

    @property
    def item_count(self):
        return sum(it.quantity for it in self.items.all())

    def recompute_total(self):
        self.total_amount = sum((it.line_total() for it in self.items.all()), Decimal("0.00"))
        self.save(update_fields=["total_amount"])

    def mark_paid(self, gateway_id=""):
        self.status = "paid"
        self.paid_at = timezone.now()
        if gateway_id:
            self.gateway_id = gateway_id
        self.save(update_fields=["status", "paid_at", "gateway_id"])

    @transaction.atomic
    def cancel(self):
        """Cancel the order and put its claimed copies back on sale."""
        from shop.models import Card

        released = Card.objects.filter(claimed_by__order=self).update(claimed_by=None)
        self.status = "cancelled"
        self.save(update_fields=["status"])
        transaction.on_commit(lambda: invalidate("cards"))
        return released


class OrderItem(models.Model):
    order = models.ForeignKey(Order, related_name="items", on_delete=models.CASCADE)
    # the copy the shopper picked; sold copies are tracked through Card.claimed_by
    card = models.ForeignKey(
        "shop.Card", null=True, blank=True, on_delete=models.SET_NULL, related_name="order_items"
    )
    name = models.CharField(max_length=200)
    set_name = models.CharField(max_length=200, blank=True)
    card_number = models.CharField(max_length=20, blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(default=1)

    def line_total(self):
        return self.price * self.quantity

    def __str__(self):
        return f"{self.quantity} × {self.name} (Order #{self.order_id})"
