from decimal import Decimal

from django.db import models
from django.urls import reverse
from django.utils import timezone

from .inventory import identity_of, normalize_identity


class CardQuerySet(models.QuerySet):
    def available(self):
        """Rows not yet claimed by an order."""
        return self.filter(claimed_by__isnull=True)

    def for_identity(self, identity):
        name, set_name, card_number = normalize_identity(identity)
        return self.filter(name=name, set_name=set_name, card_number=card_number)

    def siblings_of(self, card):
        return self.for_identity(card.identity)

    def stock_for(self, identity):
        """Count-only read: how many copies of this logical card are for sale."""
        return self.available().for_identity(identity).count()

    def set_names(self):
        return list(
            self.order_by("set_name").values_list("set_name", flat=True).distinct()
        )


class Card(models.Model):
    """
    One physical, sellable copy of a card. Stock for a logical card is the
    number of available rows sharing name, set_name and card_number.
    """
    CONDITION_CHOICES = [
        ('Mint', 'Mint'),
        ('Near Mint', 'Near Mint'),
        ('Excellent', 'Excellent'),
        ('Good', 'Good'),
        ('Played', 'Played'),
    ]

    name = models.CharField(max_length=200)
    set_name = models.CharField(max_length=200)
    card_number = models.CharField(max_length=20)
    rarity = models.CharField(max_length=60, blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    condition = models.CharField(max_length=20, choices=CONDITION_CHOICES, default='Near Mint')
    description = models.TextField(blank=True)
    seller_notes = models.TextField(blank=True)
    is_featured = models.BooleanField(default=False)

    # set when this copy is sold; claimed rows no longer count as stock.
    # Orders give copies back only through Order.cancel(), never by deletion.
    claimed_by = models.ForeignKey(
        "orders.OrderItem", null=True, blank=True, on_delete=models.PROTECT, related_name="claimed_cards"
    )

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CardQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["name", "set_name", "card_number"], name="card_identity_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.set_name} #{self.card_number})"

    @property
    def identity(self):
        return identity_of(self)

    @property
    def is_available(self):
        return self.claimed_by_id is None

    def get_absolute_url(self):
        return reverse("shop:card_detail", args=[self.pk])
