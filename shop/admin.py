from django.contrib import admin
from .models import Card


@admin.register(Card)
class CardAdmin(admin.ModelAdmin):
    list_display = ('name', 'set_name', 'card_number', 'rarity', 'price', 'condition', 'is_featured', 'claimed_by')
    search_fields = ('name', 'set_name', 'card_number')
    list_filter = ('set_name', 'rarity', 'condition', 'is_featured')
