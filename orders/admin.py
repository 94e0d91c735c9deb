from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "email", "status", "total_amount", "payment_method", "created_at", "paid_at")
    list_filter = ("status", "payment_method", "created_at")
    search_fields = ("email", "user__username", "shipping_address")
    inlines = [OrderItemInline]
