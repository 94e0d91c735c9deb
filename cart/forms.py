# cart/forms.py
from django import forms

from orders.models import Order


class CheckoutForm(forms.Form):
    full_name = forms.CharField(max_length=120, widget=forms.TextInput(attrs={"class": "form-control"}))
    address = forms.CharField(max_length=255, widget=forms.TextInput(attrs={"class": "form-control"}))
    city = forms.CharField(max_length=80, widget=forms.TextInput(attrs={"class": "form-control"}))
    state = forms.CharField(max_length=80, required=False, widget=forms.TextInput(attrs={"class": "form-control"}))
    zip_code = forms.CharField(max_length=20, widget=forms.TextInput(attrs={"class": "form-control"}))
    country = forms.CharField(max_length=80, initial="Philippines",
                              widget=forms.TextInput(attrs={"class": "form-control"}))
    phone = forms.CharField(max_length=30, widget=forms.TextInput(attrs={"class": "form-control"}))
    payment_method = forms.ChoiceField(choices=Order.PAYMENT_CHOICES, initial="cod", widget=forms.RadioSelect)

    def shipping_address(self):
        d = self.cleaned_data
        parts = [d["address"], d["city"], d.get("state"), d["zip_code"], d["country"]]
        return ", ".join(p for p in parts if p)
