# backoffice/forms.py
from django import forms

from orders.models import Order
from shop.models import Card


def _style(form):
    for name, field in form.fields.items():
        if isinstance(field.widget, forms.CheckboxInput):
            field.widget.attrs.setdefault("class", "form-check-input")
        elif isinstance(field.widget, forms.Select):
            field.widget.attrs.setdefault("class", "form-select")
        else:
            field.widget.attrs.setdefault("class", "form-control")


class CardForm(forms.ModelForm):
    class Meta:
        model = Card
        fields = ["name", "set_name", "card_number", "rarity", "image_url", "price",
                  "condition", "description", "seller_notes", "is_featured"]
        widgets = {
            "description": forms.Textarea(attrs={"rows": 3}),
            "seller_notes": forms.Textarea(attrs={"rows": 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        _style(self)

    def clean_price(self):
        price = self.cleaned_data["price"]
        if price < 0:
            raise forms.ValidationError("Price cannot be negative.")
        return price


class AddCardForm(CardForm):
    quantity = forms.IntegerField(min_value=1, max_value=100, initial=1,
                                  help_text="Number of identical copies to add.")

    def card_fields(self):
        return {f: self.cleaned_data[f] for f in self._meta.fields}


class EditCardForm(CardForm):
    apply_to_all = forms.BooleanField(required=False, initial=True, label="Apply to all copies")


class OrderStatusForm(forms.ModelForm):
    class Meta:
        model = Order
        fields = ["status", "admin_note"]
        widgets = {
            "status": forms.Select(attrs={"class": "form-select"}),
            "admin_note": forms.Textarea(attrs={"class": "form-control", "rows": 3}),
        }
