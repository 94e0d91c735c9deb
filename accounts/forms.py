# accounts/forms.py
from django import forms
from django.contrib.auth.forms import AuthenticationForm, UserCreationForm
from django.contrib.auth.models import User

USERNAME_MAX = 20


def username_for(email):
    """First free username built from the local part of ``email`` (ash, ash1, ash2...)."""
    base = email.split("@", 1)[0][:USERNAME_MAX] or "user"
    taken = set(
        User.objects.filter(username__startswith=base).values_list("username", flat=True)
    )
    candidate, n = base, 0
    while candidate in taken:
        n += 1
        candidate = f"{base}{n}"
    return candidate


def _control(field, **attrs):
    field.widget.attrs.update({"class": "form-control", **attrs})
    return field


class SignupForm(UserCreationForm):
    first_name = forms.CharField(max_length=30, label="First name")
    last_name = forms.CharField(max_length=30, label="Last name")
    email = forms.EmailField(max_length=254, label="Email")

    class Meta:
        model = User
        fields = ("first_name", "last_name", "email")

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name, field in self.fields.items():
            _control(field, autocomplete="email" if name == "email" else "off")

    def clean_email(self):
        email = self.cleaned_data["email"].strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError("An account with this email already exists.")
        return email

    def save(self, commit=True):
        user = super().save(commit=False)
        user.username = username_for(user.email)
        if commit:
            user.save()
        return user


class EmailLoginForm(AuthenticationForm):
    """Sign in with email and password."""
    username = forms.EmailField(label="Email", widget=forms.EmailInput(attrs={"autofocus": True}))

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in self.fields.values():
            _control(field)

    def clean_username(self):
        # auth backends look users up by username
        email = self.cleaned_data["username"]
        match = User.objects.filter(email__iexact=email).values_list("username", flat=True).first()
        return match or email
