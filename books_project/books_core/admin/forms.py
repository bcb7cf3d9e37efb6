from django import forms
from django.contrib.auth.forms import UserChangeForm, UserCreationForm

from books_core.models import Business, User


class UserAdminCreationForm(UserCreationForm):
    class Meta(UserCreationForm.Meta):
        model = User
        fields = ("username", "email", "default_business")


class UserAdminChangeForm(UserChangeForm):
    class Meta(UserChangeForm.Meta):
        model = User
        fields = ("username", "email", "first_name", "last_name",
                  "is_active", "is_staff", "is_superuser", "default_business")

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # only businesses the user is an active member of
        if self.instance.pk and "default_business" in self.fields:
            self.fields["default_business"].queryset = Business.objects.filter(
                memberships__user=self.instance, memberships__is_active=True).distinct()

    def clean_default_business(self):
        business = self.cleaned_data.get("default_business")
        if business is not None and self.instance.pk and not business.memberships.filter(
                user=self.instance, is_active=True).exists():
            raise forms.ValidationError("The user is not an active member of this business.")
        return business
