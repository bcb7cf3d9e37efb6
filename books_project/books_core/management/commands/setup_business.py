import datetime

from dateutil.relativedelta import relativedelta
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils.dateparse import parse_date
from django.utils.text import slugify

from books_core.models import Business, BusinessMembership
from books_core.services.financial_years import create_financial_year
from books_core.services.setup import install_defaults

User = get_user_model()


# Generate unique slug for a business
def unique_slug_for_business(name, max_tries=100):
    base = slugify(name) or "business"
    slug = base
    i = 1
    # If plain slug is taken, append -1, -2, etc.
    while Business.objects.filter(slug=slug).exists():
        slug = f"{base}-{i}"
        i += 1
        if i > max_tries:
            raise CommandError("Couldn't generate unique slug")
    return slug


class Command(BaseCommand):
    help = (
        "Create a business with the default chart of account groups, "
        "voucher types and a first financial year; optionally an owner user."
    )

    def add_arguments(self, parser):
        parser.add_argument("name", help="Name of the business to create.")
        parser.add_argument("--currency", default="USD", help="Reporting currency code.")
        parser.add_argument(
            "--year-start",
            help="First day of the financial year (YYYY-MM-DD). Defaults to 1 January of this year.",
        )
        parser.add_argument("--username", help="Owner user, created if missing.")
        parser.add_argument("--password", help="Password for a newly created owner user.")

    @transaction.atomic
    def handle(self, *args, **options):
        name = options["name"]
        if options["year_start"]:
            start = parse_date(options["year_start"])
            if start is None:
                raise CommandError(f"Invalid --year-start: {options['year_start']}")
        else:
            start = datetime.date(datetime.date.today().year, 1, 1)

        # 1. Business
        business = Business.objects.create(
            name=name,
            slug=unique_slug_for_business(name),
            currency_code=options["currency"],
        )
        self.stdout.write(self.style.SUCCESS(f"Created business: {business} ({business.slug})"))

        # 2. Defaults
        groups, types = install_defaults(business)
        self.stdout.write(self.style.SUCCESS(
            f"Installed {len(groups)} account groups and {len(types)} voucher types"))

        # 3. Financial year: twelve months from start
        end = start + relativedelta(years=1) - datetime.timedelta(days=1)
        label = f"FY {start.year}" if start.month == 1 else f"FY {start.year}-{str(end.year)[-2:]}"
        year = create_financial_year(business, label, start, end, is_current=True)
        self.stdout.write(self.style.SUCCESS(
            f"Created financial year: {year.name} ({year.start_date} to {year.end_date})"))

        # 4. Owner
        username = options["username"]
        if username:
            user, created = User.objects.get_or_create(
                username=username, defaults={"email": f"{username}@example.com"})
            if created:
                if options["password"]:
                    user.set_password(options["password"])
                else:
                    user.set_unusable_password()
                user.save()
            BusinessMembership.objects.get_or_create(
                user=user, business=business, defaults={"role": "owner"})
            if user.default_business_id is None:
                user.default_business = business
                user.save(update_fields=["default_business"])
            business.owner = user
            business.save(update_fields=["owner"])
            self.stdout.write(self.style.SUCCESS(f"Owner: {user.username}"))

        self.stdout.write(self.style.SUCCESS("Business setup complete!"))
