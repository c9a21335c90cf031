import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="UserProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("role", models.CharField(choices=[("user", "User"), ("admin", "Admin")], default="user", max_length=10)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("location", models.CharField(blank=True, max_length=255)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="FoodListing",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=100)),
                ("description", models.TextField(max_length=500)),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=12)),
                (
                    "quantity_unit",
                    models.CharField(
                        choices=[
                            ("kg", "Kilograms"),
                            ("liters", "Liters"),
                            ("pieces", "Pieces"),
                            ("boxes", "Boxes"),
                            ("packets", "Packets"),
                        ],
                        default="kg",
                        max_length=10,
                    ),
                ),
                ("remaining_quantity", models.DecimalField(decimal_places=3, max_digits=12)),
                ("location", models.CharField(max_length=255)),
                ("expiry_date", models.DateTimeField(db_index=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("available", "Available"),
                            ("reserved", "Reserved"),
                            ("collected", "Collected"),
                            ("partial", "Partially collected"),
                        ],
                        default="available",
                        max_length=10,
                    ),
                ),
                (
                    "expiry_status",
                    models.CharField(
                        choices=[("eatable", "Eatable"), ("spoiled", "Spoiled")],
                        db_index=True,
                        default="eatable",
                        max_length=10,
                    ),
                ),
                ("image", models.CharField(default="default-food.jpg", max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="food_listings",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="food_quantity_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("remaining_quantity__gte", 0),
                            ("remaining_quantity__lte", models.F("quantity")),
                        ),
                        name="food_remaining_within_quantity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="FoodTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_name", models.CharField(max_length=150)),
                ("quantity", models.DecimalField(decimal_places=3, max_digits=12)),
                ("taken_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "listing",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="transactions",
                        to="food.foodlisting",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="food_transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["taken_at", "id"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gt", 0)),
                        name="food_transaction_quantity_positive",
                    ),
                ],
            },
        ),
    ]
