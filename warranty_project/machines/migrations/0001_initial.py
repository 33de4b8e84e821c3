import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="MachineModel",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, unique=True)),
                ("warranty_period_months", models.PositiveSmallIntegerField(default=12, help_text="Warranty length granted to machines sold from this model")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Machine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("serial_number", models.CharField(max_length=100, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("machine_model", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="machines", to="machines.machinemodel")),
            ],
            options={
                "ordering": ["serial_number"],
            },
        ),
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sale_date", models.DateField()),
                ("customer_name", models.CharField(blank=True, max_length=200)),
                ("customer_email", models.EmailField(blank=True, max_length=254)),
                ("reminder_opt_out", models.BooleanField(default=False, help_text="Customer asked not to receive service reminders")),
                ("warranty_period_months", models.PositiveSmallIntegerField(blank=True, help_text="Warranty length fixed at the time of sale", null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("machine", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="sale", to="machines.machine")),
            ],
        ),
        migrations.CreateModel(
            name="ServiceRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("machine", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="service_requests", to="machines.machine")),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="ServiceVisit",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("SCHEDULED", "Scheduled"), ("IN_PROGRESS", "In Progress"), ("COMPLETED", "Completed"), ("CANCELLED", "Cancelled")], db_index=True, default="PENDING", max_length=20)),
                ("visit_date", models.DateField(blank=True, null=True)),
                ("service_request", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="service_visit", to="machines.servicerequest")),
            ],
        ),
    ]
