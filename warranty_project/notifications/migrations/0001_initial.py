import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("machines", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ActionLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action_type", models.CharField(choices=[("REMINDER_SENT", "Reminder sent"), ("SERVICE_SCHEDULED", "Service scheduled"), ("WARRANTY_VIEWED", "Warranty viewed"), ("EMAIL_OPENED", "Email opened"), ("LINK_CLICKED", "Link clicked")], db_index=True, max_length=30)),
                ("channel", models.CharField(choices=[("EMAIL", "Email"), ("WHATSAPP", "WhatsApp"), ("WEB", "Web"), ("SMS", "SMS"), ("SYSTEM", "System")], max_length=20)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("reserved_for", models.DateField(blank=True, help_text="Calendar day this entry reserves for the machine and action", null=True)),
                ("machine", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="action_logs", to="machines.machine")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["machine", "action_type", "created_at"], name="actionlog_machine_type_idx")],
                "constraints": [models.UniqueConstraint(condition=models.Q(("reserved_for__isnull", False)), fields=("machine", "action_type", "reserved_for"), name="unique_action_per_machine_per_day")],
            },
        ),
    ]
