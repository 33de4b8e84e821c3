from django.db import models
from django.utils import timezone


class MachineModel(models.Model):
    """
    A product line. The warranty period is copied onto each Sale
    when it is recorded.
    """

    name = models.CharField(max_length=200, unique=True)

    warranty_period_months = models.PositiveSmallIntegerField(
        default=12,
        help_text="Warranty length granted to machines sold from this model"
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Machine(models.Model):
    """A sold or stocked unit, identified by its serial number."""

    serial_number = models.CharField(max_length=100, unique=True)

    machine_model = models.ForeignKey(
        MachineModel,
        on_delete=models.PROTECT,
        related_name="machines"
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["serial_number"]

    def __str__(self):
        return f"{self.serial_number} ({self.machine_model.name})"


class Sale(models.Model):
    machine = models.OneToOneField(
        Machine,
        on_delete=models.CASCADE,
        related_name="sale"
    )

    sale_date = models.DateField()

    customer_name = models.CharField(max_length=200, blank=True)
    customer_email = models.EmailField(blank=True)

    reminder_opt_out = models.BooleanField(
        default=False,
        help_text="Customer asked not to receive service reminders"
    )

    # =====================================================
    # WARRANTY SNAPSHOT
    # Filled from the machine model on first save (see signals)
    # =====================================================
    warranty_period_months = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        help_text="Warranty length fixed at the time of sale"
    )

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Sale of {self.machine.serial_number} on {self.sale_date}"


class ServiceRequest(models.Model):
    machine = models.ForeignKey(
        Machine,
        on_delete=models.CASCADE,
        related_name="service_requests"
    )

    description = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Service request #{self.pk} for {self.machine.serial_number}"


class ServiceVisit(models.Model):

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        SCHEDULED = "SCHEDULED", "Scheduled"
        IN_PROGRESS = "IN_PROGRESS", "In Progress"
        COMPLETED = "COMPLETED", "Completed"
        CANCELLED = "CANCELLED", "Cancelled"

    service_request = models.OneToOneField(
        ServiceRequest,
        on_delete=models.CASCADE,
        related_name="service_visit"
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )

    visit_date = models.DateField(null=True, blank=True)

    def __str__(self):
        return f"Visit for request #{self.service_request_id} - {self.status}"
