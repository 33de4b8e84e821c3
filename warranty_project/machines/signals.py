import logging

from django.db.models.signals import pre_save
from django.dispatch import receiver

from .models import Sale

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=Sale)
def snapshot_warranty_period(sender, instance, **kwargs):
    """
    Fix the warranty length at sale time.

    Later edits to the MachineModel do not change the warranty
    of machines that were already sold.
    """
    if instance.warranty_period_months is not None:
        return

    instance.warranty_period_months = instance.machine.machine_model.warranty_period_months

    logger.debug(
        "Sale for %s: warranty fixed at %s months",
        instance.machine.serial_number,
        instance.warranty_period_months,
    )
