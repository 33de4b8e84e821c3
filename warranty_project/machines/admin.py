from django.contrib import admin

from .models import Machine, MachineModel, Sale, ServiceRequest, ServiceVisit


@admin.register(MachineModel)
class MachineModelAdmin(admin.ModelAdmin):
    list_display = ("name", "warranty_period_months", "created_at")
    search_fields = ("name",)


class SaleInline(admin.StackedInline):
    model = Sale
    extra = 0
    readonly_fields = ("created_at",)


@admin.register(Machine)
class MachineAdmin(admin.ModelAdmin):
    list_display = ("serial_number", "machine_model", "created_at")
    list_filter = ("machine_model",)
    search_fields = ("serial_number", "sale__customer_name", "sale__customer_email")
    inlines = (SaleInline,)


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "machine",
        "sale_date",
        "customer_name",
        "customer_email",
        "warranty_period_months",
        "reminder_opt_out",
    )
    list_filter = ("reminder_opt_out", "sale_date")
    search_fields = ("machine__serial_number", "customer_name", "customer_email")

    # =====================================================
    # WARRANTY SNAPSHOT IS FIXED ONCE RECORDED
    # =====================================================
    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return ("warranty_period_months", "created_at")
        return ("created_at",)


class ServiceVisitInline(admin.StackedInline):
    model = ServiceVisit
    extra = 0


@admin.register(ServiceRequest)
class ServiceRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "machine", "visit_status", "created_at")
    search_fields = ("machine__serial_number",)
    inlines = (ServiceVisitInline,)

    def visit_status(self, obj):
        visit = getattr(obj, "service_visit", None)
        return visit.status if visit else "-"

    visit_status.short_description = "Visit"
