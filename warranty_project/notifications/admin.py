from django.contrib import admin
from django.utils.html import format_html

from .models import ActionLog


@admin.register(ActionLog)
class ActionLogAdmin(admin.ModelAdmin):
    """
    Read-only view of the action log.
    Entries are an audit trail and are never edited from here.
    """

    # =====================================================
    # LIST VIEW
    # =====================================================
    list_display = (
        "id",
        "machine",
        "colored_action",
        "channel",
        "recipient",
        "reserved_for",
        "created_at",
    )

    list_filter = (
        "action_type",
        "channel",
        "created_at",
    )

    search_fields = (
        "machine__serial_number",
        "machine__sale__customer_email",
    )

    ordering = ("-created_at",)
    list_per_page = 25

    # =====================================================
    # FIELDSETS (DETAIL VIEW)
    # =====================================================
    fieldsets = (
        ("Machine", {
            "fields": ("machine",),
        }),
        ("Action", {
            "fields": ("action_type", "channel", "metadata"),
        }),
        ("Timing", {
            "fields": ("created_at", "reserved_for"),
        }),
    )

    readonly_fields = (
        "machine",
        "action_type",
        "channel",
        "metadata",
        "created_at",
        "reserved_for",
    )

    # =====================================================
    # APPEND-ONLY
    # =====================================================
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    # =====================================================
    # CUSTOM DISPLAY HELPERS
    # =====================================================
    def colored_action(self, obj):
        color_map = {
            ActionLog.ActionType.REMINDER_SENT: "#f59e0b",      # orange
            ActionLog.ActionType.SERVICE_SCHEDULED: "#16a34a",  # green
            ActionLog.ActionType.WARRANTY_VIEWED: "#2563eb",    # blue
            ActionLog.ActionType.EMAIL_OPENED: "#0ea5e9",       # sky
            ActionLog.ActionType.LINK_CLICKED: "#7c3aed",       # purple
        }

        return format_html(
            '<span style="color:{}; font-weight:600;">{}</span>',
            color_map.get(obj.action_type, "#000000"),
            obj.get_action_type_display(),
        )

    colored_action.short_description = "Action"

    def recipient(self, obj):
        return (obj.metadata or {}).get("recipient", "-")
