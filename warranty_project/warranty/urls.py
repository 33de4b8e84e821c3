from django.urls import path

from warranty.views import machine_health, schedule_service

app_name = "warranty"

urlpatterns = [
    path("machines/<str:serial_number>/health/", machine_health, name="machine-health"),
    path(
        "machines/<str:serial_number>/schedule-service/",
        schedule_service,
        name="schedule-service",
    ),
]
