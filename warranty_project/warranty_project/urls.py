from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    # DJANGO ADMIN (STAFF ONLY)
    path("admin/", admin.site.urls),

    # WARRANTY (health, scheduling links)
    path("", include("warranty.urls")),

    # CRON + ACTION LOG
    path("", include("notifications.urls")),
]
