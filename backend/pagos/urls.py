from django.urls import path

from pagos import views

app_name = "pagos"

urlpatterns = [
    path("sync/status/", views.sync_status, name="sync-status"),
    path("sync/run/", views.run_sync, name="run-sync"),
]
