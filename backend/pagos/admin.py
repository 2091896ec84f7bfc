from django.contrib import admin

from .models import Payment, PendingDeletion, SyncState


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("name", "amount", "currency", "due_date", "is_paid", "sync_status", "last_synced_at")
    list_filter = ("sync_status", "currency", "category", "is_paid")
    search_fields = ("name",)
    readonly_fields = ("sync_status", "pre_sync_status", "last_synced_at", "created_at", "updated_at")

    def get_queryset(self, request):
        return Payment.all_objects.all()


@admin.register(PendingDeletion)
class PendingDeletionAdmin(admin.ModelAdmin):
    list_display = ("payment_id", "deleted_at")
    search_fields = ("payment_id",)


@admin.register(SyncState)
class SyncStateAdmin(admin.ModelAdmin):
    list_display = ("pending_sync_count", "last_sync_date", "last_sync_error_code", "updated_at")
    exclude = ("access_token", "refresh_token")
    readonly_fields = ("updated_at",)
