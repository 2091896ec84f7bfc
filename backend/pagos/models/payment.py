import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class SyncStatus(models.TextChoices):
    LOCAL = "local", "Local"
    MODIFIED = "modified", "Modified"
    SYNCING = "syncing", "Syncing"
    SYNCED = "synced", "Synced"
    ERROR = "error", "Error"


DIRTY_STATUSES = (SyncStatus.LOCAL, SyncStatus.MODIFIED, SyncStatus.ERROR)


class PaymentQuerySet(models.QuerySet):
    def dirty(self):
        return self.filter(sync_status__in=DIRTY_STATUSES)

    def in_group(self, group_id):
        return self.filter(group_id=group_id)


class VisiblePaymentManager(models.Manager.from_queryset(PaymentQuerySet)):
    """Hides records whose deletion is deferred until their upload finishes."""

    def get_queryset(self):
        return super().get_queryset().filter(delete_requested=False)


class Payment(models.Model):
    """
    A payment owned by the local store and mirrored to the remote store.

    Sync metadata (sync_status, pre_sync_status, last_synced_at) is only
    changed through pagos.sync.state_machine; user fields only through the
    use cases in pagos.services.payments or a download merge.
    """

    class Currency(models.TextChoices):
        PEN = "PEN", "Soles (S/)"
        USD = "USD", "Dólares ($)"

    class Category(models.TextChoices):
        SERVICIOS = "Servicios", "Servicios"
        TARJETA_CREDITO = "Tarjeta de Crédito", "Tarjeta de Crédito"
        VIVIENDA = "Vivienda", "Vivienda"
        PRESTAMO = "Préstamo", "Préstamo"
        SEGURO = "Seguro", "Seguro"
        EDUCACION = "Educación", "Educación"
        IMPUESTOS = "Impuestos", "Impuestos"
        SUSCRIPCION = "Suscripción", "Suscripción"
        OTRO = "Otro", "Otro"

    # Fields copied between legs of a group; the rest stay per-leg.
    SHARED_FIELDS = ("name", "due_date", "category")
    USER_FIELDS = ("name", "amount", "currency", "due_date", "is_paid", "category", "external_mirror_ref")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.PEN)
    due_date = models.DateTimeField()
    is_paid = models.BooleanField(default=False)
    category = models.CharField(max_length=32, choices=Category.choices, default=Category.OTRO)
    external_mirror_ref = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Opaque reference to the mirrored calendar event; owned by the mirror service.",
    )
    group_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Links the legs of one bill (e.g. PEN and USD of a credit card).",
    )
    sync_status = models.CharField(
        max_length=10, choices=SyncStatus.choices, default=SyncStatus.LOCAL, db_index=True
    )
    pre_sync_status = models.CharField(
        max_length=10,
        choices=SyncStatus.choices,
        blank=True,
        default="",
        help_text="Dirty status held before the current upload; restored if the upload was interrupted.",
    )
    last_synced_at = models.DateTimeField(null=True, blank=True)
    delete_requested = models.BooleanField(
        default=False,
        help_text="Deletion deferred because the record was mid-upload.",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = VisiblePaymentManager()
    all_objects = models.Manager.from_queryset(PaymentQuerySet)()

    class Meta:
        ordering = ["due_date", "name"]
        base_manager_name = "all_objects"

    def clean(self) -> None:
        errors = {}
        if not (self.name or "").strip():
            errors["name"] = "Payment name is required."
        if self.amount is None or Decimal(self.amount) <= Decimal("0"):
            errors["amount"] = "Amount must be greater than zero."
        if self.due_date is None:
            errors["due_date"] = "Due date is required."
        if errors:
            raise ValidationError(errors)

    @property
    def is_dirty(self) -> bool:
        return self.sync_status in DIRTY_STATUSES

    @property
    def mirror_title(self) -> str:
        return f"Pago: {self.name}"

    def siblings(self):
        if self.group_id is None:
            return Payment.objects.none()
        return Payment.objects.in_group(self.group_id).exclude(pk=self.pk)

    def __str__(self):
        return f"{self.name} {self.amount} {self.currency} ({self.sync_status})"
