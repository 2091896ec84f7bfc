import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("currency", models.CharField(choices=[("PEN", "Soles (S/)"), ("USD", "Dólares ($)")], default="PEN", max_length=3)),
                ("due_date", models.DateTimeField()),
                ("is_paid", models.BooleanField(default=False)),
                ("category", models.CharField(choices=[("Servicios", "Servicios"), ("Tarjeta de Crédito", "Tarjeta de Crédito"), ("Vivienda", "Vivienda"), ("Préstamo", "Préstamo"), ("Seguro", "Seguro"), ("Educación", "Educación"), ("Impuestos", "Impuestos"), ("Suscripción", "Suscripción"), ("Otro", "Otro")], default="Otro", max_length=32)),
                ("external_mirror_ref", models.CharField(blank=True, help_text="Opaque reference to the mirrored calendar event; owned by the mirror service.", max_length=255, null=True)),
                ("group_id", models.UUIDField(blank=True, db_index=True, help_text="Links the legs of one bill (e.g. PEN and USD of a credit card).", null=True)),
                ("sync_status", models.CharField(choices=[("local", "Local"), ("modified", "Modified"), ("syncing", "Syncing"), ("synced", "Synced"), ("error", "Error")], db_index=True, default="local", max_length=10)),
                ("pre_sync_status", models.CharField(blank=True, choices=[("local", "Local"), ("modified", "Modified"), ("syncing", "Syncing"), ("synced", "Synced"), ("error", "Error")], default="", help_text="Dirty status held before the current upload; restored if the upload was interrupted.", max_length=10)),
                ("last_synced_at", models.DateTimeField(blank=True, null=True)),
                ("delete_requested", models.BooleanField(default=False, help_text="Deletion deferred because the record was mid-upload.")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["due_date", "name"],
                "base_manager_name": "all_objects",
            },
        ),
        migrations.CreateModel(
            name="PendingDeletion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("payment_id", models.UUIDField(unique=True)),
                ("deleted_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["deleted_at"],
            },
        ),
        migrations.CreateModel(
            name="SyncState",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("pending_sync_count", models.PositiveIntegerField(default=0)),
                ("last_sync_date", models.DateTimeField(blank=True, null=True)),
                ("last_sync_error_code", models.CharField(blank=True, max_length=32)),
                ("last_sync_error_message", models.TextField(blank=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "sync state",
            },
        ),
    ]
