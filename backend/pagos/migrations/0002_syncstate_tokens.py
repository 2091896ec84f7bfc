from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("pagos", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="syncstate",
            name="access_token",
            field=models.TextField(blank=True),
        ),
        migrations.AddField(
            model_name="syncstate",
            name="refresh_token",
            field=models.TextField(blank=True),
        ),
    ]
