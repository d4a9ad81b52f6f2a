from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="SequenceAllocation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("namespace_key", models.CharField(max_length=64)),
                ("period", models.PositiveIntegerField()),
                ("last_sequence", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("namespace_key", "period"),
                        name="unique_allocation_per_namespace_period",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="IssuedIdentifier",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("value", models.CharField(max_length=96, unique=True)),
                ("namespace_key", models.CharField(max_length=64)),
                ("period", models.PositiveIntegerField()),
                ("sequence", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["namespace_key", "period"], name="issued_namespace_period_idx"),
                ],
            },
        ),
    ]
