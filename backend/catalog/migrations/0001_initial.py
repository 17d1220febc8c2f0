import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('parties', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, max_length=200)),
                ('sku', models.CharField(db_index=True, max_length=100, unique=True)),
                ('category', models.CharField(db_index=True, max_length=100)),
                ('description', models.TextField(blank=True)),
                ('stock_qty', models.IntegerField(default=0)),
                ('min_threshold', models.PositiveIntegerField(default=10)),
                ('max_threshold', models.PositiveIntegerField(default=100)),
                ('reorder_point', models.PositiveIntegerField(default=15)),
                ('reorder_quantity', models.PositiveIntegerField(default=50)),
                ('lead_time', models.PositiveIntegerField(default=7, help_text='Supplier lead time in days')),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('cost_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('forecast_next_month', models.IntegerField(default=0)),
                ('forecast_next_quarter', models.IntegerField(default=0)),
                ('forecast_confidence', models.FloatField(default=0.8)),
                ('forecast_trend', models.CharField(choices=[('increasing', 'Increasing'), ('decreasing', 'Decreasing'), ('stable', 'Stable')], default='stable', max_length=20)),
                ('forecast_updated_at', models.DateTimeField(blank=True, null=True)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('supplier', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='products', to='parties.supplier')),
            ],
            options={
                'db_table': 'products',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['category', 'supplier'], name='idx_product_category_supplier'),
                    models.Index(fields=['stock_qty', 'min_threshold'], name='idx_product_stock_threshold'),
                ],
            },
        ),
    ]
