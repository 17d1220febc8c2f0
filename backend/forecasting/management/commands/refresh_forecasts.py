"""
Django management command to recompute and store demand forecasts on products
"""
from django.core.management.base import BaseCommand
from backend.catalog.models import Product
from backend.forecasting import services


class Command(BaseCommand):
    help = 'Recompute demand forecasts for active products and store them on each product'

    def add_arguments(self, parser):
        parser.add_argument(
            '--product-id',
            type=int,
            help='Refresh a specific product ID only',
        )
        parser.add_argument(
            '--statistical',
            action='store_true',
            help='Use the statistical forecast instead of the AI forecast',
        )
        parser.add_argument(
            '--period',
            type=int,
            default=services.STATISTICAL_WINDOW_DAYS,
            help='Days of history for the statistical forecast (default: 30)',
        )

    def handle(self, *args, **options):
        product_id = options.get('product_id')
        statistical = options.get('statistical', False)
        period = options.get('period') or services.STATISTICAL_WINDOW_DAYS

        products = Product.objects.filter(is_active=True).select_related('supplier').order_by('id')
        if product_id:
            products = products.filter(id=product_id)

        self.stdout.write(f"Refreshing forecasts for {products.count()} products")

        updated = 0
        for product in products:
            if statistical:
                forecast = services.statistical_forecast(product, period)
            else:
                forecast = services.ai_forecast(product, fallback_window=period)
            services.save_product_forecast(product, forecast)
            updated += 1
            self.stdout.write(
                f"  {product.sku}: next month {product.forecast_next_month}, "
                f"trend {product.forecast_trend}, confidence {product.forecast_confidence}"
            )

        self.stdout.write(self.style.SUCCESS(f"Updated {updated} product forecasts"))
