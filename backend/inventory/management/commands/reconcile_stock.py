from django.core.management.base import BaseCommand

from inventory.services import stock_discrepancies, link_batches_to_medicines


class Command(BaseCommand):
    help = 'Reports medicines whose legacy stock counter disagrees with batch stock at the dispensing depot.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--link',
            action='store_true',
            help='First link batches that only carry an item name to their medicine.'
        )

    def handle(self, *args, **options):
        if options['link']:
            linked = link_batches_to_medicines()
            self.stdout.write(f"Linked {linked} batches to medicines")

        rows = stock_discrepancies()
        if not rows:
            self.stdout.write(self.style.SUCCESS('Legacy and batch stock agree.'))
            return

        for row in rows:
            self.stdout.write(self.style.WARNING(
                f"{row['name']}: legacy={row['legacy_stock']} batches={row['batch_stock']} "
                f"(diff {row['difference']:+d})"
            ))
        self.stdout.write(f"{len(rows)} discrepancies found")
