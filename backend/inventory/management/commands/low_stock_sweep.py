import time

from django.core.management.base import BaseCommand

from inventory.services import run_low_stock_sweep


class Command(BaseCommand):
    help = 'Drafts purchase orders and notifies staff for items running low on stock.'

    def add_arguments(self, parser):
        parser.add_argument('--threshold', type=int, default=None, help='Override LOW_STOCK_THRESHOLD.')
        parser.add_argument(
            '--interval',
            type=int,
            default=0,
            help='Keep running, repeating the sweep every N seconds (0 = run once).'
        )

    def handle(self, *args, **options):
        interval = options['interval']

        while True:
            created = run_low_stock_sweep(threshold=options['threshold'])
            for po in created:
                self.stdout.write(f"Drafted {po.po_number}")
            self.stdout.write(f"Low stock sweep: {len(created)} purchase orders drafted")
            if not interval:
                break
            time.sleep(interval)

        self.stdout.write(self.style.SUCCESS('Low stock sweep finished.'))
