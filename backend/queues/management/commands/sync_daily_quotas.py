import time

from django.core.management.base import BaseCommand

from queues.services import sync_daily_quotas


class Command(BaseCommand):
    help = 'Creates today\'s quotas for scheduled doctors and closes quotas of doctors on leave.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--interval',
            type=int,
            default=0,
            help='Keep running, repeating the sync every N seconds (0 = run once).'
        )

    def handle(self, *args, **options):
        interval = options['interval']

        while True:
            summary = sync_daily_quotas()
            self.stdout.write(
                f"Quota sync: {len(summary['created'])} created, {len(summary['closed'])} closed"
            )
            if not interval:
                break
            time.sleep(interval)

        self.stdout.write(self.style.SUCCESS('Quota sync finished.'))
