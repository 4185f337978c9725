# consent/management/commands/expire_consents.py

from django.core.management.base import BaseCommand

from consent.services import ConsentService


class Command(BaseCommand):
    help = 'Mark consents whose expiry date has passed as expired (run from cron)'

    def handle(self, *args, **options):
        count = ConsentService.expire_old_consents()
        self.stdout.write(self.style.SUCCESS(f"Expired {count} consent(s)"))
