from django.core.management.base import BaseCommand
from django.utils import timezone

from bizbox.subscriptions.models import UserSubscription
from bizbox.subscriptions.services import expire_subscriptions


class Command(BaseCommand):
    help = 'Marks active subscriptions whose end date has passed as expired'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List what would expire without saving changes',
        )

    def handle(self, *args, **options):
        now = timezone.now()
        due = UserSubscription.objects.filter(status='active', end_date__lte=now).select_related('user', 'plan')

        if options['dry_run']:
            self.stdout.write(self.style.WARNING("DRY RUN MODE: No changes will be saved."))
            for subscription in due:
                self.stdout.write(f"  - {subscription.user.username}: {subscription.plan.name} "
                                  f"ended {subscription.end_date:%Y-%m-%d}")
            self.stdout.write(f"{due.count()} subscriptions would expire.")
            return

        count = expire_subscriptions(now)
        self.stdout.write(self.style.SUCCESS(f"Expired {count} subscriptions."))
