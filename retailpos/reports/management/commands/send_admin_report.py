from django.core.management.base import BaseCommand, CommandError

from retailpos.reports.emails import send_admin_report
from retailpos.reports.financials import PERIODS, ReportError


class Command(BaseCommand):
    help = 'Email the admin financial report. Run --scheduled from cron every 30 minutes.'

    def add_arguments(self, parser):
        parser.add_argument('--scheduled', action='store_true',
                            help='Send only when the configured frequency says it is due')
        parser.add_argument('--force', action='store_true', help='Send even if reports are disabled')
        parser.add_argument('--test', action='store_true', help='Send a test report')
        parser.add_argument('--period', choices=PERIODS, default=None, help='Reporting period (default: current month)')

    def handle(self, *args, **options):
        try:
            result = send_admin_report(
                period=options['period'],
                test_mode=options['test'],
                force=options['force'],
                scheduled=options['scheduled'],
            )
        except ReportError as e:
            raise CommandError(str(e))

        if result['sent']:
            self.stdout.write(self.style.SUCCESS(f"{result['message']} to {result['recipient']} ({result['period']})"))
        else:
            self.stdout.write(self.style.WARNING(result['message']))
