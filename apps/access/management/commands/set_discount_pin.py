from django.core.management.base import BaseCommand, CommandError

from apps.access.services import set_discount_pin


class Command(BaseCommand):
    help = 'Set the PIN that unlocks manual discounts at the camp register'

    def add_arguments(self, parser):
        parser.add_argument('pin', type=str, help='New discount PIN')

    def handle(self, *args, **options):
        try:
            set_discount_pin(options['pin'])
        except ValueError as e:
            raise CommandError(str(e))

        self.stdout.write(self.style.SUCCESS('Discount PIN updated.'))
