"""
Management command to import motorcycles or part assignments from a CSV file
"""
import os
from django.core.management.base import BaseCommand, CommandError
from django.conf import settings
from fitment.imports.services import IMPORT_TYPES, run_csv_import
from fitment.motorcycles.utils import RecidLockUnavailable


class Command(BaseCommand):
    help = "Imports motorcycles, part assignments or combined rows from a CSV file"

    def add_arguments(self, parser):
        parser.add_argument(
            'csv_file',
            type=str,
            help='Path to the CSV file (relative paths resolve from the project root)',
        )
        parser.add_argument(
            '--type',
            choices=IMPORT_TYPES,
            default='motorcycles',
            help='Import type: motorcycles, parts or combined (default: motorcycles)',
        )

    def handle(self, *args, **options):
        csv_file = options['csv_file']
        import_type = options['type']

        if not os.path.isabs(csv_file):
            csv_file = os.path.normpath(os.path.join(settings.BASE_DIR.parent, csv_file))

        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS(f"IMPORTING {import_type.upper()} FROM CSV"))
        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(f"CSV File: {csv_file}")

        if not os.path.exists(csv_file):
            raise CommandError(f"CSV file not found at {csv_file}")

        with open(csv_file, 'rb') as f:
            content = f.read()

        try:
            result = run_csv_import(import_type, content, os.path.basename(csv_file))
        except RecidLockUnavailable as e:
            raise CommandError(str(e))

        for error in result.errors:
            self.stdout.write(self.style.WARNING(
                f"  ✗ Row {error['row']} [{error['field']}]: {error['message']}"
            ))

        self.stdout.write("")
        self.stdout.write(f"Total rows:  {result.total_rows}")
        self.stdout.write(self.style.SUCCESS(f"Imported:    {result.success_count}"))
        if result.errors:
            self.stdout.write(self.style.ERROR(f"Errors:      {len(result.errors)}"))
        else:
            self.stdout.write(self.style.SUCCESS("Import completed without errors."))
