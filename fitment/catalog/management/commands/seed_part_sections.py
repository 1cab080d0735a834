from django.core.management.base import BaseCommand
from django.db import transaction

from ...models import PartSection, PartCategoryTag
from ...utils import DEFAULT_SECTIONS, SLOT_DEFAULTS


class Command(BaseCommand):
    help = 'Create the default part sections (and optionally one category per motorcycle slot)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--with-categories',
            action='store_true',
            help='Also create a part category for every fixed motorcycle slot',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        created_sections = 0
        for index, (section_key, section_label) in enumerate(DEFAULT_SECTIONS):
            _, created = PartSection.objects.get_or_create(
                section_key=section_key,
                defaults={'section_label': section_label, 'sort_order': index},
            )
            if created:
                created_sections += 1
                self.stdout.write(f'  ✓ Created section {section_label}')

        created_categories = 0
        if options['with_categories']:
            for index, (slot, (section_key, label)) in enumerate(SLOT_DEFAULTS.items()):
                _, created = PartCategoryTag.objects.get_or_create(
                    category_value=slot,
                    defaults={
                        'category_label': label,
                        'product_tags': [],
                        'assigned_section': section_key,
                        'sort_order': index,
                    },
                )
                if created:
                    created_categories += 1

        self.stdout.write(self.style.SUCCESS(
            f'\nCompleted: {created_sections} sections created, {created_categories} categories created'
        ))
