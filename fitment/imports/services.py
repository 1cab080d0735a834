"""
CSV import/export for motorcycles and part assignments.

Rows are validated one by one; every problem is reported as
{row, field, message} with row numbers counted from the header (row 1).
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional
import csv
import io
import logging

from django.db import IntegrityError, transaction

from fitment.catalog.models import PartCategoryTag
from fitment.core.cache_utils import suspend_cache_signals
from fitment.motorcycles.models import ATTRIBUTE_SLOTS, Motorcycle
from fitment.motorcycles.utils import allocate_recids, invalidate_motorcycle_lookups
from .models import ImportHistory

logger = logging.getLogger(__name__)

MAX_REPORTED_ERRORS = 50
FIRST_DATA_ROW = 2

MOTORCYCLE_HEADERS = ['RECID', 'BIKEMAKE', 'BIKEMODEL', 'CAPACITY', 'FIRSTYEAR', 'LASTYEAR', 'BIKETYPE', 'ENGINETYPE']
PART_HEADERS = ['MOTORCYCLE_RECID', 'PART_CATEGORY', 'PRODUCT_VARIANT']

MOTORCYCLE_SAMPLE_ROWS = [
    ['9999', 'HONDA', 'CR 500R', '500', '1985', '2001', '2', '2-Stroke'],
    ['9998', 'YAMAHA', 'YZ 250', '250', '2000', '2023', '2', '2-Stroke'],
]
PART_SAMPLE_ROWS = [
    ['9200', 'oe_handlebar', '821-01-BK'],
    ['9200', 'fcwgroup', '228U-520 Front Sprocket'],
    ['9200', 'oe_fcw', '228U-520-13T'],
]

IMPORT_TYPES = ('motorcycles', 'parts', 'combined')


@dataclass
class ImportResult:
    total_rows: int = 0
    saved: List[Any] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def add_error(self, row: int, field_name: str, message: str):
        self.errors.append({'row': row, 'field': field_name, 'message': message})

    @property
    def success_count(self) -> int:
        return len(self.saved)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': not self.errors and self.success_count > 0,
            'total_rows': self.total_rows,
            'success_count': self.success_count,
            'error_count': self.total_rows - self.success_count,
            'errors': self.errors[:MAX_REPORTED_ERRORS],
        }


def read_csv(content) -> List[Dict[str, str]]:
    """Parse CSV text/bytes into rows keyed by trimmed header; blank lines are skipped"""
    if isinstance(content, bytes):
        content = content.decode('utf-8-sig')
    reader = csv.DictReader(io.StringIO(content))
    rows = []
    for raw in reader:
        row = {
            (key or '').strip(): (value or '').strip() if isinstance(value, str) else ''
            for key, value in raw.items()
            if key is not None
        }
        if any(row.values()):
            rows.append(row)
    return rows


def parse_int(value) -> Optional[int]:
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None
    return int(value)


def category_column_map(category_values: Optional[Iterable[str]] = None) -> Dict[str, str]:
    """Upper-cased CSV header -> slot or configured category value"""
    columns = {slot.upper(): slot for slot in ATTRIBUTE_SLOTS}
    columns['78_HANDLEBARS'] = 'handlebars_78'
    for value in category_values or []:
        columns.setdefault(value.upper(), value)
    return columns


def configured_category_values() -> List[str]:
    return list(PartCategoryTag.objects.order_by('sort_order', 'category_value').values_list('category_value', flat=True))


def record_history(import_type: str, filename: str, records_count: int) -> ImportHistory:
    history = ImportHistory.objects.create(
        type=import_type,
        filename=filename or 'upload.csv',
        records_count=records_count,
        status='success' if records_count > 0 else 'error',
    )
    logger.info(f"Import {import_type} from {history.filename}: {records_count} records ({history.status})")
    return history


def _validate_motorcycle_row(row, row_number, result, require_biketype):
    """Cleaned motorcycle fields, or None after recording the row's errors"""
    errors_before = len(result.errors)
    data = {}

    recid = row.get('RECID', '')
    if recid:
        try:
            data['recid'] = parse_int(recid)
        except ValueError:
            result.add_error(row_number, 'RECID', 'RECID must be a number')

    for header in ('BIKEMAKE', 'BIKEMODEL'):
        if not row.get(header, ''):
            result.add_error(row_number, header, f'{header} is required')
    data['bikemake'] = row.get('BIKEMAKE', '')
    data['bikemodel'] = row.get('BIKEMODEL', '')

    for header in ('FIRSTYEAR', 'LASTYEAR'):
        try:
            data[header.lower()] = parse_int(row.get(header))
        except ValueError:
            result.add_error(row_number, header, f'{header} must be a number')
            continue
        if data[header.lower()] is None:
            result.add_error(row_number, header, f'{header} is required')

    if (data.get('firstyear') is not None and data.get('lastyear') is not None
            and data['lastyear'] < data['firstyear']):
        result.add_error(row_number, 'LASTYEAR', 'LASTYEAR cannot be before FIRSTYEAR')

    try:
        data['capacity'] = parse_int(row.get('CAPACITY'))
    except ValueError:
        result.add_error(row_number, 'CAPACITY', 'CAPACITY must be a number')

    try:
        data['biketype'] = parse_int(row.get('BIKETYPE'))
    except ValueError:
        result.add_error(row_number, 'BIKETYPE', 'BIKETYPE must be a number')
    else:
        if require_biketype and data['biketype'] is None:
            result.add_error(row_number, 'BIKETYPE', 'BIKETYPE is required')

    data['enginetype'] = row.get('ENGINETYPE') or None

    if len(result.errors) > errors_before:
        return None
    return data


def _save_motorcycles(candidates, result):
    """
    Create motorcycles from (row_number, data, parts) candidates.

    Rows without a RECID get sequential ids reserved under the allocation
    lock (RecidLockUnavailable propagates to the caller).
    """
    wanted = [data['recid'] for _, data, _ in candidates if data.get('recid') is not None]
    existing = set(Motorcycle.objects.filter(recid__in=wanted).values_list('recid', flat=True))

    seen = set()
    accepted = []
    for row_number, data, parts in candidates:
        recid = data.get('recid')
        if recid is not None and (recid in existing or recid in seen):
            result.add_error(row_number, 'RECID', f'Motorcycle with RECID {recid} already exists')
            continue
        if recid is not None:
            seen.add(recid)
        accepted.append((row_number, data, parts))

    missing = [data for _, data, _ in accepted if data.get('recid') is None]
    if missing:
        floor = max(seen) if seen else None
        for data, recid in zip(missing, allocate_recids(len(missing), floor=floor)):
            data['recid'] = recid

    motorcycles = []
    for _, data, parts in accepted:
        motorcycle = Motorcycle(**data)
        for category_value, product_variant in parts.items():
            motorcycle.set_part_value(category_value, product_variant)
        motorcycles.append(motorcycle)

    if not motorcycles:
        return
    try:
        with transaction.atomic(), suspend_cache_signals():
            result.saved = Motorcycle.objects.bulk_create(motorcycles)
    except IntegrityError as e:
        logger.error(f"Motorcycle bulk import failed: {str(e)}")
        result.add_error(0, 'database', str(e))
        result.saved = []
    invalidate_motorcycle_lookups()


def import_motorcycle_rows(rows: List[Dict[str, str]]) -> ImportResult:
    result = ImportResult(total_rows=len(rows))
    candidates = []
    for index, row in enumerate(rows):
        row_number = index + FIRST_DATA_ROW
        data = _validate_motorcycle_row(row, row_number, result, require_biketype=True)
        if data is not None:
            candidates.append((row_number, data, {}))
    _save_motorcycles(candidates, result)
    return result


def import_combined_rows(rows: List[Dict[str, str]], category_values: Optional[Iterable[str]] = None) -> ImportResult:
    """Motorcycles plus their part assignments, one row per motorcycle"""
    result = ImportResult(total_rows=len(rows))
    columns = category_column_map(category_values)
    candidates = []
    for index, row in enumerate(rows):
        row_number = index + FIRST_DATA_ROW
        data = _validate_motorcycle_row(row, row_number, result, require_biketype=False)
        if data is None:
            continue
        parts = {}
        for header, value in row.items():
            category_value = columns.get(header.upper())
            if category_value and value:
                parts[category_value] = value
        candidates.append((row_number, data, parts))
    _save_motorcycles(candidates, result)
    return result


def import_part_rows(rows: List[Dict[str, str]]) -> ImportResult:
    """Assign PRODUCT_VARIANT to PART_CATEGORY on MOTORCYCLE_RECID, row by row"""
    result = ImportResult(total_rows=len(rows))
    touched = {}
    for index, row in enumerate(rows):
        row_number = index + FIRST_DATA_ROW
        errors_before = len(result.errors)

        recid = None
        if not row.get('MOTORCYCLE_RECID'):
            result.add_error(row_number, 'MOTORCYCLE_RECID', 'MOTORCYCLE_RECID is required')
        else:
            try:
                recid = parse_int(row['MOTORCYCLE_RECID'])
            except ValueError:
                result.add_error(row_number, 'MOTORCYCLE_RECID', 'MOTORCYCLE_RECID must be a number')
        part_category = row.get('PART_CATEGORY', '')
        product_variant = row.get('PRODUCT_VARIANT', '')
        if not part_category:
            result.add_error(row_number, 'PART_CATEGORY', 'PART_CATEGORY is required')
        if not product_variant:
            result.add_error(row_number, 'PRODUCT_VARIANT', 'PRODUCT_VARIANT is required')
        if len(result.errors) > errors_before:
            continue

        motorcycle = touched.get(recid) or Motorcycle.objects.filter(recid=recid).first()
        if motorcycle is None:
            result.add_error(row_number, 'MOTORCYCLE_RECID', 'Motorcycle not found')
            continue
        motorcycle.set_part_value(part_category, product_variant)
        touched[recid] = motorcycle
        result.saved.append({
            'motorcycle_recid': recid,
            'part_category': part_category,
            'product_variant': product_variant,
        })

    with transaction.atomic():
        for motorcycle in touched.values():
            motorcycle.save()
    return result


def run_csv_import(import_type: str, content, filename: str) -> ImportResult:
    """Parse, import and record history for an uploaded CSV"""
    rows = read_csv(content)
    if not rows:
        result = ImportResult()
        result.add_error(1, 'file', 'CSV file is empty or invalid')
        record_history(import_type, filename, 0)
        return result

    if import_type == 'parts':
        result = import_part_rows(rows)
    elif import_type == 'combined':
        result = import_combined_rows(rows, configured_category_values())
    else:
        result = import_motorcycle_rows(rows)

    record_history(import_type, filename, result.success_count)
    return result


def _render_csv(header: List[str], rows: Iterable[List[Any]]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator='\n')
    writer.writerow(header)
    for row in rows:
        writer.writerow(row)
    return output.getvalue()


def build_template(template_type: str, category_values: Optional[List[str]] = None):
    """(filename, csv text) for an import template"""
    if template_type == 'parts':
        return 'parts-mapping-template.csv', _render_csv(PART_HEADERS, PART_SAMPLE_ROWS)
    if template_type == 'combined':
        part_headers = [value.upper() for value in category_values or []]
        rows = [sample + [''] * len(part_headers) for sample in MOTORCYCLE_SAMPLE_ROWS]
        return 'combined-import-template.csv', _render_csv(MOTORCYCLE_HEADERS + part_headers, rows)
    return 'motorcycle-import-template.csv', _render_csv(MOTORCYCLE_HEADERS, MOTORCYCLE_SAMPLE_ROWS)


def build_combined_export(motorcycles: Iterable[Motorcycle], category_values: List[str]) -> str:
    """Every motorcycle with one column per configured category"""
    part_headers = [value.upper() for value in category_values]
    rows = []
    for motorcycle in motorcycles:
        base = [
            motorcycle.recid,
            motorcycle.bikemake or '',
            motorcycle.bikemodel or '',
            motorcycle.capacity if motorcycle.capacity is not None else '',
            motorcycle.firstyear,
            motorcycle.lastyear,
            motorcycle.biketype if motorcycle.biketype is not None else '',
            motorcycle.enginetype or '',
        ]
        parts = [motorcycle.get_part_value(value) or '' for value in category_values]
        rows.append(base + parts)
    return _render_csv(MOTORCYCLE_HEADERS + part_headers, rows)
