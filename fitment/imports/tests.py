"""
Test suite for imports module
Tests: CSV parsing, motorcycle/parts/combined imports, JSON imports, templates, export, and import history
"""
from io import StringIO
from unittest import mock
import os
import tempfile
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase, SimpleTestCase
from rest_framework import status
from fitment.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from fitment.imports.models import ImportHistory
from fitment.imports.services import (
    read_csv, import_motorcycle_rows, import_part_rows, import_combined_rows, run_csv_import,
    build_template, build_combined_export
)
from fitment.mappings.models import PartMapping
from fitment.motorcycles.models import Motorcycle
from fitment.motorcycles.utils import RecidLockUnavailable

MOTORCYCLE_CSV = (
    "RECID,BIKEMAKE,BIKEMODEL,CAPACITY,FIRSTYEAR,LASTYEAR,BIKETYPE,ENGINETYPE\n"
    "9999,HONDA,CR 500R,500,1985,2001,2,2-Stroke\n"
    ",YAMAHA,YZ 250,250,2000,2023,2,2-Stroke\n"
)


class ReadCSVTests(SimpleTestCase):
    """Test CSV parsing"""

    def test_trims_and_skips_blank_rows(self):
        """Test header/value trimming, BOM removal and blank line skipping"""
        rows = read_csv('\ufeff RECID , BIKEMAKE \n 1 , HONDA \n,\n'.encode('utf-8'))
        self.assertEqual(rows, [{'RECID': '1', 'BIKEMAKE': 'HONDA'}])

    def test_empty(self):
        """Test an empty file"""
        self.assertEqual(read_csv(''), [])


class MotorcycleImportTests(TestCase):
    """Test motorcycle CSV rows"""

    def test_import_allocates_missing_recids(self):
        """Test rows without RECID get the next sequential ids"""
        result = import_motorcycle_rows(read_csv(MOTORCYCLE_CSV))
        self.assertEqual(result.success_count, 2)
        self.assertEqual(result.errors, [])
        self.assertTrue(Motorcycle.objects.filter(recid=9999, bikemodel='CR 500R').exists())
        self.assertEqual(Motorcycle.objects.get(bikemake='YAMAHA').recid, 10000)

    def test_row_errors(self):
        """Test row-level validation with header-relative row numbers"""
        rows = read_csv(
            "RECID,BIKEMAKE,BIKEMODEL,CAPACITY,FIRSTYEAR,LASTYEAR,BIKETYPE,ENGINETYPE\n"
            "1,HONDA,CRF,250,2010,2012,2,\n"
            "abc,HONDA,CRF,250,2010,2012,2,\n"
            "3,,CRF,250,2012,2010,,\n"
        )
        result = import_motorcycle_rows(rows)
        self.assertEqual(result.success_count, 1)
        summary = result.to_dict()
        self.assertFalse(summary['success'])
        self.assertEqual(summary['error_count'], 2)
        errors = {(e['row'], e['field']) for e in summary['errors']}
        self.assertIn((3, 'RECID'), errors)
        self.assertIn((4, 'BIKEMAKE'), errors)
        self.assertIn((4, 'LASTYEAR'), errors)
        self.assertIn((4, 'BIKETYPE'), errors)

    def test_duplicate_recid(self):
        """Test existing and repeated RECIDs are reported"""
        TestDataFactory.create_motorcycle(recid=5)
        rows = read_csv(
            "RECID,BIKEMAKE,BIKEMODEL,FIRSTYEAR,LASTYEAR,BIKETYPE\n"
            "5,HONDA,CRF,2010,2012,2\n"
            "6,HONDA,CRF,2010,2012,2\n"
            "6,HONDA,CRF,2010,2012,2\n"
        )
        result = import_motorcycle_rows(rows)
        self.assertEqual(result.success_count, 1)
        self.assertEqual([e['row'] for e in result.errors], [2, 4])

    def test_errors_capped_at_fifty(self):
        """Test only the first fifty errors are reported"""
        rows = [{'RECID': '', 'BIKEMAKE': '', 'BIKEMODEL': 'X', 'FIRSTYEAR': '2000', 'LASTYEAR': '2001',
                 'BIKETYPE': '1'} for _ in range(60)]
        summary = import_motorcycle_rows(rows).to_dict()
        self.assertEqual(summary['error_count'], 60)
        self.assertEqual(len(summary['errors']), 50)


class PartImportTests(TestCase):
    """Test part assignment CSV rows"""

    def setUp(self):
        self.motorcycle = TestDataFactory.create_motorcycle(recid=9200)

    def test_assign_parts(self):
        """Test fixed slots and custom categories are assigned"""
        rows = read_csv(
            "MOTORCYCLE_RECID,PART_CATEGORY,PRODUCT_VARIANT\n"
            "9200,oe_handlebar,821-01-BK\n"
            "9200,tyre_front,TY-80\n"
            "9201,oe_fcw,X\n"
            "9200,,X\n"
        )
        result = import_part_rows(rows)
        self.assertEqual(result.success_count, 2)
        self.assertEqual({(e['row'], e['field']) for e in result.errors},
                         {(4, 'MOTORCYCLE_RECID'), (5, 'PART_CATEGORY')})
        self.motorcycle.refresh_from_db()
        self.assertEqual(self.motorcycle.oe_handlebar, '821-01-BK')
        self.assertEqual(self.motorcycle.custom_parts, {'tyre_front': 'TY-80'})


class CombinedImportTests(TestCase):
    """Test combined motorcycle and part rows"""

    def test_combined_row(self):
        """Test slot columns, the 78 handlebar column and configured categories"""
        rows = read_csv(
            "RECID,BIKEMAKE,BIKEMODEL,FIRSTYEAR,LASTYEAR,OE_FCW,78_HANDLEBARS,TYRE_FRONT,UNKNOWN\n"
            "300,KTM,EXC 300,2017,2023,JTF1901.13,821-01,TY-90,ignored\n"
        )
        result = import_combined_rows(rows, ['tyre_front'])
        self.assertEqual(result.success_count, 1)
        motorcycle = Motorcycle.objects.get(recid=300)
        self.assertEqual(motorcycle.oe_fcw, 'JTF1901.13')
        self.assertEqual(motorcycle.handlebars_78, '821-01')
        self.assertEqual(motorcycle.custom_parts, {'tyre_front': 'TY-90'})
        self.assertIsNone(motorcycle.biketype)


class TemplateExportTests(TestCase):
    """Test CSV templates and export"""

    def test_templates(self):
        """Test template headers"""
        filename, content = build_template('parts')
        self.assertEqual(filename, 'parts-mapping-template.csv')
        self.assertTrue(content.startswith('MOTORCYCLE_RECID,PART_CATEGORY,PRODUCT_VARIANT\n'))

        filename, content = build_template('combined', ['oe_fcw', 'tyre_front'])
        header = content.splitlines()[0].split(',')
        self.assertEqual(header[-2:], ['OE_FCW', 'TYRE_FRONT'])
        self.assertEqual(len(content.splitlines()), 3)

    def test_combined_export(self):
        """Test export columns and values"""
        motorcycle = TestDataFactory.create_motorcycle(recid=42, bikemake='BETA', bikemodel='RR 300',
                                                       oe_fcw='F-13', custom_parts={'tyre_front': 'TY'})
        content = build_combined_export([motorcycle], ['oe_fcw', 'tyre_front', 'grips'])
        lines = content.splitlines()
        self.assertTrue(lines[0].endswith('OE_FCW,TYRE_FRONT,GRIPS'))
        self.assertTrue(lines[1].startswith('42,BETA,RR 300,'))
        self.assertTrue(lines[1].endswith('F-13,TY,'))


class ImportAPITests(TestCase):
    """Test import API endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def upload(self, content, import_type='motorcycles', field='file'):
        csv_file = SimpleUploadedFile('bikes.csv', content.encode('utf-8'), content_type='text/csv')
        return self.client.post('/api/v1/import/csv/', {field: csv_file, 'type': import_type}, format='multipart')

    def test_csv_upload(self):
        """Test uploading a motorcycle CSV writes history"""
        response = self.upload(MOTORCYCLE_CSV)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['success_count'], 2)
        history = ImportHistory.objects.get()
        self.assertEqual(history.status, 'success')
        self.assertEqual(history.records_count, 2)
        self.assertEqual(history.filename, 'bikes.csv')

    def test_csv_upload_legacy_field_name(self):
        """Test the csvFile field name is accepted"""
        response = self.upload(MOTORCYCLE_CSV, field='csvFile')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_csv_upload_failure_writes_history(self):
        """Test an import with no valid rows records an error history"""
        response = self.upload("RECID,BIKEMAKE\n1,\n")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['success'])
        self.assertEqual(ImportHistory.objects.get().status, 'error')

    def test_csv_upload_lock_busy(self):
        """Test 503 and an error history when RECIDs cannot be allocated"""
        with mock.patch('fitment.imports.services.allocate_recids',
                        side_effect=RecidLockUnavailable('RECID allocation is in progress, please retry')):
            response = self.upload(MOTORCYCLE_CSV)
        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(ImportHistory.objects.get().status, 'error')
        self.assertFalse(Motorcycle.objects.exists())

    def test_csv_upload_requires_file(self):
        """Test missing file and invalid type"""
        response = self.client.post('/api/v1/import/csv/', {'type': 'motorcycles'}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.upload(MOTORCYCLE_CSV, import_type='customers')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_json_motorcycle_import(self):
        """Test pre-parsed motorcycle rows are all or nothing"""
        rows = [
            {'bikemake': 'HONDA', 'bikemodel': 'CRF', 'firstyear': 2010, 'lastyear': 2012},
            {'bikemake': 'KTM', 'bikemodel': 'SX', 'firstyear': 2015, 'lastyear': 2012},
        ]
        response = self.client.post('/api/v1/import/motorcycles/', {'motorcycles': rows}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Motorcycle.objects.exists())

        rows[1]['lastyear'] = 2018
        response = self.client.post('/api/v1/import/motorcycles/', rows, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(sorted(m['recid'] for m in response.data), [1, 2])
        self.assertEqual(ImportHistory.objects.filter(status='success').count(), 1)

    def test_json_import_allocates_above_string_recids(self):
        """Test allocated RECIDs skip explicit RECIDs sent as strings"""
        rows = [
            {'bikemake': 'HONDA', 'bikemodel': 'CRF', 'firstyear': 2010, 'lastyear': 2012},
            {'recid': '1', 'bikemake': 'KTM', 'bikemodel': 'SX', 'firstyear': 2015, 'lastyear': 2018},
        ]
        response = self.client.post('/api/v1/import/motorcycles/', rows, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(sorted(m['recid'] for m in response.data), [1, 2])
        self.assertEqual(Motorcycle.objects.get(recid=2).bikemake, 'HONDA')

    def test_json_mapping_import(self):
        """Test pre-parsed mapping rows"""
        TestDataFactory.create_motorcycle(recid=77)
        response = self.client.post('/api/v1/import/mappings/',
                                    {'mappings': [{'product_id': '5', 'motorcycle_recid': 77}]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(PartMapping.objects.count(), 1)
        self.assertEqual(ImportHistory.objects.get().type, 'mappings')

    def test_import_history(self):
        """Test listing and recording import history"""
        response = self.client.post('/api/v1/import-history/', {
            'type': 'motorcycles', 'filename': 'manual.csv', 'records_count': 3, 'status': 'success'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get('/api/v1/import-history/')
        self.assertEqual(response.data[0]['filename'], 'manual.csv')

    def test_template_endpoint(self):
        """Test the combined template includes configured categories"""
        TestDataFactory.create_category_tag('tyre_front')
        response = self.client.get('/api/v1/import/template/', {'type': 'combined'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn('attachment; filename="combined-import-template.csv"', response['Content-Disposition'])
        self.assertIn('TYRE_FRONT', response.content.decode().splitlines()[0])

    def test_export_endpoint(self):
        """Test exporting combined data"""
        TestDataFactory.create_motorcycle(recid=1, bikemake='HONDA', bikemodel='CRF')
        response = self.client.get('/api/v1/export/combined-data/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.content.decode().splitlines()), 2)


class ImportCommandTests(TestCase):
    """Test the import_motorcycles_csv management command"""

    def test_import_command(self):
        """Test importing a CSV file from disk"""
        with tempfile.NamedTemporaryFile('w', suffix='.csv', delete=False, encoding='utf-8') as f:
            f.write(MOTORCYCLE_CSV)
            path = f.name
        try:
            out = StringIO()
            call_command('import_motorcycles_csv', path, stdout=out)
        finally:
            os.unlink(path)
        self.assertEqual(Motorcycle.objects.count(), 2)
        self.assertIn('Imported:    2', out.getvalue())

    def test_direct_run(self):
        """Test run_csv_import with an empty file"""
        result = run_csv_import('parts', '', 'empty.csv')
        self.assertEqual(result.errors[0]['field'], 'file')
        self.assertEqual(ImportHistory.objects.get().status, 'error')
