"""
Management command to populate the database with test data.
"""
from django.core.management.base import BaseCommand
from django.utils import timezone
from datetime import timedelta
import random
from records.models import (
    PatientDetail, BedManagement, IPDRegistration, DischargeSummary,
    OPDRegistration, UserHealthDetail, IPDPage,
)

NAMES = ['Asha Verma', 'Rahul Singh', 'Meena Gupta', 'Vikram Rao', 'Sunita Das', 'Arjun Nair']
DOCTORS = ['Dr. Mehta', 'Dr. Kapoor', 'Dr. Iyer']
WARDS = ['general_ward', 'icu', 'delux_room', 'female_ward']
TEMPLATE = 'https://example.invalid/templates/{slug}.png'


def _stroke(x, y):
    # 首点为绝对坐标，其后为增量（均乘以 100）
    return {'points': [x * 100, y * 100, 2000, 500, 2000, -300, 1500, 800], 'colorValue': 4278190335, 'strokeWidth': 3}


def _page(group, number):
    return {
        'id': f'{group[:3].lower()}-{number}',
        'pageNumber': number,
        'pageName': f'{group} {number}',
        'groupName': group,
        'templateImageUrl': TEMPLATE.format(slug=group.lower().replace(' ', '-')),
        'lines': [_stroke(100 + 40 * number, 200)],
        'texts': [{'text': 'BP 120/80', 'position': {'dx': 120, 'dy': 300}, 'fontSize': 18, 'colorValue': 4278190080}],
        'images': [],
    }


class Command(BaseCommand):
    help = 'Populate database with test data'

    def handle(self, *args, **options):
        self.stdout.write('开始创建测试数据...')

        beds = self.create_beds()
        patients = self.create_patients()
        registrations = self.create_registrations(patients, beds)
        self.create_health_details(registrations)
        self.create_pages(registrations)
        self.create_appointments(patients)

        self.stdout.write(self.style.SUCCESS('测试数据创建完成！'))

    def create_beds(self):
        beds = []
        for i, ward in enumerate(WARDS):
            bed, _ = BedManagement.objects.get_or_create(
                room_type=ward, bed_number=str(100 + i), defaults={'bed_type': 'standard'},
            )
            beds.append(bed)
        return beds

    def create_patients(self):
        patients = []
        for i, name in enumerate(NAMES):
            p, _ = PatientDetail.objects.get_or_create(
                uhid=f'MF2024{10001 + i}',
                defaults={
                    'name': name,
                    'number': f'98765{43210 + i}',
                    'age': random.randint(18, 80),
                    'age_unit': 'years',
                    'gender': random.choice(['male', 'female']),
                    'address': 'Medford',
                },
            )
            patients.append(p)
        return patients

    def create_registrations(self, patients, beds):
        today = timezone.localdate()
        regs = []
        for i, patient in enumerate(patients):
            discharged = i % 2 == 0
            reg = IPDRegistration.objects.create(
                patient=patient,
                bed=beds[i % len(beds)],
                tpa=i % 3 == 0,
                under_care_of_doctor=random.choice(DOCTORS),
                admission_date=today - timedelta(days=10 + i),
                discharge_date=today - timedelta(days=i) if discharged else None,
                payment_detail=[
                    {'amount': 5000, 'amountType': 'advance', 'paymentType': 'cash'},
                    {'amount': 2000, 'amountType': 'deposit', 'paymentType': 'online'},
                ],
            )
            if discharged:
                DischargeSummary.objects.create(registration=reg, discharge_type='Discharge')
            regs.append(reg)
        return regs

    def create_health_details(self, registrations):
        for reg in registrations:
            UserHealthDetail.objects.update_or_create(
                registration=reg,
                defaults={
                    'patient_uhid': reg.patient_id,
                    'indoor_patient_file_data': [_page('Indoor Patient File', 1)],
                    'progress_notes_data': [_page('Progress Notes', 1), _page('Progress Notes', 2)],
                    'custom_groups_data': [{'groupName': 'Feedback form', 'pages': [_page('Feedback form', 1)]}],
                    'discharge_summary_written': {
                        'patientName': reg.patient.name,
                        'uhidIpdNumber': f'{reg.patient_id} / {reg.ipd_id}',
                        'consultantInCharge': reg.under_care_of_doctor,
                        'typeOfDischarge': 'Discharge',
                        'finalDiagnosis': 'Acute gastroenteritis',
                        'conditionAtDischarge': 'Stable',
                        'followUp': 'Review after one week.',
                    } if reg.discharge_date else None,
                },
            )

    def create_pages(self, registrations):
        for reg in registrations:
            for group, count in (('Indoor Patient File', 1), ('Daily Drug Chart', 2), ('Nursing Notes', 1)):
                for n in range(1, count + 1):
                    page = _page(group, n)
                    IPDPage.objects.create(
                        registration=reg,
                        uhid=reg.patient_id,
                        page_number=n,
                        page_name=page['pageName'],
                        group_name=group,
                        template_image_url=page['templateImageUrl'],
                        canvas_data={'lines': page['lines'], 'texts': page['texts'], 'images': []},
                    )

    def create_appointments(self, patients):
        now = timezone.now()
        for i, patient in enumerate(patients):
            OPDRegistration.objects.create(
                patient=patient,
                date=now - timedelta(days=i),
                refer_by=random.choice(DOCTORS),
                service_info=[{'type': 'consultation', 'doctor': random.choice(DOCTORS), 'amount': 500}],
                payment_info={'cashAmount': 300, 'onlineAmount': 200, 'paymentMethod': 'mixed'},
            )
