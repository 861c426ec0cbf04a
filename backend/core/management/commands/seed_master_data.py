from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from inventory.models import InventoryLocation, Supplier, StockBatch
from pharmacy.models import Medicine
from queues.models import Poliklinik, Doctor, DoctorSchedule, Counter


POLIKLINIKS = [
    {'name': 'Poli Umum', 'queue_code': 'A'},
    {'name': 'Poli Anak', 'queue_code': 'B'},
    {'name': 'Poli Penyakit Dalam', 'queue_code': 'C'},
    {'name': 'Poli Gigi', 'queue_code': 'D'},
]

DOCTORS = [
    {'name': 'dr. Andi Pratama', 'poli': 'Poli Umum', 'specialist': 'Dokter Umum', 'days': [1, 2, 3, 4, 5]},
    {'name': 'dr. Sari Wulandari', 'poli': 'Poli Umum', 'specialist': 'Dokter Umum', 'days': [1, 3, 5, 6]},
    {'name': 'dr. Budi Hartono, Sp.A', 'poli': 'Poli Anak', 'specialist': 'Spesialis Anak', 'days': [2, 4, 6]},
    {'name': 'dr. Rina Kusuma, Sp.PD', 'poli': 'Poli Penyakit Dalam', 'specialist': 'Spesialis Penyakit Dalam', 'days': [1, 2, 3]},
    {'name': 'drg. Dewi Lestari', 'poli': 'Poli Gigi', 'specialist': 'Dokter Gigi', 'days': [3, 4, 5]},
]

COUNTERS = ['Loket 1', 'Loket 2', 'Loket 3']

LOCATIONS = [
    ('Gudang Farmasi Utama', 'WAREHOUSE'),
    ('Depo Apotek Rawat Jalan', 'DEPOT'),
    ('Depo IGD', 'DEPOT'),
]

SUPPLIERS = [
    {'supplier_name': 'PT. Kimia Farma Trading', 'phone': '021-4211234', 'address': 'Jl. Industri No. 1, Jakarta'},
    {'supplier_name': 'PT. Biofarma Persero', 'phone': '022-2033755', 'address': 'Jl. Pasteur No. 28, Bandung'},
]

MEDICINES = [
    {'name': 'Paracetamol 500mg', 'code': 'MED-001', 'category': 'Analgesik', 'unit': 'Tablet', 'price': '1000', 'cost': '200'},
    {'name': 'Amoxicillin 500mg', 'code': 'MED-002', 'category': 'Antibiotik', 'unit': 'Kapsul', 'price': '2500', 'cost': '500'},
    {'name': 'Omeprazole 20mg', 'code': 'MED-003', 'category': 'Gastrointestinal', 'unit': 'Kapsul', 'price': '3000', 'cost': '900'},
    {'name': 'Amlodipine 5mg', 'code': 'MED-004', 'category': 'Kardiovaskular', 'unit': 'Tablet', 'price': '1500', 'cost': '350'},
    {'name': 'Infus RL (Ringer Lactate)', 'code': 'ALKES-001', 'category': 'Cairan', 'unit': 'Botol', 'price': '25000', 'cost': '15000'},
]


class Command(BaseCommand):
    help = 'Seeds polikliniks, doctors, schedules, counters, stock locations, medicines and opening batches.'

    def add_arguments(self, parser):
        parser.add_argument('--opening-qty', type=int, default=200, help='Opening quantity per batch.')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding master data...')

        self.seed_queue_data()
        self.seed_pharmacy_data(options['opening_qty'])

        self.stdout.write(self.style.SUCCESS('Successfully seeded master data.'))

    def seed_queue_data(self):
        polies = {}
        for data in POLIKLINIKS:
            poli, created = Poliklinik.objects.get_or_create(name=data['name'], defaults={'queue_code': data['queue_code']})
            polies[poli.name] = poli
            if created:
                self.stdout.write(f'Created Poliklinik: {poli.name} ({poli.queue_code})')

        for data in DOCTORS:
            doctor, created = Doctor.objects.get_or_create(
                name=data['name'],
                defaults={'poliklinik': polies[data['poli']], 'specialist': data['specialist']}
            )
            for day in data['days']:
                DoctorSchedule.objects.get_or_create(doctor=doctor, day=day, defaults={'time_range': '08:00 - 14:00'})
            if created:
                self.stdout.write(f'Created Doctor: {doctor.name}')

        for name in COUNTERS:
            Counter.objects.get_or_create(name=name)

    def seed_pharmacy_data(self, opening_qty):
        locations = {}
        for name, location_type in LOCATIONS:
            locations[name], _ = InventoryLocation.objects.get_or_create(name=name, defaults={'location_type': location_type})

        suppliers = [
            Supplier.objects.get_or_create(supplier_name=data['supplier_name'], defaults=data)[0]
            for data in SUPPLIERS
        ]

        depot = locations.get(settings.PHARMACY_DISPENSING_LOCATION) or locations['Depo Apotek Rawat Jalan']
        warehouse = locations['Gudang Farmasi Utama']
        expiry = timezone.localdate() + timedelta(days=365)

        for i, data in enumerate(MEDICINES):
            medicine, created = Medicine.objects.get_or_create(
                name=data['name'],
                defaults={
                    'code': data['code'],
                    'category': data['category'],
                    'unit': data['unit'],
                    'price': Decimal(data['price']),
                }
            )
            if not created:
                continue

            supplier = suppliers[i % len(suppliers)]
            for location, qty in ((warehouse, opening_qty * 5), (depot, opening_qty)):
                StockBatch.objects.create(
                    location=location,
                    medicine=medicine,
                    item_name=medicine.name,
                    batch_no=f'BATCH-{data["code"]}-OPEN',
                    expiry_date=expiry,
                    quantity=qty,
                    unit_cost=Decimal(data['cost']),
                    supplier=supplier,
                )

            # Legacy counter mirrors the dispensing depot
            medicine.stock = opening_qty
            medicine.save(update_fields=['stock', 'updated_at'])
            self.stdout.write(f'Created Medicine: {medicine.name}')
