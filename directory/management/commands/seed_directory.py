# directory/management/commands/seed_directory.py
from django.core.management.base import BaseCommand

from directory.geo import geojson_point
from directory.models import AmbulanceOwner, AmbulanceVehicle, Donor, Hospital
from directory.passwords import hash_password
from directory.services import hospital_services

PASSWORD = "demo1234"
PLACEHOLDER = "/media/emercare/demo/placeholder.png"

# (name, blood group, lat offset, lng offset)
DONORS = [
    ("Rahim Uddin", "A+", 0.010, 0.004),
    ("Karim Ahmed", "O-", -0.020, 0.015),
    ("Nusrat Jahan", "B+", 0.045, -0.030),
    ("Tania Akter", "AB+", 0.120, 0.090),
]

HOSPITALS = [
    ("City General Hospital", 0.005, 0.005),
    ("Green Life Medical", -0.030, 0.020),
]

OWNERS = [
    ("Rapid Rescue", [("DHA-GA-1001", "Toyota HiAce"), ("DHA-GA-1002", "Nissan Urvan")]),
    ("Lifeline Ambulance", [("DHA-KHA-2001", "Toyota Noah")]),
]


class Command(BaseCommand):
    help = "Seed demo donors, hospitals and ambulance services around a base point (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--lat", type=float, default=23.8103)
        parser.add_argument("--lng", type=float, default=90.4125)
        parser.add_argument("--city", default="Dhaka")

    def handle(self, *args, **opts):
        lat, lng, city = opts["lat"], opts["lng"], opts["city"]
        common = {"password": hash_password(PASSWORD), "city": city, "postcode": "1000", "street": "Demo Road"}

        for i, (name, group, dlat, dlng) in enumerate(DONORS, start=1):
            Donor.objects.get_or_create(
                email=f"donor{i}@example.com",
                defaults={**common, "name": name, "age": 25 + i, "blood_group": group, "phone": f"0170000000{i}",
                          "picture": PLACEHOLDER, "location": geojson_point(lat + dlat, lng + dlng)},
            )

        for i, (name, dlat, dlng) in enumerate(HOSPITALS, start=1):
            hospital, _ = Hospital.objects.get_or_create(
                email=f"hospital{i}@example.com",
                defaults={**common, "hospital_name": name, "license": PLACEHOLDER, "phone": f"0180000000{i}",
                          "is_verified": True, "location": geojson_point(lat + dlat, lng + dlng)},
            )
            profile = hospital_services.ensure_profile(hospital.pk)
            if not profile.doctors.exists():
                hospital_services.add_doctor(hospital.pk, {"name": f"Dr. Demo {i}", "specialty": "Emergency Medicine"})

        for i, (name, fleet) in enumerate(OWNERS, start=1):
            owner, _ = AmbulanceOwner.objects.get_or_create(
                email=f"ambulance{i}@example.com",
                defaults={**common, "owner_name": name, "age": 40, "phone": f"0190000000{i}", "picture": PLACEHOLDER,
                          "is_verified": True, "location": geojson_point(lat - 0.01 * i, lng + 0.01 * i)},
            )
            for number, model in fleet:
                AmbulanceVehicle.objects.get_or_create(
                    vehicle_number=number,
                    defaults={"owner": owner, "model": model, "year": 2020, "driver_name": f"Driver {number[-4:]}",
                              "driver_phone": "01500000000", "registration_paper": PLACEHOLDER,
                              "driver_license": PLACEHOLDER, "fitness_paper": PLACEHOLDER},
                )
            self.stdout.write(self.style.SUCCESS(f"ok: {name} ({len(fleet)} vehicles)"))

        self.stdout.write(self.style.SUCCESS(f"Directory seeded around ({lat}, {lng}); password={PASSWORD}"))
