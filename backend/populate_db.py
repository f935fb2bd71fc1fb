import os
import random
from datetime import date, timedelta

# Add 'backend' folder to Python path
import sys
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from dotenv import load_dotenv

load_dotenv()

from database import SessionLocal, init_db
from models.users import Role
from repositories.assignments import AssignmentLedger
from repositories.doctors import DoctorRepository
from repositories.patients import PatientRepository
from repositories.users import UserRepository

# Configuration
ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@healthcare.org")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")
DEFAULT_PASSWORD = "password123"

DOCTORS = [
    ("Dr. Sarah Smith", "sarah.smith@healthcare.org", "Cardiology", "LIC-1001", 12),
    ("Dr. Michael Jones", "michael.jones@healthcare.org", "Neurology", "LIC-1002", 8),
    ("Dr. Emily Lee", "emily.lee@healthcare.org", "Pediatrics", "LIC-1003", 3),
    ("Dr. Omar Haddad", "omar.haddad@healthcare.org", "Cardiology", "LIC-1004", 20),
]

PATIENTS = [
    ("John Doe", "john.doe@mail.org", "A+"),
    ("Maria Garcia", "maria.garcia@mail.org", "O-"),
    ("Wei Chen", "wei.chen@mail.org", "B+"),
    ("Amina Yusuf", "amina.yusuf@mail.org", None),
    ("Lukas Novak", "lukas.novak@mail.org", "AB+"),
]
# End Configuration


def _ensure_user(users: UserRepository, name, email, password, role, profile=None):
    existing = users.find_by_email(email)
    if existing:
        return existing, False
    return users.create(name=name, email=email, password=password, role=role, profile=profile), True


def load_all_data():
    """Creates a demo admin, doctors, patients and assignments. Safe to re-run."""
    init_db()
    session = SessionLocal()
    try:
        users = UserRepository(session)
        _, created = _ensure_user(users, "Administrator", ADMIN_EMAIL, ADMIN_PASSWORD, Role.ADMIN)
        print(f"Admin {ADMIN_EMAIL}: {'created' if created else 'already exists'}")

        doctor_ids = []
        for name, email, specialization, license_number, years in DOCTORS:
            user, created = _ensure_user(users, name, email, DEFAULT_PASSWORD, Role.DOCTOR, {
                "specialization": specialization,
                "license_number": license_number,
                "phone": f"+1-555-{random.randint(1000, 9999)}",
                "experience_years": years,
            })
            doctor_ids.append(DoctorRepository(session).find_by_user_id(user.id).id)
            if created:
                print(f"Doctor {email} created")

        patient_ids = []
        for name, email, blood_type in PATIENTS:
            user, created = _ensure_user(users, name, email, DEFAULT_PASSWORD, Role.PATIENT, {
                "date_of_birth": date(1960, 1, 1) + timedelta(days=random.randint(0, 365 * 45)),
                "phone": f"+1-555-{random.randint(1000, 9999)}",
                "blood_type": blood_type,
            })
            patient_ids.append(PatientRepository(session).find_by_user_id(user.id).id)
            if created:
                print(f"Patient {email} created")

        # Every patient gets one or two doctors
        ledger = AssignmentLedger(session)
        assigned = 0
        for patient_id in patient_ids:
            for doctor_id in random.sample(doctor_ids, k=random.randint(1, 2)):
                if not ledger.is_assigned(patient_id, doctor_id):
                    ledger.assign(patient_id, doctor_id, notes="Seeded assignment")
                    assigned += 1
        print(f"Assignments created: {assigned}")
    finally:
        session.close()


if __name__ == "__main__":
    load_all_data()
