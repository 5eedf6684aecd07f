"""
Seed a few employees for local development and print an access token for each.

    python -m scripts.seed_employees
"""
from datetime import date

from hrms.database import SessionLocal, init_db
from hrms.models.employee import Employee
from hrms.repositories.base import DuplicateRecordError
from hrms.repositories.sql import SqlEmployeeDirectory
from hrms.services.auth import create_access_token

SEED = [
    # employee_id, first, last, email, joining date, manager, role
    ("EMP001", "Asha", "Rao", "hr@example.com", date(2022, 1, 10), None, "hr"),
    ("EMP002", "Ben", "Okafor", "manager@example.com", date(2023, 3, 1), "EMP001", "manager"),
    ("EMP003", "Chen", "Li", "employee@example.com", date(2024, 6, 17), "EMP002", "employee"),
]

init_db()
db = SessionLocal()
directory = SqlEmployeeDirectory(db)

try:
    for employee_id, first, last, email, joined, manager, role in SEED:
        if directory.get(employee_id):
            print(f"Employee {employee_id} already exists. Skipping.")
        else:
            try:
                directory.add(Employee(
                    employee_id=employee_id,
                    first_name=first,
                    last_name=last,
                    email=email,
                    joining_date=joined,
                    reporting_manager=manager,
                ))
                print(f"Created {role} -> {employee_id} ({email})")
            except DuplicateRecordError:
                print(f"Email {email} already in use. Skipping.")
                continue

        token = create_access_token(data={
            "sub": email,
            "role": role,
            "employee_id": employee_id,
            "name": f"{first} {last}",
        })
        print(f"  token: {token}")
finally:
    db.close()
