"""
Request-body generators for registrations.

Every generator returns a fresh, unique payload. Registrations point at the
institution recorded in shared test data (falls back to TEST_INSTITUTION_ID).
"""

import time
from typing import Any, Dict

from .shared_data import generate_unique_test_data, get_shared_data

STUDENT_PASSWORD = "TestPass123!"
TEACHER_PASSWORD = "TeacherPass123!"
GUARDIAN_PASSWORD = "GuardianPass123!"


def _institution_id():
    return get_shared_data().get_institution_id()


def institution_registration_data() -> Dict[str, Any]:
    """Institution with every optional field filled in."""
    timestamp = int(time.time() * 1000)
    return {
        "name": f"Instituto de Prueba {timestamp}",
        "address": "Calle 123 # 45-67",
        "city": "Bogotá",
        "state": "Cundinamarca",
        "country": "Colombia",
        "postalCode": "110111",
        "phone": "+51-1-5551234",
        "email": f"contacto{timestamp}@instituto.edu.co",
        "website": f"https://instituto{timestamp}.edu.co",
        "logoUrl": f"https://instituto{timestamp}.edu.co/logo.png",
    }


def minimal_institution_data() -> Dict[str, Any]:
    """Institution with only the required fields."""
    timestamp = int(time.time() * 1000)
    return {
        "name": f"Instituto Mínimo {timestamp}",
        "address": "Dirección requerida",
        "city": "Ciudad",
        "country": "País",
        "phone": "+57-1-1234567",
        "email": f"minimal{timestamp}@test.com",
    }


def student_registration_data() -> Dict[str, Any]:
    unique = generate_unique_test_data()
    return {
        "firstName": "María",
        "lastName": "González",
        "email": unique["email"],
        "password": STUDENT_PASSWORD,
        "username": unique["username"],
        "birth_date": "2010-05-15T00:00:00Z",
        "institutionId": _institution_id(),
        "guardianProfileId": None,
    }


def teacher_registration_data() -> Dict[str, Any]:
    unique = generate_unique_test_data()
    return {
        "firstName": "Carlos",
        "lastName": "Ramírez",
        "email": unique["email"],
        "password": TEACHER_PASSWORD,
        "stemAreaId": 1,
        "institutionId": _institution_id(),
    }


def guardian_registration_data() -> Dict[str, Any]:
    unique = generate_unique_test_data()
    return {
        "firstName": "Ana",
        "lastName": "Martínez",
        "email": unique["email"],
        "password": GUARDIAN_PASSWORD,
        "phone": "+51955736644",
        "institutionId": _institution_id(),
    }
