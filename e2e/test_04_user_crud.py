"""
User Management Tests (anonymous)

Exercises every /users endpoint without a token. A protected backend answers
401, which is accepted everywhere; the other accepted codes cover a backend
running with security disabled.

Ids come from shared test data when the registration phase stored them.

Run:
    python -m e2e.test_04_user_crud
"""

import sys

from .api import expect_status, invoke_request
from .endpoints import endpoint
from .shared_data import get_shared_data
from .suite import phase_main

# Fallback ids when shared test data is empty
STUDENT_USER_ID = 31
STUDENT_UPDATE_ID = 32
TEACHER_USER_ID = 789
GUARDIAN_USER_ID = 321
GUARDIAN_STUDENTS_ID = 123
ASSOCIATE_STUDENT_PROFILE_ID = 18
ASSOCIATE_GUARDIAN_PROFILE_ID = 789
ACCOUNT_USER_ID = 18
NONEXISTENT_USER_ID = 99999


def _shared_id(getter, key, fallback):
    value = getter()[key]
    return value if value else fallback


def _student_id():
    return _shared_id(get_shared_data().get_student_data, 'user_id', STUDENT_USER_ID)


def _teacher_id():
    return _shared_id(get_shared_data().get_teacher_data, 'user_id', TEACHER_USER_ID)


def _guardian_id():
    return _shared_id(get_shared_data().get_guardian_data, 'user_id', GUARDIAN_USER_ID)


class TestUserQueries:
    """Profiles and search."""

    def test_current_profile(self):
        expect_status(invoke_request("GET", endpoint('users', 'profile')), 200, 401)

    def test_student_profile(self):
        response = invoke_request("GET", endpoint('users', 'students', id=_student_id()))
        expect_status(response, 200, 401, 404)

    def test_teacher_profile(self):
        response = invoke_request("GET", endpoint('users', 'teachers', id=_teacher_id()))
        expect_status(response, 200, 401, 404)

    def test_guardian_profile(self):
        response = invoke_request("GET", endpoint('users', 'guardians', id=_guardian_id()))
        expect_status(response, 200, 401, 404)

    def test_search_users(self):
        params = {'searchTerm': 'María', 'roleFilter': 'STUDENT', 'limit': 10}
        response = invoke_request("GET", endpoint('users', 'search'), params=params)
        expect_status(response, 200, 401)

    def test_search_missing_term(self):
        expect_status(invoke_request("GET", endpoint('users', 'search')), 400, 401)

    def test_search_defaults(self):
        response = invoke_request("GET", endpoint('users', 'search'), params={'searchTerm': 'test'})
        expect_status(response, 200, 401)


class TestGuardianRelations:
    """Guardian to student links."""

    def test_guardian_students(self):
        guardian_id = _shared_id(get_shared_data().get_guardian_data, 'user_id', GUARDIAN_STUDENTS_ID)
        response = invoke_request("GET", endpoint('users', 'guardianStudents', id=guardian_id))
        expect_status(response, 200, 401, 404)

    def test_associate_student(self):
        shared = get_shared_data()
        body = {
            "studentProfileId": _shared_id(
                shared.get_student_data, 'profile_id', ASSOCIATE_STUDENT_PROFILE_ID),
            "guardianProfileId": _shared_id(
                shared.get_guardian_data, 'profile_id', ASSOCIATE_GUARDIAN_PROFILE_ID),
        }
        response = invoke_request("POST", endpoint('users', 'associateStudent'), body=body)
        expect_status(response, 200, 401, 400)


class TestProfileUpdates:
    """PUT endpoints."""

    def test_update_student(self):
        """Fixed id: the body renames the user, so never the stored student."""
        body = {
            "firstName": "María Actualizada",
            "lastName": "González Actualizada",
            "username": "maria_gonzalez_new",
            "profilePictureUrl": "https://example.com/new-picture.jpg",
        }
        response = invoke_request("PUT", endpoint('users', 'students', id=STUDENT_UPDATE_ID), body=body)
        expect_status(response, 200, 401, 404)

    def test_update_teacher(self):
        body = {
            "firstName": "Carlos Actualizado",
            "lastName": "Ramírez Actualizado",
            "stemAreaId": 2,
            "profilePictureUrl": "https://example.com/teacher-picture.jpg",
        }
        response = invoke_request("PUT", endpoint('users', 'teachers', id=_teacher_id()), body=body)
        expect_status(response, 200, 401, 404)

    def test_update_guardian(self):
        body = {
            "firstName": "Ana Actualizada",
            "lastName": "Martínez Actualizada",
            "phone": "+57-300-7654321",
            "profilePictureUrl": "https://example.com/guardian-picture.jpg",
        }
        response = invoke_request("PUT", endpoint('users', 'guardians', id=_guardian_id()), body=body)
        expect_status(response, 200, 401, 404)

    def test_update_password(self):
        body = {
            "currentPassword": "OldPassword123!",
            "newPassword": "NewPassword123!",
            "confirmPassword": "NewPassword123!",
        }
        response = invoke_request(
            "PUT", endpoint('users', 'updatePassword', id=ACCOUNT_USER_ID), body=body
        )
        expect_status(response, 200, 401, 400)

    def test_update_profile_picture(self):
        """The body is a bare JSON string."""
        response = invoke_request(
            "PUT", endpoint('users', 'updateProfilePicture', id=ACCOUNT_USER_ID),
            body="https://example.com/new-profile-picture.jpg",
        )
        expect_status(response, 200, 401, 400)

    def test_update_profile_picture_invalid(self):
        response = invoke_request(
            "PUT", endpoint('users', 'updateProfilePicture', id=ACCOUNT_USER_ID),
            body="not-a-valid-url",
        )
        expect_status(response, 400, 401)


class TestAccountDeactivation:
    """DELETE /users/{id}. Never aimed at the identities later phases log in with."""

    def test_deactivate_user(self):
        response = invoke_request("DELETE", endpoint('users', 'deactivate', id=ACCOUNT_USER_ID))
        expect_status(response, 200, 401, 404)

    def test_deactivate_nonexistent(self):
        response = invoke_request("DELETE", endpoint('users', 'deactivate', id=NONEXISTENT_USER_ID))
        expect_status(response, 404, 401)


def get_tests():
    """Return list of test functions for runner."""
    queries = TestUserQueries()
    return [
        ("Get Current User Profile", queries.test_current_profile),
        ("Get Student Profile", queries.test_student_profile),
        ("Get Teacher Profile", queries.test_teacher_profile),
        ("Get Guardian Profile", queries.test_guardian_profile),
        ("Search Users", queries.test_search_users),
        ("Search Users Missing Term", queries.test_search_missing_term),
        ("Search Users Default Values", queries.test_search_defaults),
    ]


def get_sections(args):
    relations = TestGuardianRelations()
    updates = TestProfileUpdates()
    deactivation = TestAccountDeactivation()

    return [
        ("SECTION 1: PROFILES AND SEARCH", get_tests()),
        ("SECTION 2: GUARDIAN RELATIONS", [
            ("Get Guardian Students", relations.test_guardian_students),
            ("Associate Student to Guardian", relations.test_associate_student),
        ]),
        ("SECTION 3: PROFILE UPDATES", [
            ("Update Student Profile", updates.test_update_student),
            ("Update Teacher Profile", updates.test_update_teacher),
            ("Update Guardian Profile", updates.test_update_guardian),
            ("Update Password", updates.test_update_password),
            ("Update Profile Picture", updates.test_update_profile_picture),
            ("Update Profile Picture Invalid URL", updates.test_update_profile_picture_invalid),
        ]),
        ("SECTION 4: ACCOUNT DEACTIVATION", [
            ("Deactivate User", deactivation.test_deactivate_user),
            ("Deactivate Non-existent User", deactivation.test_deactivate_nonexistent),
        ]),
    ]


def main(argv=None):
    return phase_main("USER MANAGEMENT TESTS", get_sections, argv=argv)


if __name__ == "__main__":
    sys.exit(main())
