"""
Test Profiles - Role-based Authentication

Provides one profile per backend role:
- STUDENT: logs in through /auth/student-login (username) or /auth/login (email)
- TEACHER: /auth/login
- GUARDIAN: /auth/login

Credentials are tried in order until one logs in:
1. Identities registered by an earlier phase (shared test data)
2. TEST_<ROLE>_EMAIL / TEST_<ROLE>_PASSWORD (and TEST_STUDENT_USERNAME)
3. The fixture accounts seeded in the test database
"""

from typing import Dict, List, Optional

from auth_client import AuthClient, LoginResult

from . import conftest
from .conftest import env, log_info
from .shared_data import get_shared_data
from .suite import SkipTest

# Accounts seeded in the test database (not secrets)
FIXTURE_ACCOUNTS = {
    'student': {'email': 'sstring@example.com', 'username': '4chan', 'password': 'Spassword1!'},
    'teacher': {'email': 'tstring@example.com', 'password': 'Tpassword1!'},
    'guardian': {'email': 'maria.guardian@example.com', 'password': 'GuardianPass123!'},
}

_SHARED_GETTERS = {
    'student': lambda data: data.get_student_data(),
    'teacher': lambda data: data.get_teacher_data(),
    'guardian': lambda data: data.get_guardian_data(),
}


class Profile:
    """
    A test profile representing a user with a specific role.
    """
    def __init__(self, role):
        self.role = role
        self._login: Optional[LoginResult] = None

    def credentials(self) -> List[Dict[str, str]]:
        """Candidate credentials, most specific first, without duplicates."""
        prefix = f"TEST_{self.role.upper()}"
        shared = _SHARED_GETTERS[self.role](get_shared_data())
        candidates = [
            {
                'email': shared.get('email'),
                'username': shared.get('username'),
                'password': shared.get('password'),
            },
            {
                'email': env(f"{prefix}_EMAIL"),
                'username': env(f"{prefix}_USERNAME"),
                'password': env(f"{prefix}_PASSWORD"),
            },
            dict(FIXTURE_ACCOUNTS[self.role]),
        ]

        seen = set()
        result = []
        for cred in candidates:
            if not cred.get('password') or not (cred.get('email') or cred.get('username')):
                continue
            key = (cred.get('email'), cred.get('username'), cred['password'])
            if key in seen:
                continue
            seen.add(key)
            result.append(cred)
        return result

    def _attempt(self, client: AuthClient, cred: Dict[str, str]) -> LoginResult:
        if self.role == 'student' and cred.get('username'):
            return client.login(cred['username'], cred['password'], kind='student')
        return client.login(cred['email'], cred['password'])

    def login(self, force_refresh=False) -> LoginResult:
        """Log in with the first working credentials.

        The outcome is cached, failures included, until `force_refresh`.
        """
        if self._login is not None and not force_refresh:
            return self._login

        client = AuthClient(conftest.get_api_base(), timeout=conftest.TIMEOUT)
        result = LoginResult(success=False, error="No credentials configured")
        for cred in self.credentials():
            result = self._attempt(client, cred)
            if result.success:
                log_info(f"Logged in as {self.role}: {cred.get('username') or cred.get('email')}")
                break
        self._login = result
        return result

    @property
    def token(self) -> Optional[str]:
        return self.login().token

    @property
    def user_id(self):
        return self.login().user.get('id')

    def headers(self) -> Dict[str, str]:
        """Bearer header for this profile; skips the test when login failed."""
        result = self.login()
        if not result.success:
            raise SkipTest(f"Could not log in as {self.role}: {result.error}")
        return {"Authorization": f"Bearer {result.token}"}

    def clear_cache(self):
        self._login = None


# ============================================
# Pre-configured Profiles
# ============================================

STUDENT = Profile('student')
TEACHER = Profile('teacher')
GUARDIAN = Profile('guardian')


def clear_all():
    for profile in (STUDENT, TEACHER, GUARDIAN):
        profile.clear_cache()
