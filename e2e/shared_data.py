"""
Shared test data between phases.

Each phase runs in its own process, so identities created by an earlier phase
(institution, teacher, guardian, student) are persisted to a JSON file and
read back by later phases. Last writer wins. The file is `test-data.json` in
the working directory unless TEST_DATA_FILE names another path.

Usage:
    from e2e.shared_data import get_shared_data

    data = get_shared_data()
    data.set_teacher_data(user_id, profile_id, email, password)
    teacher = data.get_teacher_data()
"""

import copy
import json
import os
import random
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, Optional

from .conftest import INSTITUTION_ID, env, log_warn

DEFAULT_DATA_FILENAME = "test-data.json"

DEFAULT_DATA: Dict[str, Any] = {
    'institution_id': INSTITUTION_ID,
    'teacher_id': None,
    'teacher_profile_id': None,
    'teacher_email': None,
    'teacher_password': None,
    'guardian_id': None,
    'guardian_profile_id': None,
    'guardian_email': None,
    'guardian_password': None,
    'student_id': None,
    'student_profile_id': None,
    'student_email': None,
    'student_username': None,
    'student_password': None,
    'created_emails': [],
    'created_usernames': [],
    'test_run_id': None,
}


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_unique_test_data() -> Dict[str, str]:
    """Unique email/username/name/phone for one registration."""
    timestamp = _now_ms()
    rand = random.randint(0, 999)
    return {
        'email': f"test_{timestamp}_{rand}@example.com",
        'username': f"user_{timestamp}_{rand}",
        'first_name': f"TestUser_{rand}",
        'last_name': f"LastName_{timestamp}",
        'phone': f"+51300{rand}{str(timestamp)[-4:]}",
    }


def default_data_file() -> Path:
    """`test-data.json` in the current working directory."""
    return Path.cwd() / DEFAULT_DATA_FILENAME


class SharedTestData:
    """JSON-file backed record of identities created during a test run."""

    def __init__(self, data_file=None):
        self.data_file = Path(data_file or env("TEST_DATA_FILE") or default_data_file())
        self.data = copy.deepcopy(DEFAULT_DATA)
        self.load_data()

    def load_data(self) -> None:
        """Merge the file contents over the defaults."""
        if not self.data_file.exists():
            return
        try:
            file_data = json.loads(self.data_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            log_warn(f"Could not load test data file, using defaults: {e}")
            return
        if not isinstance(file_data, dict):
            log_warn(f"Ignoring test data file {self.data_file}: not a JSON object")
            return
        self.data.update(file_data)

    def save_data(self) -> None:
        self.data_file.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.data_file.parent, prefix=".test-data-", suffix=".json"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self.data, f, indent=2)
            os.replace(tmp_path, self.data_file)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def initialize_test_run(self) -> int:
        """Stamp a new run id and persist it."""
        self.data['test_run_id'] = _now_ms()
        self.save_data()
        return self.data['test_run_id']

    def generate_unique_test_data(self) -> Dict[str, str]:
        return generate_unique_test_data()

    # Institution

    def set_institution_id(self, institution_id) -> None:
        self.data['institution_id'] = institution_id
        self.save_data()

    def get_institution_id(self):
        return self.data['institution_id']

    # Teacher

    def set_teacher_data(self, user_id, profile_id, email, password) -> None:
        self.data['teacher_id'] = user_id
        self.data['teacher_profile_id'] = profile_id
        self.data['teacher_email'] = email
        self.data['teacher_password'] = password
        self._add_created_email(email)
        self.save_data()

    def get_teacher_data(self) -> Dict[str, Any]:
        return {
            'user_id': self.data['teacher_id'],
            'profile_id': self.data['teacher_profile_id'],
            'email': self.data['teacher_email'],
            'password': self.data['teacher_password'],
        }

    # Guardian

    def set_guardian_data(self, user_id, profile_id, email, password) -> None:
        self.data['guardian_id'] = user_id
        self.data['guardian_profile_id'] = profile_id
        self.data['guardian_email'] = email
        self.data['guardian_password'] = password
        self._add_created_email(email)
        self.save_data()

    def get_guardian_data(self) -> Dict[str, Any]:
        return {
            'user_id': self.data['guardian_id'],
            'profile_id': self.data['guardian_profile_id'],
            'email': self.data['guardian_email'],
            'password': self.data['guardian_password'],
        }

    # Student

    def set_student_data(self, user_id, profile_id, email, username, password) -> None:
        self.data['student_id'] = user_id
        self.data['student_profile_id'] = profile_id
        self.data['student_email'] = email
        self.data['student_username'] = username
        self.data['student_password'] = password
        self._add_created_email(email)
        self._add_created_username(username)
        self.save_data()

    def get_student_data(self) -> Dict[str, Any]:
        return {
            'user_id': self.data['student_id'],
            'profile_id': self.data['student_profile_id'],
            'email': self.data['student_email'],
            'username': self.data['student_username'],
            'password': self.data['student_password'],
        }

    # Created identities

    def _add_created_email(self, email: Optional[str]) -> None:
        if email and email not in self.data['created_emails']:
            self.data['created_emails'].append(email)

    def _add_created_username(self, username: Optional[str]) -> None:
        if username and username not in self.data['created_usernames']:
            self.data['created_usernames'].append(username)

    def is_email_used(self, email: str) -> bool:
        return email in self.data['created_emails']

    def is_username_used(self, username: str) -> bool:
        return username in self.data['created_usernames']

    def cleanup(self) -> None:
        """Reset to defaults (fallback institution id included) and persist."""
        self.data = copy.deepcopy(DEFAULT_DATA)
        self.save_data()

    def print_data(self) -> None:
        print("=== SHARED TEST DATA ===")
        print(json.dumps(self.data, indent=2))
        print("========================")


# Singleton
_shared: Optional[SharedTestData] = None


def get_shared_data() -> SharedTestData:
    """Get or create the process-wide SharedTestData."""
    global _shared
    if _shared is None:
        _shared = SharedTestData()
    return _shared


def reset_shared_data() -> None:
    """Forget the singleton so the next access re-reads the file."""
    global _shared
    _shared = None
