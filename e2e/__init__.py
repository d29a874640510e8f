"""
Numerino API E2E phases.

Phases (run in this order by e2e.run_all, see phases.yaml):
- test_01_health: service, database, stored procedures
- test_02_institutions: institution queries and creation
- test_03_registration: student, teacher, guardian registration
- test_04_user_crud: /users endpoints without a token
- test_05_authentication: login, tokens, account flows
- test_06_authenticated_users: /users endpoints with bearer tokens
- test_07_sessions_audit: /sessions and /audit access rules
"""
