"""
SpecialStandard Backend — API Routes Package
=============================================

Route Inventory (all under /api/v1 except /health):
    - health.py:           GET  /health
    - auth.py:             /auth/login, /auth/signup, /auth/logout, password flows
    - verification.py:     /verification/send-code, /verification/verify
    - themes.py:           /themes
    - therapists.py:       /therapists
    - resources.py:        /resources, /session-resource
    - students.py:         /students
    - sessions.py:         /sessions
    - session_students.py: /session_students
    - games.py:            /game-contents, /game-results
    - reference.py:        /districts, /schools, /newsletter/by-date
    - storage.py:          /s3/presign, /s3/list

Routes stay thin: parse and validate input, call one repository or
service, return the record. Errors are raised, never returned.
"""

from specialstandard.schemas.common import ErrorResponse

API_PREFIX = "/api/v1"

# OpenAPI error documentation shared by the CRUD routers
ERROR_RESPONSES = {
    400: {"description": "Malformed input or constraint violation", "model": ErrorResponse},
    401: {"description": "Missing or invalid session", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
    503: {"description": "Database unavailable", "model": ErrorResponse},
}
NOT_FOUND = {404: {"description": "No such record", "model": ErrorResponse}}
CONFLICT = {409: {"description": "Record already exists", "model": ErrorResponse}}
