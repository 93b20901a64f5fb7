"""
REST test package for the TODO service.

Tests run through ``TodoSteps`` against the session's stack and cover:
- CRUD operations
- Input validation (400)
- Missing records (404) and missing credentials (401)
- Pagination with offset and limit
"""
