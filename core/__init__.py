# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the domain layer:
# - tables.py: SQLAlchemy ORM tables
# - models/: Pydantic schemas for request/response validation
# - services/: Business logic, one service class per resource
#
# Services take a SQLAlchemy Session and raise app.exceptions errors; they
# never touch Request/Response objects.
# =============================================================================
