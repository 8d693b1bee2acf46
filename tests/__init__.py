# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Job Tracker API:
# - test_models.py: Unit tests for Pydantic model validation
# - test_login_throttle.py, test_user_agent.py, test_rate_limiter.py,
#   test_retry.py, test_email_templates.py: lib/ unit tests
# - test_*_api.py, test_csv.py, test_billing.py, test_reminders.py,
#   test_dashboard.py, test_health.py: API tests through TestClient
#
# Run tests with: pytest
# =============================================================================
