# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - database.py: SQLAlchemy engine, session factory and UTC column type
# - security.py: Password hashing, tokens, JWT and secret encryption
# - login_throttle.py: Failed-login lockout with exponential backoff
# - rate_limiter.py: Fixed-window request limiter (memory or redis)
# - user_agent.py: Device / browser / OS detection
# - email_client.py, email_templates.py: Outgoing email
# - retry.py: Exponential backoff for external calls
# - utils.py: Request helpers and text/time utilities
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================
