# =============================================================================
# app/ - Job Tracker HTTP Layer
# =============================================================================
# - main.py: FastAPI app, CORS, request IDs, error envelope handlers
# - config.py: Settings loaded from the environment
# - dependencies.py: DB session, request context and rate limit dependencies
# - auth/: Bearer tokens, login sessions, current user resolution
# - routers/: One module per resource (applications, interviews, billing...)
#
# Handlers stay thin and call the static service classes in core/services/.
# =============================================================================
