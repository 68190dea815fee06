# =============================================================================
# API Package: FastAPI Route Handlers
# =============================================================================
#   - cases.py: cases, evidence registration, analysis and board endpoints
#   - deps.py: store and agent client dependencies
# =============================================================================
