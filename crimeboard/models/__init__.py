# =============================================================================
# Models Package: Pydantic V2 Schemas
# =============================================================================
#   - stages.py: lenient records for each agent stage's output
#   - board.py: evidence items and the unified board analysis
#   - requests.py / responses.py: API contract
# These are separate from the database models (crimeboard/db/models.py).
# =============================================================================
