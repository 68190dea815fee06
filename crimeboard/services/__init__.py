# =============================================================================
# Services Package: Business Logic
# =============================================================================
#   - llm.py: OpenAI-compatible agent client (degrades to "{}")
#   - parser.py: JSON extraction from free-form agent replies
#   - board.py: stage records → BoardAnalysis
#   - layout.py: lane-based positions for nodes
#   - tagger.py: filename keyword tags and date/time hints for evidence
#   - composite.py: suspect description → composite image prompt
#   - board_store.py: case, evidence and board persistence
#   - investigation.py: the analyze-a-case use case
# =============================================================================
