# =============================================================================
# Agents Package: LangGraph Investigation Chain
# =============================================================================
#   - orchestrator.py: linear graph of seven stages, each reading the
#     evidence plus the outputs of earlier stages
#   - prompts.py: system prompts, one per stage
# =============================================================================
