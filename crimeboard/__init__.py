# =============================================================================
# CrimeBoard
# =============================================================================
# Turns a case's evidence into an investigation board: a chain of seven
# agent stages reads the evidence, and the merged result becomes a graph of
# evidence and suspect nodes with labelled connections.
#
# Package structure:
#   crimeboard/
#   ├── api/          → FastAPI route handlers (cases, evidence, analysis)
#   ├── agents/       → LangGraph stage chain and its prompts
#   ├── db/           → Database engine, session, and ORM models
#   ├── models/       → Pydantic V2 stage records, board and API schemas
#   └── services/     → Agent client, parsing, assembly, layout, storage
# =============================================================================
