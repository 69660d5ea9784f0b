"""
Sprite sheet test suite

Structure:
- unit/: packer, manifest, fetcher, orchestrator, compositor, helpers
- integration/: the HTTP handler end to end through FastAPI's TestClient
- helpers.py: in-memory image fixtures and fake fetch collaborators
"""
