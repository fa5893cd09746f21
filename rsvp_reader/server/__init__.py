"""HTTP API for the RSVP reader (FastAPI + uvicorn)."""
