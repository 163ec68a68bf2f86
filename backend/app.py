"""FastAPI app entry point in project root.

This file can be used directly with uvicorn:
  uvicorn app:app --reload
  uvicorn app:app --host 0.0.0.0 --port 8000
"""

from case_intake.api.router import create_app
from case_intake.core.config import load_settings

# Settings are read once per process and shared read-only by every request
settings = load_settings()
app = create_app(settings)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="127.0.0.1",
        port=8000,
        log_level=settings.log_level.lower(),
    )
