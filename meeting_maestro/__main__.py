"""Run the API with uvicorn: ``python -m meeting_maestro``."""

import uvicorn

from meeting_maestro.config import settings

if __name__ == "__main__":
    uvicorn.run("meeting_maestro.api.main:app", host=settings.api_host, port=settings.api_port)
