"""Main entrypoint for the Expense Tracker API.

Builds the application from environment settings and runs it with Uvicorn when executed directly.
"""

from app.core.settings import get_settings
from app.main import create_app

app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host=settings.server_host, port=settings.server_port, reload=True)
