import uvicorn
import logging

from config import HOST, PORT
from logging_setup import setup_logging
from api.app import app
from api.access.routes import access_router
from api.auth.routes import auth_router
from api.dashboard.routes import dashboard_router
from api.directory.routes import directory_router
from api.engagements.routes import engagements_router
from api.events.routes import events_router

# Configure root logging once (respects LOG_LEVEL env).
setup_logging()

logging.info("Application starting up...") # Log application startup

# Include routers
app.include_router(auth_router, prefix="/auth", tags=["Auth"])
app.include_router(access_router, prefix="/access", tags=["Access"])
app.include_router(events_router, prefix="/events", tags=["Events"])
app.include_router(engagements_router, prefix="/engagements", tags=["Engagements"])
app.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])
app.include_router(directory_router, prefix="/directory", tags=["Directory"])

if __name__ == "__main__":
    uvicorn.run(app, host=HOST, port=PORT)
