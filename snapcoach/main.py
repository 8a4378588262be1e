from fastapi import FastAPI

from snapcoach import __version__
from snapcoach.api import history, meals, reports, sessions

app = FastAPI(title="SnapCoach", version=__version__)

# Include routers
app.include_router(sessions.router)
app.include_router(meals.router)
app.include_router(history.router)
app.include_router(reports.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
