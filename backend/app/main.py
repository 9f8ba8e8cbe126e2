from fastapi import FastAPI

from core.config import get_settings
from core.database import init_db
from core.exceptions import register_exception_handlers
from app.startup import configure_logging, run_startup_checks

# ========== Table Occupancy ==========
from modules.occupancy.routes.occupancy_routes import router as occupancy_router

configure_logging()

app = FastAPI(
    title="Venue Occupancy API",
    description="""
    Table occupancy and booking conflict engine for a board-game café.

    ## Features

    * **Occupancy View** - Current occupant of every table, resolved from duplicate check-ins
    * **Conflict Detection** - Overlapping reservations on the same table
    * **Turnover Risk** - Tables that may not be ready for their next booking
    * **Alerts** - Host dashboard alerts, most severe first
    """,
    version="0.1.0",
)

register_exception_handlers(app)

app.include_router(occupancy_router)


@app.on_event("startup")
async def startup_event():
    """Create development tables and run startup validation checks"""
    if get_settings().is_development:
        init_db()
    run_startup_checks()


@app.get("/")
def read_root():
    return {"message": "Venue occupancy backend is running"}
