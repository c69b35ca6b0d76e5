import logging

from fastapi import FastAPI

from teamsync.api import health
from teamsync.api.error_handlers import register_error_handlers
from teamsync.api.v1.endpoints import ai, organizer, participants, teams
from teamsync.core.cache import cache_service
from teamsync.core.config import settings
from teamsync.core.init_db import init_db
from teamsync.core.metrics import PrometheusMiddleware, metrics_endpoint
from teamsync.core.worker import automation_manager
from teamsync.db.mongodb import close_mongo_connection, connect_to_mongo

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    TeamSync API for forming balanced hackathon teams.

    ## Features
    * **Team Formation**: Create teams, invite participants and handle join requests.
    * **Balance Score**: Rate each team's role, skill and soft skill diversity.
    * **Discovery**: Find teammates by role, skills and experience.
    * **Automation**: Boost solo participants, expire invites and lock profiles on schedule.
    * **Organizer Analytics**: Participant distributions and team composition.
    * **AI Assistance**: Bio improvement, skill suggestions and team recommendations with offline fallbacks.

    """,
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
)

app.add_middleware(PrometheusMiddleware)
register_error_handlers(app)


@app.on_event("startup")
async def startup_event():
    await connect_to_mongo()
    await init_db()
    await automation_manager.start()


@app.on_event("shutdown")
async def shutdown_event():
    await automation_manager.stop()
    await cache_service.close()
    await close_mongo_connection()


app.add_route("/metrics", metrics_endpoint, include_in_schema=False)
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(teams.router, prefix=f"{settings.API_V1_STR}/teams", tags=["teams"])
app.include_router(participants.router, prefix=f"{settings.API_V1_STR}/participants", tags=["participants"])
app.include_router(organizer.router, prefix=f"{settings.API_V1_STR}/organizer", tags=["organizer"])
app.include_router(ai.router, prefix=f"{settings.API_V1_STR}/ai", tags=["ai"])


@app.get("/")
async def root():
    return {"message": "Welcome to TeamSync API"}
