from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from crackgrid import config
from crackgrid.api.v1.api import api_router
from crackgrid.database import init_db
from crackgrid.logger import setup_logger, _log_info

app = FastAPI(
    title="CrackGrid",
    description="Interview questions, placed students and drive photos by year and company",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    """Configure logging and create database tables on startup."""
    setup_logger()
    init_db()
    _log_info("Database tables created/verified")


app.include_router(api_router)


@app.get("/")
def health_check():
    return {"status": "ok"}
