from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import Settings

def setup_cors(app: FastAPI, settings: Settings):
    """Configure CORS for the application"""
    origins = settings.allowed_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],  # no list configured: any origin
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"]
    )
