from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional
from api import monitor as monitor_api
from config import Settings, load_settings
from db.sqlite import initialize_database

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(
        title="API Uptime Monitor",
        description="Request-based and time-window uptime for a monitored endpoint.",
        version="1.0.0"
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    initialize_database(settings.db_path)
    print(f"📦 Using request log database: {settings.db_path}")

    app.include_router(monitor_api.router, prefix="/api")

    @app.get("/", tags=["Root"])
    def read_root():
        """
        Root endpoint to check if the API is running.
        """
        return {"status": "ok", "message": "Welcome to the API Uptime Monitor", "monitored_url": settings.api_url}

    @app.get("/health")
    def health_check():
        """
        Health check endpoint for deployment monitoring
        """
        return {"status": "healthy", "service": "uptime-monitor"}

    return app

if __name__ == "__main__":
    import uvicorn
    settings = load_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
