"""
ASGI entry point for the uptime monitor API.
Configuration is read from the environment (and .env) once at import.
"""

from config import load_settings
from main import create_app

application = create_app(load_settings())

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(application, host="0.0.0.0", port=load_settings().port)
