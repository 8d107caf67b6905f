"""
Main entry point for the relay server.

Usage:
    python run.py

Or with uvicorn directly:
    uvicorn chat_relay.fastapi_app:app --host 0.0.0.0 --port 3000 --reload
"""

import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

import uvicorn

if __name__ == "__main__":
    env = os.getenv("APP_ENV", "development")
    debug = env == "development"
    port = int(os.getenv("PORT", 3000))
    host = os.getenv("HOST", "0.0.0.0")

    print(f"Starting chat relay in {env} mode...")
    print(f"Server running on http://{host}:{port}")
    print(f"WebSocket endpoint at ws://{host}:{port}/ws/{{conversation_id}}")

    uvicorn.run(
        "chat_relay.fastapi_app:app",
        host=host,
        port=port,
        reload=debug,
        log_level="info" if debug else "warning",
    )
