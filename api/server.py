"""
FastAPI server exposing the database engine as a REST API.
"""

import logging
import threading
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from rdbms.config import EngineConfig
from rdbms.engine import DatabaseEngine
from rdbms.errors import DatabaseError, TableNotFound

logger = logging.getLogger(__name__)


class QueryRequest(BaseModel):
    query: str


def create_app(engine: Optional[DatabaseEngine] = None) -> FastAPI:
    """Build the API around one engine; every engine call holds a single lock."""
    if engine is None:
        config = EngineConfig.from_env()
        config.configure_logging()
        engine = DatabaseEngine.from_config(config)

    app = FastAPI(title="Simple RDBMS API", version="1.0.0")
    app.state.engine = engine
    lock = threading.Lock()

    # Enable CORS for browser clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError):
        status_code = 404 if isinstance(exc, TableNotFound) else 400
        logger.info("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"success": False, "error": str(exc)})

    @app.get("/")
    def root():
        """Root endpoint with API information."""
        return {
            "name": "Simple RDBMS API",
            "version": "1.0.0",
            "endpoints": {
                "POST /query": "Execute a SQL-like statement",
                "GET /tables": "List all tables",
                "GET /tables/{name}": "Get table info",
            },
        }

    @app.post("/query")
    def execute_query(request: QueryRequest) -> Dict[str, Any]:
        """Execute a raw SQL-like statement."""
        with lock:
            return engine.execute(request.query)

    @app.get("/tables")
    def list_tables():
        """List all tables in the database."""
        with lock:
            return {"tables": engine.list_tables()}

    @app.get("/tables/{table_name}")
    def get_table_info(table_name: str):
        """Get information about a specific table."""
        with lock:
            return engine.get_table_info(table_name)

    return app


def main():
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="Simple RDBMS API server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    uvicorn.run("api.server:create_app", factory=True, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
