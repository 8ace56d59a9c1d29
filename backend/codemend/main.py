"""
CodeMend FastAPI Application Entry Point
FastAPI 应用入口
"""

import os
import socket

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.concurrency import run_in_threadpool
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from codemend.config import settings
from codemend.context_engine import load_encoding
from codemend.dependencies import get_context_engine
from codemend.utils.logger import get_logger
from codemend.routers import context_router

logger = get_logger(__name__)

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address, default_limits=["200/minute"])

# Create FastAPI application / 创建 FastAPI 应用
app = FastAPI(
    title="CodeMend API",
    description="Context Preparation Engine for Multi-File Projects / 多文件项目上下文准备引擎",
    version="0.1.0",
    debug=settings.debug
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# Global exception handler, internal details stay in the log
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and return a safe 500 response."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )

# Configure CORS / 配置跨域
# The browser client runs on the Vite dev server or is served locally
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",  # Dev: Vite dev server
        "http://localhost:5173",  # Dev: Vite default port
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers / 注册路由
# Strategy: Dual Mount
# Mount at root "/" for Dev mode (where Vite proxy strips /api)
# Mount at "/api" for clients that call /api directly
routers = [
    context_router,
]

for router in routers:
    app.include_router(router)                  # Dev: http://localhost:8000/context/prepare
    app.include_router(router, prefix="/api")   # Prod: http://localhost:8000/api/context/prepare


@app.on_event("startup")
async def on_startup():
    """Startup event handler / 启动事件处理"""
    # Turns only use an already-loaded encoding; load it off the event loop here
    available = await run_in_threadpool(load_encoding)
    logger.info("Token counting: %s", "tiktoken" if available else "character estimate")


@app.get("/health")
async def health_check():
    """Health check endpoint / 健康检查"""
    stats = get_context_engine().cache_stats()
    return {
        "status": "ok",
        "version": app.version,
        "cache_entries": stats["entries"],
        "tracked_projects": stats["tracked_projects"],
    }


if __name__ == "__main__":
    import uvicorn

    def _port_available(host: str, port: int) -> bool:
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                sock.bind((host, int(port)))
                return True
        except OSError:
            return False

    def _pick_port(host: str, preferred: int, max_tries: int = 20) -> int:
        base = int(preferred or 0)
        if base <= 0:
            return 8000
        for port in range(base, base + max_tries):
            if _port_available(host, port):
                return port
        return base

    auto_port = str(os.getenv("CODEMEND_AUTO_PORT", "")).strip().lower() in {"1", "true", "yes", "on"}
    chosen_port = settings.port
    if auto_port and not _port_available(settings.host, chosen_port):
        new_port = _pick_port(settings.host, chosen_port + 1)
        if new_port != chosen_port:
            logger.warning("Port %d is in use. Switching to available port %d.", chosen_port, new_port)
            chosen_port = new_port

    # Dev: reload needs the import string, not the app instance
    uvicorn.run(
        "codemend.main:app" if settings.debug else app,
        host=settings.host,
        port=chosen_port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )
