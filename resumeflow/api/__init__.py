"""
API module - FastAPI routers, endpoint definitions and request dependencies.

Usage:
    from resumeflow.api.routes import api_router
    app.include_router(api_router, prefix="/api")
"""
