import os
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from jinja2 import Environment, FileSystemLoader, select_autoescape
from app.core import config
from app.core.logging import setup_logging
from app.services.content_store import ContentStore
from app.routers import trees

setup_logging(config.LOG_LEVEL)

app = FastAPI(title=config.SITE_NAME)

# Security Headers Middleware
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "same-origin"

        # Content Security Policy
        csp = (
            "default-src 'self'; "
            "script-src 'self'; "
            "style-src 'self'; "
            "img-src 'self' data:;"
        )
        response.headers["Content-Security-Policy"] = csp
        return response

app.add_middleware(SecurityHeadersMiddleware)

# Templates
templates_dir = os.path.join(os.path.dirname(__file__), "templates")
jinja_env = Environment(
    loader=FileSystemLoader(templates_dir),
    autoescape=select_autoescape(["html"]),
)

def render(name, status_code=200, **ctx):
    template = jinja_env.get_template(name)
    return HTMLResponse(template.render(**ctx), status_code=status_code)

# Services
content_store = ContentStore()

# App State
app.state.content_store = content_store
app.state.render = render

# Static Files
static_dir = os.path.join(os.path.dirname(__file__), "static")
app.mount("/static", StaticFiles(directory=static_dir), name="static")

@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    # Pages get the HTML not-found view, the API keeps FastAPI's JSON body
    if exc.status_code == 404 and not request.url.path.startswith("/api/"):
        return render("not_found.html", status_code=404, request=request, site_name=config.SITE_NAME)
    return await http_exception_handler(request, exc)

@app.get("/health", include_in_schema=False)
def health():
    return JSONResponse({"ok": True})

# Include Routers
app.include_router(trees.router)

if __name__ == "__main__":
    import uvicorn
    import argparse

    parser = argparse.ArgumentParser(description="Run the question tree site")
    parser.add_argument("--port", type=int, default=config.PORT, help="Port to run the service on")
    parser.add_argument("--host", type=str, default=config.HOST, help="Host to bind to")
    args = parser.parse_args()

    uvicorn.run(app, host=args.host, port=args.port)
