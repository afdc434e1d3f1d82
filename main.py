from fastapi import FastAPI
from dotenv import load_dotenv
import logging

# Load environment variables
load_dotenv()

from app.core.config import settings
from app.api.v1.api import api_router
from app.api.v1.endpoints.waitlist import waitlist_method_not_allowed_handler
from starlette.exceptions import HTTPException as StarletteHTTPException

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Configure audit logger (JSON lines)
audit_logger = logging.getLogger("audit")
if not audit_logger.handlers:
    handler = logging.StreamHandler()
    # Keep raw JSON line without extra prefixes
    handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(handler)
audit_logger.setLevel(logging.INFO)
# Do not propagate to root to avoid duplication
audit_logger.propagate = False

api_description = """
## GroupMeal Waitlist API

Backend for the GroupMeal landing page.

- `GET /api/waitlist` - current number of signups
- `POST /api/waitlist` - join the waitlist with `{"email": "..."}`
"""

app = FastAPI(
    title="GroupMeal Waitlist API",
    description=api_description,
    version="1.0.0",
    debug=settings.DEBUG,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS headers for /api/waitlist are set by the route itself
app.include_router(api_router, prefix="/api")

# Unsupported methods on /api/waitlist answer in the route's own 405 shape
app.add_exception_handler(StarletteHTTPException, waitlist_method_not_allowed_handler)

@app.get("/")
async def root():
    return {"message": "GroupMeal Waitlist API is running"}

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
