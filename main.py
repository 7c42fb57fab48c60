import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from db import init_db
from errors import MathProblemError

# Routers
from routers.health import router as health_router
from routers.problems import router as problems_router

logger = logging.getLogger("math-problems")
logging.basicConfig(level=logging.INFO)

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    logger.info("Math Problem Tutor API ready (CORS origins: %s)", ", ".join(CORS_ORIGINS))
    yield


app = FastAPI(title="Math Problem Tutor API", lifespan=lifespan)

# Allow calls from the Next.js dev server (and whatever CORS_ORIGINS adds)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MathProblemError)
async def math_problem_error_handler(request: Request, exc: MathProblemError):
    # 500-class detail is logged by the router and replaced by a generic message here
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # malformed bodies/queries are client errors, reported as 400 like missing fields
    first = exc.errors()[0] if exc.errors() else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = f"Invalid {loc}: {first.get('msg', 'invalid value')}" if loc else "Invalid request body"
    return JSONResponse(status_code=400, content={"error": msg})


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(problems_router)  # /api/math-problem, /hints, /solution, /submit, /history
app.include_router(health_router)  # /health/...
