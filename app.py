#!/usr/bin/env python3
"""
FastAPI application for AI blog generation
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blogs import router as blogs_router
from config import settings
from database import get_db
from generation import store, task_queue
from logging_config import setup_logging

setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = get_db()
    store.ensure_indexes(db)
    task_queue.ensure_indexes(db)
    yield


# Initialize FastAPI app
app = FastAPI(title="Blog Generation API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(blogs_router)

# Root endpoint
@app.get("/")
async def root():
    """Root endpoint"""
    return {"message": "Blog Generation API", "version": "1.0.0"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
