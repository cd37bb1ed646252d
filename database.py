#!/usr/bin/env python3
"""
MongoDB connection shared by the API routes and the generation worker.
"""

from pymongo import MongoClient
from pymongo.database import Database

from config import settings

client = MongoClient(settings.mongodb_uri)
db = client[settings.mongodb_db_name]


def get_db() -> Database:
    """FastAPI dependency returning the application database."""
    return db
