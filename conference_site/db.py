"""Database connection and utility functions for MongoDB.

This module provides a centralized MongoDB client with connection management,
error handling, and index setup for the conference registration site.
"""

from __future__ import annotations

import logging
from typing import Optional
from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from flask import current_app, g

logger = logging.getLogger(__name__)

PARTICIPANTS_COLLECTION = 'participants'
LOADED_FILES_COLLECTION = 'loaded_files'


class DatabaseError(Exception):
    """Custom exception for database-related errors."""
    pass


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client instance.

    Returns:
        MongoClient: Configured MongoDB client instance

    Raises:
        DatabaseError: If connection cannot be established
    """
    if 'mongo_client' not in g:
        try:
            mongo_uri = current_app.config['MONGO_URI']
            g.mongo_client = MongoClient(
                mongo_uri,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=10000,
                socketTimeoutMS=20000,
                maxPoolSize=50,
                retryWrites=True
            )
            g.mongo_client.admin.command('ping')
            logger.info("MongoDB connection established successfully")

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise DatabaseError(f"Database connection failed: {e}")
        except Exception as e:
            logger.error(f"Unexpected error connecting to MongoDB: {e}")
            raise DatabaseError(f"Unexpected database error: {e}")

    return g.mongo_client


def get_db():
    """Get database instance for the current application.

    Raises:
        DatabaseError: If database connection fails
    """
    client = get_mongo_client()
    db_name = current_app.config['MONGO_DB']
    return client[db_name]


def close_db(error: Optional[Exception] = None) -> None:
    """Close database connection if it exists."""
    mongo_client = g.pop('mongo_client', None)

    if mongo_client is not None:
        try:
            mongo_client.close()
            if error:
                logger.warning(f"Database connection closed due to error: {error}")
            else:
                logger.debug("Database connection closed successfully")
        except Exception as e:
            logger.error(f"Error closing database connection: {e}")


def init_app(app) -> None:
    """Register the teardown handler and make sure indexes exist.

    Startup does not fail when the database is temporarily unavailable;
    requests will surface the error instead.
    """
    app.teardown_appcontext(close_db)

    with app.app_context():
        try:
            get_db()
            ensure_indexes()
        except DatabaseError as e:
            logger.error(f"Database initialization failed: {e}")


def health_check() -> dict:
    """Perform database health check."""
    try:
        client = get_mongo_client()
        client.admin.command('ping')
        server_info = client.server_info()
        return {
            'status': 'healthy',
            'database': current_app.config['MONGO_DB'],
            'server_version': server_info.get('version', 'unknown'),
            'message': 'Database connection is operational'
        }

    except DatabaseError as e:
        return {
            'status': 'unhealthy',
            'error': str(e),
            'message': 'Database connection failed'
        }
    except Exception as e:
        logger.error(f"Health check failed with unexpected error: {e}")
        return {
            'status': 'unhealthy',
            'error': f"Unexpected error: {str(e)}",
            'message': 'Database health check failed'
        }


def ensure_indexes() -> bool:
    """Ensure all required indexes are created.

    The unique index on ``participants.code`` is what guarantees that no two
    registrations share a code, independent of how the code was generated.
    """
    try:
        db = get_db()

        participants = db[PARTICIPANTS_COLLECTION]
        participants.create_index([('code', 1)], unique=True)
        participants.create_index([('email', 1)])
        participants.create_index([('deletedAt', 1)])

        files = db[LOADED_FILES_COLLECTION]
        files.create_index([('participantCode', 1)])
        files.create_index([('createdAt', -1)])

        logger.info("Database indexes created/verified successfully")
        return True

    except Exception as e:
        logger.error(f"Failed to create indexes: {e}")
        return False
