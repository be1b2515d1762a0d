"""
Conexión a base de datos PostgreSQL (Supabase)

Este módulo centraliza las formas de acceso a la base de datos:
- psycopg2 directo (repositories, raw SQL, transactions)
- Supabase client (user sync)

Both are built from an explicit Settings object instead of module globals so
repositories and services can be constructed against any database in tests.
"""
import logging
import time
from functools import lru_cache

import psycopg2
from fastapi import Depends
from psycopg2.extras import RealDictCursor
from supabase import Client, create_client

from .config import Settings, get_settings
from .errors import BackendUnavailable

logger = logging.getLogger(__name__)


class Database:
    """
    psycopg2 connection factory with retry on connection failures

    Every connection uses RealDictCursor so rows come back as dicts.

    Example:
        conn = db.connect()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM products")
        results = cursor.fetchall()  # Returns list of dicts
        cursor.close()
        conn.close()
    """

    def __init__(
        self,
        database_url: str,
        connect_timeout: int = 10,
        max_retries: int = 3,
        retry_delay: float = 1.0
    ):
        self.database_url = database_url
        self.connect_timeout = connect_timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def connect(self, max_retries: int = None):
        """
        Open a connection, retrying OperationalError with exponential backoff

        Args:
            max_retries: Override for the configured number of attempts

        Returns:
            psycopg2 connection with RealDictCursor

        Raises:
            BackendUnavailable: If all attempts fail
        """
        if not self.database_url:
            raise BackendUnavailable("DATABASE_URL not configured")

        attempts = max_retries or self.max_retries
        last_error = None

        for attempt in range(1, attempts + 1):
            try:
                logger.debug(f"Database connection attempt {attempt}/{attempts}")
                return psycopg2.connect(
                    self.database_url,
                    cursor_factory=RealDictCursor,
                    connect_timeout=self.connect_timeout
                )

            except psycopg2.OperationalError as e:
                last_error = e
                error_msg = str(e)

                if "SSL connection has been closed unexpectedly" in error_msg:
                    logger.warning(f"SSL connection error on attempt {attempt}/{attempts}: {error_msg}")
                else:
                    logger.warning(f"Connection error on attempt {attempt}/{attempts}: {error_msg}")

                if attempt < attempts:
                    delay = self.retry_delay * (2 ** (attempt - 1))
                    logger.info(f"Retrying in {delay:.2f} seconds...")
                    time.sleep(delay)

        logger.error(f"All {attempts} connection attempts failed")
        raise BackendUnavailable() from last_error

    def ping(self) -> float:
        """Run SELECT 1 on a single-attempt connection and return latency in ms"""
        conn = self.connect(max_retries=1)
        cursor = conn.cursor()

        try:
            start = time.time()
            cursor.execute("SELECT 1")
            cursor.fetchone()
            return round((time.time() - start) * 1000, 2)
        finally:
            cursor.close()
            conn.close()


@lru_cache
def _database_for(database_url: str, connect_timeout: int, max_retries: int, retry_delay: float) -> Database:
    return Database(database_url, connect_timeout, max_retries, retry_delay)


def get_database(settings: Settings = Depends(get_settings)) -> Database:
    """FastAPI dependency para obtener el Database configurado"""
    return _database_for(
        settings.DATABASE_URL,
        settings.DB_CONNECT_TIMEOUT,
        settings.DB_MAX_RETRIES,
        settings.DB_RETRY_DELAY
    )


@lru_cache
def _supabase_for(url: str, key: str) -> Client:
    return create_client(url, key)


def get_supabase(settings: Settings = Depends(get_settings)) -> Client:
    """
    FastAPI dependency para obtener cliente de Supabase

    The client is created on first use so the API starts without Supabase
    credentials; only user sync needs them.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise BackendUnavailable("User sync is not configured.")
    return _supabase_for(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
