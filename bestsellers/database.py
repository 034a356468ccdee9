"""Database layer for list positions, audiences and fetch caching."""
import psycopg2
from psycopg2 import pool
from typing import Optional, List, Dict, Any
from datetime import date, datetime, timedelta
import json
import logging
from bestsellers.models import (
    Book,
    Category,
    BestsellerList,
    DEFAULT_LIST_TITLE,
    UNKNOWN_AUTHOR,
    UNKNOWN_PUBLISHER,
)
from bestsellers.regions import default_audience

logger = logging.getLogger(__name__)


class Database:
    """PostgreSQL database with connection pooling."""

    def __init__(self, connection_string: str, min_conn: int = 1, max_conn: int = 10):
        """
        Initialize database connection pool.

        Args:
            connection_string: PostgreSQL connection string
            min_conn: Minimum connections in pool
            max_conn: Maximum connections in pool
        """
        self.connection_pool = psycopg2.pool.SimpleConnectionPool(
            min_conn,
            max_conn,
            connection_string
        )

        if self.connection_pool:
            logger.info("Database connection pool created successfully")
        else:
            raise Exception("Failed to create connection pool")

    def init_schema(self):
        """Create database tables if they don't exist."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                # One row per book per category per week
                cur.execute("""
                    CREATE TABLE IF NOT EXISTS book_positions (
                        id SERIAL PRIMARY KEY,
                        region VARCHAR(16) NOT NULL,
                        week_date DATE NOT NULL,
                        category TEXT NOT NULL,
                        rank INTEGER NOT NULL,
                        isbn VARCHAR(13) NOT NULL DEFAULT '',
                        title TEXT NOT NULL,
                        author TEXT,
                        publisher TEXT,
                        price VARCHAR(32),
                        list_title TEXT,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        UNIQUE (region, week_date, category, isbn, title)
                    )
                """)

                cur.execute("""
                    CREATE TABLE IF NOT EXISTS book_audiences (
                        region VARCHAR(16) NOT NULL,
                        isbn VARCHAR(13) NOT NULL,
                        audience CHAR(1) NOT NULL,
                        PRIMARY KEY (region, isbn)
                    )
                """)

                cur.execute("""
                    CREATE TABLE IF NOT EXISTS fetch_cache (
                        cache_key VARCHAR(512) PRIMARY KEY,
                        data JSONB NOT NULL,
                        last_fetched TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        expires_at TIMESTAMP NOT NULL
                    )
                """)

                # Indexes for performance
                cur.execute("""
                    CREATE INDEX IF NOT EXISTS idx_positions_isbn_region
                    ON book_positions (isbn, region)
                """)

                cur.execute("""
                    CREATE INDEX IF NOT EXISTS idx_positions_week
                    ON book_positions (region, week_date DESC)
                """)

                cur.execute("""
                    CREATE INDEX IF NOT EXISTS idx_cache_expires
                    ON fetch_cache (expires_at)
                """)

                conn.commit()
                logger.info("Database schema initialized successfully")

        finally:
            self.connection_pool.putconn(conn)

    def save_list(self, bestseller_list: BestsellerList, week_date: date, region: str) -> bool:
        """
        Store one week's positions and default audiences.

        Dropped books carry last week's rank, so they are never stored.

        Args:
            bestseller_list: Parsed or compared list
            week_date: Wednesday the list was published
            region: Region abbreviation

        Returns:
            True if successful, False otherwise
        """
        positions = []
        audiences = []
        for category in bestseller_list.categories:
            for book in category.books:
                if book.was_dropped:
                    continue
                positions.append((
                    region, week_date, category.name, book.rank, book.isbn,
                    book.title, book.author, book.publisher, book.price,
                    bestseller_list.title
                ))
                if book.isbn:
                    audiences.append((region, book.isbn, default_audience(category.name)))

        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.executemany("""
                    INSERT INTO book_positions (
                        region, week_date, category, rank, isbn,
                        title, author, publisher, price, list_title
                    ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    ON CONFLICT (region, week_date, category, isbn, title) DO UPDATE SET
                        rank = EXCLUDED.rank,
                        author = EXCLUDED.author,
                        publisher = EXCLUDED.publisher,
                        price = EXCLUDED.price,
                        list_title = EXCLUDED.list_title
                """, positions)

                # Never overwrite an audience someone assigned by hand
                cur.executemany("""
                    INSERT INTO book_audiences (region, isbn, audience)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (region, isbn) DO NOTHING
                """, audiences)
                conn.commit()
                logger.info(f"Saved {len(positions)} positions for {region} {week_date}")
                return True
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to save list: {e}")
            return False
        finally:
            self.connection_pool.putconn(conn)

    def get_week_list(self, region: str, week_date: date) -> Optional[BestsellerList]:
        """Rebuild a stored week as a list, categories in first-seen order."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    SELECT category, rank, title, author, publisher, isbn, price, list_title
                    FROM book_positions
                    WHERE region = %s AND week_date = %s
                    ORDER BY id
                """, (region, week_date))

                rows = cur.fetchall()
                if not rows:
                    return None

                bestseller_list = BestsellerList(title=rows[0][7] or DEFAULT_LIST_TITLE)
                for category_name, rank, title, author, publisher, isbn, price, _ in rows:
                    category = bestseller_list.get_category(category_name)
                    if category is None:
                        category = Category(name=category_name)
                        bestseller_list.categories.append(category)
                    category.books.append(Book(
                        rank=rank, title=title,
                        author=author or UNKNOWN_AUTHOR,
                        publisher=publisher or UNKNOWN_PUBLISHER,
                        isbn=isbn, price=price or ""
                    ))
                return bestseller_list
        finally:
            self.connection_pool.putconn(conn)

    def get_weeks_on_list(self, isbns: List[str], region: str) -> Dict[str, int]:
        """
        Count distinct weeks each ISBN has been on a region's lists.

        Args:
            isbns: ISBNs to look up
            region: Region abbreviation

        Returns:
            Mapping of ISBN to week count; unknown ISBNs are absent
        """
        if not isbns:
            return {}

        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    SELECT isbn, COUNT(DISTINCT week_date)
                    FROM book_positions
                    WHERE isbn = ANY(%s) AND region = %s
                    GROUP BY isbn
                """, (list(isbns), region))

                result = {isbn: int(count) for isbn, count in cur.fetchall()}
                if len(result) < len(isbns):
                    logger.info(f"Weeks-on-list returned {len(result)} of {len(isbns)} ISBNs")
                return result
        finally:
            self.connection_pool.putconn(conn)

    def get_book_history(self, isbn: str, region: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Get a book's weekly positions, newest first, one row per week.

        Args:
            isbn: Book ISBN
            region: Restrict to one region (optional)

        Returns:
            List of {"date", "position", "category", "region"} dicts
        """
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                if region:
                    cur.execute("""
                        SELECT DISTINCT ON (week_date) week_date, rank, category, region
                        FROM book_positions
                        WHERE isbn = %s AND region = %s
                        ORDER BY week_date DESC, rank
                    """, (isbn, region))
                else:
                    cur.execute("""
                        SELECT DISTINCT ON (week_date) week_date, rank, category, region
                        FROM book_positions
                        WHERE isbn = %s
                        ORDER BY week_date DESC, rank
                    """, (isbn,))

                return [
                    {
                        "date": week_date.isoformat(),
                        "position": rank,
                        "category": category,
                        "region": row_region
                    }
                    for week_date, rank, category, row_region in cur.fetchall()
                ]
        finally:
            self.connection_pool.putconn(conn)

    def cache_get(self, cache_key: str) -> Optional[Dict[str, Any]]:
        """
        Get cached data if not expired.

        Args:
            cache_key: Cache key

        Returns:
            Cached data or None
        """
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    SELECT data
                    FROM fetch_cache
                    WHERE cache_key = %s AND expires_at > CURRENT_TIMESTAMP
                """, (cache_key,))

                row = cur.fetchone()
                if row:
                    logger.info(f"Cache hit: {cache_key}")
                    return row[0]  # JSONB is automatically deserialized

                logger.info(f"Cache miss: {cache_key}")
                return None
        finally:
            self.connection_pool.putconn(conn)

    def cache_set(
        self,
        cache_key: str,
        data: Dict[str, Any],
        ttl_seconds: int = 604800
    ) -> bool:
        """
        Cache data with TTL.

        Args:
            cache_key: Cache key
            data: JSON-serializable data to cache
            ttl_seconds: Time to live in seconds

        Returns:
            True if successful
        """
        conn = self.connection_pool.getconn()
        try:
            expires_at = datetime.now() + timedelta(seconds=ttl_seconds)

            with conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO fetch_cache (cache_key, data, expires_at)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (cache_key) DO UPDATE SET
                        data = EXCLUDED.data,
                        expires_at = EXCLUDED.expires_at,
                        last_fetched = CURRENT_TIMESTAMP
                """, (cache_key, json.dumps(data), expires_at))

                conn.commit()
                logger.info(f"Cached data: {cache_key} (TTL: {ttl_seconds}s)")
                return True
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to cache data: {e}")
            return False
        finally:
            self.connection_pool.putconn(conn)

    def get_stats(self) -> Dict[str, Any]:
        """Get database statistics."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT COUNT(*) FROM book_positions")
                position_count = cur.fetchone()[0]

                cur.execute("SELECT COUNT(DISTINCT (region, week_date)) FROM book_positions")
                week_count = cur.fetchone()[0]

                cur.execute("SELECT COUNT(*) FROM fetch_cache WHERE expires_at > CURRENT_TIMESTAMP")
                cache_count = cur.fetchone()[0]

                cur.execute("SELECT COUNT(*) FROM fetch_cache WHERE expires_at <= CURRENT_TIMESTAMP")
                expired_count = cur.fetchone()[0]

                return {
                    "total_positions": position_count,
                    "stored_weeks": week_count,
                    "cached_entries": cache_count,
                    "expired_cache_entries": expired_count
                }
        finally:
            self.connection_pool.putconn(conn)

    def cleanup_expired_cache(self) -> int:
        """Remove expired cache entries."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    DELETE FROM fetch_cache
                    WHERE expires_at <= CURRENT_TIMESTAMP
                """)
                deleted = cur.rowcount
                conn.commit()
                logger.info(f"Cleaned up {deleted} expired cache entries")
                return deleted
        finally:
            self.connection_pool.putconn(conn)

    def close(self):
        """Close all connections in the pool."""
        if self.connection_pool:
            self.connection_pool.closeall()
            logger.info("Database connection pool closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
