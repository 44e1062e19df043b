"""Database models and connection management."""
from typing import Optional, List, Dict, Any
from sqlalchemy import create_engine, Column, Integer, String, Text, func
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.exc import SQLAlchemyError
import logging
import json

from .models import Job
from .normalize import remuneration_bounds

logger = logging.getLogger(__name__)

Base = declarative_base()


class QueryError(Exception):
    """An ad hoc query was rejected or failed."""


class JobModel(Base):
    """SQLAlchemy model for job listings.

    ``tags`` holds a JSON array. ``rem_lower`` and ``rem_upper`` are the
    remuneration bounds in thousands, derived from ``remuneration``.
    """
    __tablename__ = 'jobs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False, index=True)
    company = Column(String(255), nullable=False, default='', index=True)
    date_posted = Column(String(32), nullable=False, default='', index=True)
    location = Column(String(255), nullable=False, default='')
    remuneration = Column(String(64), nullable=False, default='')
    tags = Column(Text, nullable=False, default='[]')
    apply = Column(String(1024), nullable=False, default='')
    site = Column(String(50), nullable=False, index=True)
    rem_lower = Column(Integer, nullable=True)
    rem_upper = Column(Integer, nullable=True)


class Database:
    """Database connection and operation manager."""

    def __init__(self, db_url: str = "sqlite:///jobs.db", echo: bool = False):
        """Initialize database connection.

        Args:
            db_url: Database connection URL
            echo: Log every SQL statement
        """
        self.engine = create_engine(db_url, echo=echo)
        self.Session = sessionmaker(bind=self.engine)
        self._create_tables()

    def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        Base.metadata.create_all(self.engine)

    def replace_jobs(self, jobs: List[Job]) -> int:
        """Replace the contents of the jobs table in a single transaction.

        Args:
            jobs: Jobs to store

        Returns:
            int: Number of jobs stored

        Raises:
            SQLAlchemyError: If the transaction fails; the previous contents
                are kept
        """
        with self.Session() as session:
            try:
                deleted = session.query(JobModel).delete()
                session.add_all([self._to_model(job) for job in jobs])
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Error replacing jobs in database: {str(e)}")
                raise

        logger.info(f"Replaced {deleted} jobs with {len(jobs)} jobs")
        return len(jobs)

    def query(self, sql: str) -> List[Dict[str, Any]]:
        """Run a read-only query.

        Args:
            sql: A single SELECT statement

        Returns:
            List of rows as dictionaries; a ``tags`` column is decoded to a list

        Raises:
            QueryError: If the statement is not a SELECT or fails
        """
        statement = sql.strip().rstrip(';')
        if not statement.lower().startswith('select'):
            raise QueryError(f"Only SELECT queries are allowed: {sql!r}")

        try:
            with self.engine.connect() as conn:
                result = conn.exec_driver_sql(statement)
                rows = [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            logger.debug(f"Query failed: {statement!r}")
            raise QueryError(str(e.orig) if getattr(e, 'orig', None) else str(e)) from e

        for row in rows:
            if isinstance(row.get('tags'), str):
                try:
                    row['tags'] = json.loads(row['tags'])
                except json.JSONDecodeError:
                    logger.warning(f"Invalid tags JSON in row {row.get('id')}")
        return rows

    def search_jobs(self, filters: Optional[Dict[str, Any]] = None, limit: int = 100) -> List[Job]:
        """Search for jobs matching criteria.

        Args:
            filters: Dictionary of filter criteria (title, company, site,
                location, min_remuneration in thousands)
            limit: Maximum number of results to return

        Returns:
            List[Job]: Matching jobs, most recent first
        """
        with self.Session() as session:
            query = session.query(JobModel)
            query = self._apply_filters(query, filters or {})
            models = query.order_by(JobModel.date_posted.desc(), JobModel.id).limit(limit).all()
            return [self._from_model(model) for model in models]

    def count_jobs(self) -> int:
        """Count stored jobs."""
        with self.Session() as session:
            return session.query(func.count(JobModel.id)).scalar() or 0

    def _apply_filters(self, query, filters: Dict[str, Any]):
        """Apply filters to a query.

        Args:
            query: SQLAlchemy query object
            filters: Dictionary of filter criteria

        Returns:
            SQLAlchemy query with filters applied
        """
        if filters.get('title'):
            query = query.filter(JobModel.title.ilike(f"%{filters['title']}%"))
        if filters.get('company'):
            query = query.filter(JobModel.company.ilike(f"%{filters['company']}%"))
        if filters.get('location'):
            query = query.filter(JobModel.location.ilike(f"%{filters['location']}%"))
        if filters.get('site'):
            query = query.filter(JobModel.site == filters['site'])
        if filters.get('min_remuneration'):
            query = query.filter(JobModel.rem_upper >= filters['min_remuneration'])
        return query

    @staticmethod
    def _to_model(job: Job) -> JobModel:
        rem_lower, rem_upper = remuneration_bounds(job.remuneration)
        return JobModel(
            title=job.title,
            company=job.company,
            date_posted=job.date_posted,
            location=job.location,
            remuneration=job.remuneration,
            tags=json.dumps(job.tags),
            apply=job.apply,
            site=job.site.value,
            rem_lower=rem_lower,
            rem_upper=rem_upper,
        )

    @staticmethod
    def _from_model(model: JobModel) -> Job:
        return Job(
            title=model.title,
            company=model.company,
            date_posted=model.date_posted,
            site=model.site,
            location=model.location,
            remuneration=model.remuneration,
            tags=json.loads(model.tags or '[]'),
            apply=model.apply,
        )
