"""
Database adapter for the marketplace schema.

Tests run against SQLite, production against Postgres (the Supabase project's
database), both through SQLAlchemy. The adapter offers two interfaces:

- table(): a Supabase-style query builder for simple reads and single-row writes
- transaction(): a SQLAlchemy session whose work commits or rolls back as a unit,
  used by every workflow that changes status and points together
"""
from contextlib import contextmanager
from decimal import Decimal
from typing import Optional, Dict, List, Any, Union, Iterator
from sqlalchemy import (
    create_engine, event, Column, String, Integer, Boolean, DateTime, Text, Numeric, UUID, UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from datetime import datetime, UTC
import uuid

Base = declarative_base()


def utcnow_naive():
    """
    Return current UTC time as a naive datetime (tzinfo=None).
    Avoids deprecated datetime.utcnow() while keeping existing schema semantics.
    """
    return datetime.now(UTC).replace(tzinfo=None)


def _uuid_str():
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)  # identity provider user id
    email = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="client")  # 'client', 'seller', 'curator', 'admin'
    email_verified = Column(Boolean, default=False)
    seller_points = Column(Integer, nullable=False, default=0)
    curator_points = Column(Integer, nullable=False, default=0)
    curator_approved = Column(Boolean, default=False)  # only meaningful for role='curator'
    created_at = Column(DateTime, default=utcnow_naive)
    updated_at = Column(DateTime, default=utcnow_naive, onupdate=utcnow_naive)


class Product(Base):
    __tablename__ = "products"

    id = Column(UUID(as_uuid=False), primary_key=True, default=_uuid_str)
    seller_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=False)  # 'ebook', 'ecourse', 'resep_masakan', 'jasa_design', 'software'
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    thumbnail_url = Column(String)
    content_url = Column(String)
    status = Column(String, nullable=False, default="pending")  # 'pending', 'approved', 'rejected'
    review_score = Column(Numeric(4, 2))  # set once by the curation review
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow_naive)
    updated_at = Column(DateTime, default=utcnow_naive, onupdate=utcnow_naive)


class ProductReview(Base):
    __tablename__ = "product_reviews"

    id = Column(UUID(as_uuid=False), primary_key=True, default=_uuid_str)
    product_id = Column(UUID(as_uuid=False), nullable=False, unique=True)  # one curation review per product
    curator_id = Column(String, nullable=False, index=True)
    question1_score = Column(Integer, nullable=False)  # originality
    question2_score = Column(Integer, nullable=False)  # description clarity
    question3_score = Column(Integer, nullable=False)  # thumbnail quality
    question4_score = Column(Integer, nullable=False)  # content quality
    question5_score = Column(Integer, nullable=False)  # information accuracy
    question6_score = Column(Integer, nullable=False)  # uniqueness
    question7_score = Column(Integer, nullable=False)  # sales potential
    question8_score = Column(Integer, nullable=False)  # license and instructions
    total_score = Column(Integer, nullable=False)
    average_score = Column(Numeric(4, 2), nullable=False)
    points_earned = Column(Integer, nullable=False)
    comment = Column(Text)
    created_at = Column(DateTime, default=utcnow_naive)


class CustomerReview(Base):
    __tablename__ = "customer_reviews"
    __table_args__ = (UniqueConstraint("product_id", "customer_id", name="uq_customer_reviews_product_customer"),)

    id = Column(UUID(as_uuid=False), primary_key=True, default=_uuid_str)
    product_id = Column(UUID(as_uuid=False), nullable=False, index=True)
    customer_id = Column(String, nullable=False, index=True)
    rating = Column(Integer, nullable=False)  # 1-5 stars
    comment = Column(Text)
    seller_response = Column(Text)
    seller_response_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow_naive)
    updated_at = Column(DateTime, default=utcnow_naive, onupdate=utcnow_naive)


class Order(Base):
    __tablename__ = "orders"

    id = Column(UUID(as_uuid=False), primary_key=True, default=_uuid_str)
    customer_id = Column(String, nullable=False, index=True)
    product_id = Column(UUID(as_uuid=False), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_status = Column(String, nullable=False, default="pending")  # 'pending', 'completed', 'failed'
    payment_method = Column(String)
    transaction_id = Column(String, unique=True)
    created_at = Column(DateTime, default=utcnow_naive)
    updated_at = Column(DateTime, default=utcnow_naive, onupdate=utcnow_naive)


class RedeemableProduct(Base):
    __tablename__ = "redeemable_products"

    id = Column(UUID(as_uuid=False), primary_key=True, default=_uuid_str)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=False)
    points_cost = Column(Integer, nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    thumbnail_url = Column(String)
    content_url = Column(String)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow_naive)
    updated_at = Column(DateTime, default=utcnow_naive, onupdate=utcnow_naive)


class ProductRedemption(Base):
    __tablename__ = "product_redemptions"

    id = Column(UUID(as_uuid=False), primary_key=True, default=_uuid_str)
    user_id = Column(String, nullable=False, index=True)
    redeemable_product_id = Column(UUID(as_uuid=False), nullable=False)
    points_spent = Column(Integer, nullable=False)
    status = Column(String, default="completed")
    created_at = Column(DateTime, default=utcnow_naive)


class VerificationCode(Base):
    __tablename__ = "verification_codes"

    id = Column(UUID(as_uuid=False), primary_key=True, default=_uuid_str)
    identifier = Column(String, nullable=False, index=True)  # email address
    code = Column(String, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow_naive)


def row_to_dict(obj) -> Dict[str, Any]:
    """Convert a SQLAlchemy model instance to a JSON-friendly dict."""
    result = {}
    for column in obj.__table__.columns:
        value = getattr(obj, column.name)
        # Convert datetime to ISO string
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, Decimal):
            value = float(value)
        result[column.name] = value
    return result


def _use_immediate_transactions(engine):
    """Make every SQLite transaction start with BEGIN IMMEDIATE.

    Writers then queue on the database lock up front instead of upgrading a
    shared lock mid-transaction, which SQLite resolves by failing with
    "database is locked".
    """
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class DatabaseAdapter:
    """
    Database adapter shared by routers and workflow services

    Usage:
        db = DatabaseAdapter(settings)
        db.init()

        # Simple reads and writes
        result = db.table("products").select("*").eq("id", "123").execute()

        # Multi-row atomic changes
        with db.transaction() as session:
            ...
    """

    def __init__(self, settings=None):
        from config import get_settings
        self.settings = settings or get_settings()
        self._initialized = False

        if not self.settings.DATABASE_URL:
            raise ValueError("DATABASE_URL must be set")

        # Remove aiosqlite:// prefix for synchronous engine
        db_url = self.settings.DATABASE_URL.replace("sqlite+aiosqlite://", "sqlite://")
        if db_url.startswith("sqlite"):
            self.backend = "sqlite"
            self.engine = create_engine(
                db_url,
                echo=False,
                connect_args={"check_same_thread": False, "timeout": 30},
            )
            _use_immediate_transactions(self.engine)
        else:
            self.backend = "postgres"
            self.engine = create_engine(db_url, echo=False, pool_pre_ping=True)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)

    @property
    def supports_row_locks(self) -> bool:
        """SELECT ... FOR UPDATE is a no-op on SQLite; IMMEDIATE transactions cover it there."""
        return self.backend != "sqlite"

    def init(self):
        """Initialize database (create tables)"""
        if not self._initialized:
            Base.metadata.create_all(self.engine)
            self._initialized = True

    def cleanup(self):
        """Clean up database (for testing)"""
        Base.metadata.drop_all(self.engine)
        Base.metadata.create_all(self.engine)

    def table(self, table_name: str):
        """Get table interface (compatible with Supabase API)"""
        return Table(table_name, self.Session)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Yield a session whose changes commit together or not at all."""
        with self.Session.begin() as session:
            yield session


class QueryResult:
    """Result of Table.execute(), shaped like a Supabase APIResponse."""

    def __init__(self, data: List[Dict[str, Any]], count: Optional[int] = None):
        self.data = data
        self.count = len(data) if count is None else count


class Table:
    """
    Table interface that mimics the Supabase table API on top of SQLAlchemy

    Each execute() runs in its own short session. Use DatabaseAdapter.transaction()
    when several rows must change together.
    """

    # Map table names to SQLAlchemy models
    MODELS = {
        "users": User,
        "products": Product,
        "product_reviews": ProductReview,
        "customer_reviews": CustomerReview,
        "orders": Order,
        "redeemable_products": RedeemableProduct,
        "product_redemptions": ProductRedemption,
        "verification_codes": VerificationCode,
    }

    def __init__(self, table_name: str, Session):
        self.table_name = table_name
        self.Session = Session
        self.model = self.MODELS.get(table_name)
        self._select_cols = "*"
        self._filters = []
        self._insert_data = None
        self._update_data = None
        self._delete = False
        self._limit_val = None
        self._offset_val = None
        self._order_col = None
        self._order_desc = False

        if not self.model:
            raise ValueError(f"Unknown table: {table_name}")

    def select(self, columns: str = "*"):
        """Select columns"""
        self._select_cols = columns
        return self

    def insert(self, data: Union[Dict, List[Dict]]):
        """Insert data"""
        self._insert_data = data if isinstance(data, list) else [data]
        return self

    def update(self, data: Dict):
        """Update data"""
        self._update_data = data
        return self

    def eq(self, column: str, value: Any):
        """Filter by equality"""
        self._filters.append((column, "==", value))
        return self

    def neq(self, column: str, value: Any):
        """Filter by inequality"""
        self._filters.append((column, "!=", value))
        return self

    def gt(self, column: str, value: Any):
        """Filter by greater than"""
        self._filters.append((column, ">", value))
        return self

    def lt(self, column: str, value: Any):
        """Filter by less than"""
        self._filters.append((column, "<", value))
        return self

    def limit(self, count: int):
        """Limit results"""
        self._limit_val = count
        return self

    def range(self, start: int, end: int):
        """Range-based pagination (Supabase compatible)"""
        self._offset_val = start
        self._limit_val = end - start + 1
        return self

    def in_(self, column: str, values: List[Any]):
        """Filter by inclusion set"""
        self._filters.append((column, "in", values))
        return self

    def order(self, column: str, desc: bool = False):
        """Order results"""
        self._order_col = column
        self._order_desc = desc
        return self

    def delete(self):
        """Delete matching records"""
        self._delete = True
        return self

    def execute(self) -> QueryResult:
        """Execute the query"""
        session = self.Session()

        try:
            # Handle INSERT
            if self._insert_data:
                objects = []
                for item in self._insert_data:
                    obj = self.model(**self._prepare_data(item))
                    session.add(obj)
                    objects.append(obj)
                session.commit()

                # Refresh to get generated values
                for obj in objects:
                    session.refresh(obj)

                return QueryResult([row_to_dict(obj) for obj in objects])

            # Handle UPDATE
            elif self._update_data:
                query = self._apply_filters(session.query(self.model))

                # Get objects before update so we can return them
                objects = query.all()

                prepared_update = self._prepare_data(self._update_data)
                for obj in objects:
                    for key, value in prepared_update.items():
                        setattr(obj, key, value)

                session.commit()

                for obj in objects:
                    session.refresh(obj)

                return QueryResult([row_to_dict(obj) for obj in objects])

            # Handle DELETE
            elif self._delete:
                query = self._apply_filters(session.query(self.model))
                count = query.delete()
                session.commit()
                return QueryResult([], count)

            # Handle SELECT
            else:
                query = self._apply_filters(session.query(self.model))

                if self._order_col:
                    col = getattr(self.model, self._order_col)
                    query = query.order_by(col.desc() if self._order_desc else col)

                if self._offset_val is not None:
                    query = query.offset(self._offset_val)

                if self._limit_val:
                    query = query.limit(self._limit_val)

                return QueryResult([self._project(row_to_dict(obj)) for obj in query.all()])

        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Honor select("a,b") column lists."""
        if self._select_cols.strip() == "*":
            return row
        wanted = [c.strip() for c in self._select_cols.split(",") if c.strip()]
        return {c: row.get(c) for c in wanted}

    def _apply_filters(self, query):
        """Apply filters to query"""
        for column, op, value in self._filters:
            col = getattr(self.model, column)
            if op == "==":
                query = query.filter(col == value)
            elif op == "!=":
                query = query.filter(col != value)
            elif op == ">":
                query = query.filter(col > value)
            elif op == "<":
                query = query.filter(col < value)
            elif op == "in":
                query = query.filter(col.in_(value))
        return query

    def _prepare_data(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Keep only keys that exist on the model."""
        model_columns = {col.name for col in self.model.__table__.columns}
        return {key: value for key, value in item.items() if key in model_columns}
