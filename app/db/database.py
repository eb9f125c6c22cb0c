"""
SQLAlchemy database setup and ORM models.
"""

from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

from app.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def make_engine(url: str, echo: bool = False, **kwargs) -> Engine:
    """Create an engine; SQLite connections are shared with worker threads."""
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo, pool_pre_ping=True, **kwargs)

    sqlite_engine = create_engine(
        url, echo=echo, connect_args={"check_same_thread": False}, **kwargs
    )

    # pysqlite manages BEGIN itself and breaks SAVEPOINTs; let SQLAlchemy emit it.
    # IMMEDIATE takes the write lock up front, so concurrent writers queue on the
    # busy timeout instead of failing when a read lock cannot be upgraded.
    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return sqlite_engine


engine = make_engine(settings.database_url, echo=settings.database_echo)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


class IngredientRecord(Base):
    __tablename__ = "ingredients"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    # lower-cased, whitespace-collapsed name; the catalog's uniqueness key
    name_normalized = Column(String, nullable=False, unique=True, index=True)
    category = Column(String, nullable=False, default="other")
    common_units = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class RecipeRecord(Base):
    __tablename__ = "recipes"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    instructions = Column(Text, nullable=False)
    prep_time = Column(Integer, nullable=False)
    cook_time = Column(Integer, nullable=False)
    servings = Column(Integer, nullable=False)
    difficulty = Column(String, nullable=False, default="easy")
    cuisine = Column(String)
    tags = Column(JSON, nullable=False, default=list)
    nutritional_info = Column(JSON, nullable=False)
    is_ai_generated = Column(Boolean, nullable=False, default=False)
    ai_prompt = Column(Text)
    created_by = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    recipe_ingredients = relationship(
        "RecipeIngredientRecord",
        back_populates="recipe",
        order_by="RecipeIngredientRecord.id",
    )


class RecipeIngredientRecord(Base):
    __tablename__ = "recipe_ingredients"
    id = Column(Integer, primary_key=True, autoincrement=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    ingredient_id = Column(Integer, ForeignKey("ingredients.id"), nullable=False)
    quantity = Column(Float)
    unit = Column(String)
    optional = Column(Boolean, nullable=False, default=False)
    substitutions = Column(JSON, nullable=False, default=list)
    recipe = relationship("RecipeRecord", back_populates="recipe_ingredients")
    ingredient = relationship("IngredientRecord")


class FavoriteRecipeRecord(Base):
    __tablename__ = "favorite_recipes"
    __table_args__ = (UniqueConstraint("user_id", "recipe_id", name="uq_favorite_user_recipe"),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


def init_db(bind: Engine = engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=bind)


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a session that is always closed."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
