"""SQLAlchemy models for ledgersync database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    BigInteger,
    String,
    ForeignKey,
    DateTime,
    Date,
    Boolean,
    UniqueConstraint,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Provider(Base):
    """Upstream data source model."""

    __tablename__ = "providers"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    kind = Column(String, nullable=False, default="aggregator")
    is_active = Column(Boolean, default=True, nullable=False)
    scraper_script = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    main_accounts = relationship("MainAccount", back_populates="provider")


class MainAccount(Base):
    """Financial institution relationship model."""

    __tablename__ = "main_accounts"

    id = Column(Integer, primary_key=True)
    label = Column(String, nullable=False)
    provider_id = Column(Integer, ForeignKey("providers.id"), nullable=False)
    external_key = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # NULL external keys never collide, so key-less accounts are unconstrained
    __table_args__ = (
        UniqueConstraint("provider_id", "external_key", name="uq_provider_external_key"),
    )

    # Relationships
    provider = relationship("Provider", back_populates="main_accounts")
    sub_accounts = relationship("SubAccount", back_populates="main_account", cascade="all, delete-orphan")


class SubAccount(Base):
    """Balance bucket model."""

    __tablename__ = "sub_accounts"

    id = Column(Integer, primary_key=True)
    main_account_id = Column(Integer, ForeignKey("main_accounts.id"), nullable=False)
    current_name = Column(String, nullable=False)
    balance = Column(BigInteger, default=0, nullable=False)
    asset_type = Column(String, default="CASH", nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("main_account_id", "current_name", name="uq_main_account_name"),
    )

    # Relationships
    main_account = relationship("MainAccount", back_populates="sub_accounts")
    history = relationship("BalanceHistory", back_populates="sub_account", cascade="all, delete-orphan")
    transactions = relationship("Transaction", back_populates="sub_account")


class BalanceHistory(Base):
    """Daily balance snapshot model."""

    __tablename__ = "balance_history"

    id = Column(Integer, primary_key=True)
    sub_account_id = Column(Integer, ForeignKey("sub_accounts.id"), nullable=False)
    date = Column(DateTime, nullable=False)
    balance = Column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint("sub_account_id", "date", name="uq_sub_account_date"),
    )

    # Relationships
    sub_account = relationship("SubAccount", back_populates="history")


class MainCategory(Base):
    """Top-level category model."""

    __tablename__ = "main_categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)

    # Relationships
    sub_categories = relationship("SubCategory", back_populates="main_category")


class SubCategory(Base):
    """Second-level category model."""

    __tablename__ = "sub_categories"

    id = Column(Integer, primary_key=True)
    main_category_id = Column(Integer, ForeignKey("main_categories.id"), nullable=False)
    name = Column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("main_category_id", "name", name="uq_main_category_name"),
    )

    # Relationships
    main_category = relationship("MainCategory", back_populates="sub_categories")
    rules = relationship("CategoryRule", back_populates="sub_category", cascade="all, delete-orphan")
    transactions = relationship("Transaction", back_populates="sub_category")


class CategoryRule(Base):
    """Keyword classification rule model."""

    __tablename__ = "category_rules"

    id = Column(Integer, primary_key=True)
    keyword = Column(String, nullable=False)
    sub_category_id = Column(Integer, ForeignKey("sub_categories.id"), nullable=False)
    priority = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("keyword", "sub_category_id", name="uq_keyword_sub_category"),
    )

    # Relationships
    sub_category = relationship("SubCategory", back_populates="rules")


class Transaction(Base):
    """Transaction model keyed by its content-derived identity."""

    __tablename__ = "transactions"

    id = Column(String(64), primary_key=True)
    sub_account_id = Column(Integer, ForeignKey("sub_accounts.id"), nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(BigInteger, nullable=False)
    description = Column(String, nullable=False, default="")
    sub_category_id = Column(Integer, ForeignKey("sub_categories.id"), nullable=True)
    is_transfer = Column(Boolean, default=False, nullable=False)
    transfer_id = Column(String, nullable=True)
    linked_transaction_id = Column(String(64), nullable=True)
    imported_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_transactions_date", "date"),
        Index("ix_transactions_description", "description"),
    )

    # Relationships
    sub_account = relationship("SubAccount", back_populates="transactions")
    sub_category = relationship("SubCategory", back_populates="transactions")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
