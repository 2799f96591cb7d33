from sqlalchemy import String, Text, DateTime, Float, Boolean, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from supplywatch.config import COLLECTION_NAME
from supplywatch.database import Base


class ArticleORM(Base):
    __tablename__ = COLLECTION_NAME

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    disruption_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    published_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    radius: Mapped[float | None] = mapped_column(Float, nullable=True)
    severity: Mapped[str | None] = mapped_column(String(20), nullable=True)
    raw_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    text: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    isdeleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("url", name=f"uq_{COLLECTION_NAME}_url"),
        Index(f"ix_{COLLECTION_NAME}_published_date", "published_date"),
        Index(f"ix_{COLLECTION_NAME}_disruption_type", "disruption_type"),
    )
