from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class SanityCheckCategory(Base):
    __tablename__ = "sanity_check_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True)

    sanity_checks: Mapped[list["SanityCheck"]] = relationship(back_populates="category")


class SanityCheck(Base):
    __tablename__ = "sanity_checks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sanity_check_category_id: Mapped[int] = mapped_column(ForeignKey("sanity_check_categories.id"), index=True)
    topic: Mapped[str] = mapped_column(String(255))
    comments: Mapped[str | None] = mapped_column(String(255), nullable=True)
    query: Mapped[str] = mapped_column(Text)

    category: Mapped[SanityCheckCategory] = relationship(back_populates="sanity_checks")
    exclusions: Mapped[list["SanityCheckExclusion"]] = relationship(
        back_populates="sanity_check",
        cascade="all, delete-orphan",
        order_by="SanityCheckExclusion.id",
    )


class SanityCheckExclusion(Base):
    __tablename__ = "sanity_check_exclusions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sanity_check_id: Mapped[int] = mapped_column(ForeignKey("sanity_checks.id", ondelete="CASCADE"), index=True)
    exclusion: Mapped[str] = mapped_column(Text)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    sanity_check: Mapped[SanityCheck] = relationship(back_populates="exclusions")
