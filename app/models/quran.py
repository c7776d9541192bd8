"""Quran text models"""
from sqlalchemy import Column, Integer, String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base


class Surah(Base):
    """Surah metadata, id is the surah number (1..114)"""

    __tablename__ = "surahs"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False)  # Arabic name
    english_name = Column(String(255), nullable=False)
    number_of_ayahs = Column(Integer, nullable=False)
    revelation_type = Column(String(20), nullable=False)  # Meccan, Medinan

    # Relationships
    ayahs = relationship(
        "Ayah",
        back_populates="surah",
        cascade="all, delete-orphan",
        order_by="Ayah.number_in_surah",
    )

    def __repr__(self):
        return f"<Surah(id={self.id}, english_name={self.english_name})>"


class Ayah(Base):
    """Single verse; id is the global ayah number"""

    __tablename__ = "ayahs"
    __table_args__ = (UniqueConstraint("surah_id", "number_in_surah", name="uq_ayah_surah_number"),)

    id = Column(Integer, primary_key=True, autoincrement=False)
    surah_id = Column(Integer, ForeignKey("surahs.id", ondelete="CASCADE"), nullable=False, index=True)
    number_in_surah = Column(Integer, nullable=False)
    juz = Column(Integer, nullable=True)
    page = Column(Integer, nullable=True)

    text_arabic = Column(Text, nullable=False)
    text_latin = Column(Text, nullable=True)
    text_translation = Column(Text, nullable=True)  # Indonesian

    # Relationships
    surah = relationship("Surah", back_populates="ayahs")
