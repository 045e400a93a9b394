from sqlalchemy import Column, ForeignKey, Text
from sqlalchemy.orm import relationship
from docverify.database import Base


class Area(Base):
    __tablename__ = "areas"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)

    households = relationship("Household", back_populates="area")


class Household(Base):
    __tablename__ = "households"

    id = Column(Text, primary_key=True)
    area_id = Column(Text, ForeignKey("areas.id"), nullable=False)
    label = Column(Text)

    area = relationship("Area", back_populates="households")
    members = relationship("Member", back_populates="household")


class Member(Base):
    __tablename__ = "members"

    id = Column(Text, primary_key=True)
    household_id = Column(Text, ForeignKey("households.id"), nullable=False)
    name = Column(Text, nullable=False)

    household = relationship("Household", back_populates="members")
    documents = relationship("Document", back_populates="owner")
