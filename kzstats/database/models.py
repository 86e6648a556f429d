from sqlalchemy import (
    Column, Integer, SmallInteger, String, DateTime, Boolean, Float, BigInteger,
    ForeignKey, Index, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

# Tables are populated by the ingestion tooling; this service only reads them.

class Player(Base):
    __tablename__ = 'players'

    id = Column(BigInteger, primary_key=True, autoincrement=False)  # account id
    name = Column(String(255), nullable=False, default='unknown', index=True)
    is_banned = Column(Boolean, nullable=False, default=False)

    records = relationship("Record", back_populates="player")

    def __repr__(self):
        return f"<Player(id={self.id}, name='{self.name}', banned={self.is_banned})>"

class GameMode(Base):
    __tablename__ = 'modes'

    id = Column(SmallInteger, primary_key=True, autoincrement=False)
    name = Column(String(32), nullable=False, unique=True)
    created_on = Column(DateTime, nullable=False, default=func.now())

    def __repr__(self):
        return f"<GameMode(id={self.id}, name='{self.name}')>"

class Map(Base):
    __tablename__ = 'maps'

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False, unique=True)
    courses = Column(SmallInteger, nullable=False, default=1)  # number of stages
    validated = Column(Boolean, nullable=False, default=False)
    filesize = Column(BigInteger, nullable=False, default=0)
    created_by = Column(BigInteger, ForeignKey('players.id'), nullable=False)
    approved_by = Column(BigInteger, ForeignKey('players.id'), nullable=False)

    # Metadata
    created_on = Column(DateTime, nullable=False, default=func.now())
    updated_on = Column(DateTime, nullable=False, default=func.now())

    # Relationships
    course_list = relationship("Course", back_populates="map", order_by="Course.stage")
    mapper = relationship("Player", foreign_keys=[created_by])
    approver = relationship("Player", foreign_keys=[approved_by])

    def __repr__(self):
        return f"<Map(id={self.id}, name='{self.name}')>"

class Course(Base):
    __tablename__ = 'courses'

    id = Column(Integer, primary_key=True, autoincrement=False)  # map_id * 100 + stage
    map_id = Column(Integer, ForeignKey('maps.id'), nullable=False, index=True)
    stage = Column(SmallInteger, nullable=False, default=0)

    # Per-mode availability and difficulty (1-7)
    kzt = Column(Boolean, nullable=False, default=True)
    kzt_difficulty = Column(SmallInteger, nullable=False, default=1)
    skz = Column(Boolean, nullable=False, default=False)
    skz_difficulty = Column(SmallInteger, nullable=False, default=1)
    vnl = Column(Boolean, nullable=False, default=False)
    vnl_difficulty = Column(SmallInteger, nullable=False, default=1)

    map = relationship("Map", back_populates="course_list")

    __table_args__ = (UniqueConstraint('map_id', 'stage'),)

    def __repr__(self):
        return f"<Course(id={self.id}, map_id={self.map_id}, stage={self.stage})>"

class Server(Base):
    __tablename__ = 'servers'

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False, index=True)
    owned_by = Column(BigInteger, ForeignKey('players.id'), nullable=False)
    approved_by = Column(BigInteger, ForeignKey('players.id'), nullable=False)

    owner = relationship("Player", foreign_keys=[owned_by])
    approver = relationship("Player", foreign_keys=[approved_by])

    def __repr__(self):
        return f"<Server(id={self.id}, name='{self.name}')>"

class Record(Base):
    __tablename__ = 'records'

    id = Column(Integer, primary_key=True, autoincrement=False)
    course_id = Column(Integer, ForeignKey('courses.id'), nullable=False)
    mode_id = Column(SmallInteger, ForeignKey('modes.id'), nullable=False)
    player_id = Column(BigInteger, ForeignKey('players.id'), nullable=False)
    server_id = Column(Integer, ForeignKey('servers.id'), nullable=False)
    time = Column(Float, nullable=False)  # seconds
    teleports = Column(Integer, nullable=False, default=0)  # 0 = pro run
    created_on = Column(DateTime, nullable=False, default=func.now())

    player = relationship("Player", back_populates="records")
    course = relationship("Course")

    __table_args__ = (
        Index('ix_records_course_mode_player', 'course_id', 'mode_id', 'player_id'),
        Index('ix_records_player_id', 'player_id'),
        Index('ix_records_server_id', 'server_id'),
        Index('ix_records_time', 'time'),
        Index('ix_records_created_on', 'created_on'),
    )

    def __repr__(self):
        return f"<Record(id={self.id}, player_id={self.player_id}, time={self.time}, tp={self.teleports})>"
