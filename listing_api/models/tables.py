from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, Text, func, text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata

ROLES = ("user", "agent", "admin")

# Largest value an INTEGER primary key can hold (signed 64-bit)
MAX_ROW_ID = 2**63 - 1


class Users(Base):
    __tablename__ = 'users'
    __table_args__ = (
        CheckConstraint(
            "role IN (" + ", ".join(f"'{r}'" for r in ROLES) + ")",
            name='ck_users_role',
        ),
    )

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True)
    role = Column(Text, nullable=False, server_default=text("'user'"))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    created_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    properties = relationship('Properties', back_populates='agent')


class Properties(Base):
    __tablename__ = 'properties'

    id = Column(Integer, primary_key=True)
    title = Column(Text, nullable=False)
    agent_id = Column(ForeignKey('users.id'), nullable=False)
    is_deleted = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    agent = relationship('Users', back_populates='properties')
    visits = relationship('Visits', back_populates='property')


class Visits(Base):
    __tablename__ = 'visits'
    __table_args__ = (
        # One open request per visitor and property
        Index(
            'uq_visits_pending_visitor',
            'property_id', 'visitor_id',
            unique=True,
            sqlite_where=text("status = 'pending' AND is_deleted = 0"),
            postgresql_where=text("status = 'pending' AND is_deleted = 0"),
        ),
        # One active booking per exact start slot
        Index(
            'uq_visits_active_slot',
            'property_id', 'visit_date', 'visit_time',
            unique=True,
            sqlite_where=text("status IN ('pending', 'approved') AND is_deleted = 0"),
            postgresql_where=text("status IN ('pending', 'approved') AND is_deleted = 0"),
        ),
        Index('ix_visits_property_date', 'property_id', 'visit_date'),
    )

    id = Column(Integer, primary_key=True)
    property_id = Column(ForeignKey('properties.id'), nullable=False)
    agent_id = Column(ForeignKey('users.id'), nullable=False)
    visitor_id = Column(ForeignKey('users.id'), nullable=False)
    visit_date = Column(Date, nullable=False)
    visit_time = Column(Text, nullable=False)  # "HH:MM"
    duration_minutes = Column(Integer, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    notes = Column(Text)
    cancellation_reason = Column(Text)
    is_deleted = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(
        DateTime,
        nullable=False,
        server_default=text('CURRENT_TIMESTAMP'),
        onupdate=func.now(),
    )

    property = relationship('Properties', back_populates='visits')
    agent = relationship('Users', foreign_keys=[agent_id])
    visitor = relationship('Users', foreign_keys=[visitor_id])
