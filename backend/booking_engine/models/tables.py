import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Table,
    Text,
    UniqueConstraint,
    false,
    func,
    text,
    true,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"
    DISPUTED = "DISPUTED"


# Only CANCELED gives the time back; DISPUTED keeps it consumed
OCCUPYING_STATUSES = (
    BookingStatus.PENDING.value,
    BookingStatus.ACCEPTED.value,
    BookingStatus.IN_PROGRESS.value,
    BookingStatus.COMPLETED.value,
    BookingStatus.DISPUTED.value,
)


class Business(Base):
    __tablename__ = 'businesses'

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, nullable=False, index=True)
    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    timezone = Column(Text, nullable=False, server_default=text("'UTC'"))
    accepts_online_booking = Column(Boolean, nullable=False, server_default=true())
    is_active = Column(Boolean, nullable=False, server_default=true())
    min_lead_minutes = Column(Integer)  # NULL = global default
    slot_step_minutes = Column(Integer)  # NULL = global default / service duration
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    hours = relationship('BusinessHours', back_populates='business', cascade='all, delete-orphan')
    employees = relationship('Employee', back_populates='business')
    services = relationship('BusinessService', back_populates='business')


class BusinessHours(Base):
    __tablename__ = 'business_hours'
    __table_args__ = (
        UniqueConstraint('business_id', 'day_of_week'),
    )

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday ... 6 = Saturday
    start_time = Column(Text, nullable=False)  # "HH:MM", business-local
    end_time = Column(Text, nullable=False)
    is_closed = Column(Boolean, nullable=False, server_default=false())

    business = relationship('Business', back_populates='hours')


t_employee_services = Table(
    'employee_services', metadata,
    Column('employee_id', ForeignKey('employees.id', ondelete='CASCADE'), nullable=False),
    Column('business_service_id', ForeignKey('business_services.id', ondelete='CASCADE'), nullable=False),
    UniqueConstraint('employee_id', 'business_service_id'),
)


class Employee(Base):
    __tablename__ = 'employees'

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = Column(Integer)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text)
    phone = Column(Text)
    role = Column(Text)
    bio = Column(Text)
    is_active = Column(Boolean, nullable=False, server_default=true())
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    business = relationship('Business', back_populates='employees')
    availabilities = relationship(
        'EmployeeAvailability',
        back_populates='employee',
        cascade='all, delete-orphan',
        order_by='EmployeeAvailability.day_of_week',
    )
    services = relationship('BusinessService', secondary=t_employee_services, back_populates='employees')
    bookings = relationship('Booking', back_populates='employee')

    @property
    def service_ids(self) -> list[int]:
        return sorted(s.id for s in self.services)


class EmployeeAvailability(Base):
    __tablename__ = 'employee_availabilities'

    id = Column(Integer, primary_key=True)
    employee_id = Column(ForeignKey('employees.id', ondelete='CASCADE'), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)

    employee = relationship('Employee', back_populates='availabilities')


class BusinessService(Base):
    __tablename__ = 'business_services'

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    duration_minutes = Column(Integer, nullable=False)
    price_cents = Column(Integer, nullable=False, server_default=text('0'))
    currency = Column(Text, nullable=False, server_default=text("'EUR'"))
    is_active = Column(Boolean, nullable=False, server_default=true())
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    business = relationship('Business', back_populates='services')
    employees = relationship('Employee', secondary=t_employee_services, back_populates='services')
    bookings = relationship('Booking', back_populates='business_service')


class Booking(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        # Backstop for the commit transaction: one live booking per employee start
        Index(
            'uq_bookings_employee_start_active',
            'employee_id',
            'scheduled_at',
            unique=True,
            sqlite_where=text("status <> 'CANCELED'"),
            postgresql_where=text("status <> 'CANCELED'"),
        ),
        Index('ix_bookings_employee_window', 'employee_id', 'scheduled_at', 'ends_at'),
    )

    id = Column(Integer, primary_key=True)
    business_id = Column(ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False)
    business_service_id = Column(ForeignKey('business_services.id'), nullable=False)
    employee_id = Column(ForeignKey('employees.id', ondelete='CASCADE'), nullable=False)
    requester_id = Column(Integer, nullable=False, index=True)
    provider_id = Column(Integer, nullable=False, index=True)
    scheduled_at = Column(DateTime, nullable=False)  # naive UTC
    ends_at = Column(DateTime, nullable=False)  # naive UTC
    duration_minutes = Column(Integer, nullable=False)
    agreed_price_cents = Column(Integer)
    status = Column(Text, nullable=False, server_default=text("'PENDING'"))
    notes = Column(Text)
    cancel_reason = Column(Text)
    completed_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    business = relationship('Business')
    business_service = relationship('BusinessService', back_populates='bookings')
    employee = relationship('Employee', back_populates='bookings')
