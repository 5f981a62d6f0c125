import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, Date, DECIMAL, Float, CheckConstraint
from sqlalchemy.dialects import postgresql
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.schema import CreateTable
from sqlalchemy.sql import func

from iwems.entities import ApprovalStatus, BookingStatus, EventStatus, InquiryStatus, Role

Base = declarative_base()


def _in_check(column: str, enum_cls, name: str) -> CheckConstraint:
    allowed = ", ".join(f"'{member.value}'" for member in enum_cls)
    return CheckConstraint(f"{column} IN ({allowed})", name=name)


class UserRole(Base):
    __tablename__ = 'user_roles'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # References auth.users(id); one role per user.
    user_id = Column(UUID(as_uuid=True), unique=True, nullable=False)
    role = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (_in_check("role", Role, "ck_user_roles_role"),)

    def __repr__(self):
        return f"<UserRole(user_id='{self.user_id}', role='{self.role}')>"


class Event(Base):
    __tablename__ = 'events'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    couple_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    event_date = Column(Date, nullable=False)
    venue_location = Column(Text)
    budget = Column(DECIMAL(12, 2))
    guest_count = Column(Integer)
    status = Column(String(32), nullable=False, server_default=EventStatus.PLANNING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    vendor_inquiries = relationship("VendorInquiry", back_populates="event")
    booking_requests = relationship("BookingRequest", back_populates="event")

    __table_args__ = (_in_check("status", EventStatus, "ck_events_status"),)

    def __repr__(self):
        return f"<Event(id='{self.id}', title='{self.title}')>"


class Vendor(Base):
    __tablename__ = 'vendors'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(UUID(as_uuid=True))
    business_name = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(64), nullable=False)
    location = Column(Text)
    price_range = Column(String(8))
    rating = Column(Float)
    review_count = Column(Integer, server_default="0")
    approval_status = Column(String(16), nullable=False, server_default=ApprovalStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    inquiries = relationship("VendorInquiry", back_populates="vendor")

    __table_args__ = (_in_check("approval_status", ApprovalStatus, "ck_vendors_approval_status"),)


class Venue(Base):
    __tablename__ = 'venues'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    manager_id = Column(UUID(as_uuid=True))
    name = Column(String(255), nullable=False)
    description = Column(Text)
    location = Column(Text, nullable=False)
    capacity = Column(Integer)
    price_per_day = Column(DECIMAL(12, 2))
    rating = Column(Float)
    review_count = Column(Integer, server_default="0")
    approval_status = Column(String(16), nullable=False, server_default=ApprovalStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    booking_requests = relationship("BookingRequest", back_populates="venue")

    __table_args__ = (_in_check("approval_status", ApprovalStatus, "ck_venues_approval_status"),)


class VendorInquiry(Base):
    __tablename__ = 'vendor_inquiries'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    vendor_id = Column(UUID(as_uuid=True), ForeignKey('vendors.id', ondelete='CASCADE'), nullable=False)
    event_id = Column(UUID(as_uuid=True), ForeignKey('events.id', ondelete='CASCADE'), nullable=False)
    inquirer_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    message = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, server_default=InquiryStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    vendor = relationship("Vendor", back_populates="inquiries")
    event = relationship("Event", back_populates="vendor_inquiries")

    __table_args__ = (
        _in_check("status", InquiryStatus, "ck_vendor_inquiries_status"),
        CheckConstraint("length(trim(message)) > 0", name="ck_vendor_inquiries_message"),
    )


class BookingRequest(Base):
    __tablename__ = 'booking_requests'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    venue_id = Column(UUID(as_uuid=True), ForeignKey('venues.id', ondelete='CASCADE'), nullable=False)
    event_id = Column(UUID(as_uuid=True), ForeignKey('events.id', ondelete='CASCADE'), nullable=False)
    requester_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    request_date = Column(Date, nullable=False)
    guest_count = Column(Integer, nullable=False)
    message = Column(Text)
    status = Column(String(16), nullable=False, server_default=BookingStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    venue = relationship("Venue", back_populates="booking_requests")
    event = relationship("Event", back_populates="booking_requests")

    __table_args__ = (
        _in_check("status", BookingStatus, "ck_booking_requests_status"),
        CheckConstraint("guest_count > 0", name="ck_booking_requests_guest_count"),
    )


def render_schema_ddl() -> str:
    """Returns PostgreSQL DDL for every table, in dependency order."""
    dialect = postgresql.dialect()
    statements = [
        str(CreateTable(table).compile(dialect=dialect)).strip() + ";"
        for table in Base.metadata.sorted_tables
    ]
    return "\n\n".join(statements)


def main():
    """Prints the schema so it can be piped into `psql` or the Supabase SQL editor."""
    print(render_schema_ddl())


if __name__ == "__main__":
    main()
