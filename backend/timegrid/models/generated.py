from sqlalchemy import JSON, CheckConstraint, Column, Date, ForeignKey, Integer, Text, UniqueConstraint, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Stores(Base):
    __tablename__ = 'stores'

    shop = Column(Text, nullable=False, unique=True)
    id = Column(Integer, primary_key=True)
    name = Column(Text)
    email = Column(Text)
    domain = Column(Text)
    timezone = Column(Text)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    installed_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    settings = relationship('StoreSettings', back_populates='store', uselist=False)
    employees = relationship('Employees', back_populates='store')
    services = relationship('Services', back_populates='store')
    resource_types = relationship('ResourceTypes', back_populates='store')
    resources = relationship('Resources', back_populates='store')


class StoreSettings(Base):
    __tablename__ = 'store_settings'

    store_id = Column(ForeignKey('stores.id', ondelete='CASCADE'), nullable=False, unique=True)
    id = Column(Integer, primary_key=True)
    working_hours_start = Column(Text, nullable=False, server_default=text("'09:00'"))
    working_hours_end = Column(Text, nullable=False, server_default=text("'17:00'"))
    open_days = Column(Text, nullable=False, server_default=text("'1,2,3,4,5'"))
    use_resources = Column(Integer, nullable=False, server_default=text('0'))
    limit_booking_window = Column(Integer, nullable=False, server_default=text('0'))
    booking_window = Column(Integer, nullable=False, server_default=text('30'))
    limit_appointments = Column(Integer, nullable=False, server_default=text('0'))
    max_appointments_displayed = Column(Integer, nullable=False, server_default=text('10'))

    store = relationship('Stores', back_populates='settings')


class ResourceTypes(Base):
    __tablename__ = 'resource_types'

    store_id = Column(ForeignKey('stores.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    store = relationship('Stores', back_populates='resource_types')
    resources = relationship('Resources', back_populates='resource_type')
    services = relationship('Services', back_populates='resource_type')


class Resources(Base):
    __tablename__ = 'resources'
    __table_args__ = (
        CheckConstraint('quantity >= 1'),
    )

    store_id = Column(ForeignKey('stores.id', ondelete='CASCADE'), nullable=False)
    resource_type_id = Column(ForeignKey('resource_types.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    description = Column(Text)
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    store = relationship('Stores', back_populates='resources')
    resource_type = relationship('ResourceTypes', back_populates='resources')
    bookings = relationship('ResourceBookings', back_populates='resource')


class Services(Base):
    __tablename__ = 'services'
    __table_args__ = (
        UniqueConstraint('store_id', 'product_id', 'variant_id'),
    )

    store_id = Column(ForeignKey('stores.id', ondelete='CASCADE'), nullable=False)
    product_id = Column(Text, nullable=False)
    product_title = Column(Text, nullable=False)
    duration = Column(Integer, nullable=False)
    id = Column(Integer, primary_key=True)
    variant_id = Column(Text)
    variant_title = Column(Text)
    resource_type_id = Column(ForeignKey('resource_types.id', ondelete='SET NULL'))
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    store = relationship('Stores', back_populates='services')
    resource_type = relationship('ResourceTypes', back_populates='services')


class Employees(Base):
    __tablename__ = 'employees'

    store_id = Column(ForeignKey('stores.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    avatar_url = Column(Text)
    service_ids = Column(JSON)  # ["12", "15"]
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    store = relationship('Stores', back_populates='employees')
    schedules = relationship('Schedules', back_populates='employee', cascade='all, delete-orphan')


class Schedules(Base):
    __tablename__ = 'schedules'
    __table_args__ = (
        UniqueConstraint('employee_id', 'date'),
    )

    employee_id = Column(ForeignKey('employees.id', ondelete='CASCADE'), nullable=False)
    date = Column(Date, nullable=False)
    slots = Column(JSON, nullable=False)  # [{"startTime", "endTime", "isAvailable", "bookingId"}]
    id = Column(Integer, primary_key=True)
    updated_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    employee = relationship('Employees', back_populates='schedules')


class ResourceBookings(Base):
    __tablename__ = 'resource_bookings'

    resource_id = Column(ForeignKey('resources.id', ondelete='CASCADE'), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Text, nullable=False)
    end_time = Column(Text, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    id = Column(Integer, primary_key=True)

    resource = relationship('Resources', back_populates='bookings')
