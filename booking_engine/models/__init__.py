# Import all models so that SQLAlchemy registers them for metadata.create_all
from booking_engine.models.resource import Resource
from booking_engine.models.working_hours import WorkingHoursRule
from booking_engine.models.resource_exception import ResourceException
from booking_engine.models.external_event import ExternalEvent
from booking_engine.models.hold import Hold
from booking_engine.models.booking import Booking
from booking_engine.models.audit_log import AuditLog

__all__ = [
    "Resource",
    "WorkingHoursRule",
    "ResourceException",
    "ExternalEvent",
    "Hold",
    "Booking",
    "AuditLog",
]
