from .custom_field import CustomFieldDefinition, CustomFieldValue, FieldType
from .ticket import Ticket, TicketPriority, TicketStatus
from .ticket_category import TicketCategory, TicketSubcategory
from .ticket_history import TicketHistory, TicketHistoryAction
from .ticket_note import TicketNote
from .user import STAFF_ROLES, User, UserRole

__all__ = [
    "CustomFieldDefinition",
    "CustomFieldValue",
    "FieldType",
    "STAFF_ROLES",
    "Ticket",
    "TicketCategory",
    "TicketHistory",
    "TicketHistoryAction",
    "TicketNote",
    "TicketPriority",
    "TicketStatus",
    "TicketSubcategory",
    "User",
    "UserRole",
]
