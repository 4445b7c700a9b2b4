from .report import DashboardStats, ReportFilters, TicketReport
from .ticket import (
    CustomFieldInput,
    TicketCreate,
    TicketCreated,
    TicketHistoryRead,
    TicketNoteCreate,
    TicketNoteRead,
    TicketRead,
    TicketUpdate,
)
from .ticket_meta import (
    CustomFieldCreate,
    CustomFieldRead,
    CustomFieldUpdate,
    TicketCategoryCreate,
    TicketCategoryRead,
    TicketCategoryUpdate,
    TicketSubcategoryCreate,
    TicketSubcategoryRead,
    TicketSubcategoryUpdate,
)
from .user import (
    LoginResponse,
    UserCreate,
    UserLogin,
    UserRead,
    UserRegister,
    UserUpdate,
)

__all__ = [
    "CustomFieldCreate",
    "CustomFieldInput",
    "CustomFieldRead",
    "CustomFieldUpdate",
    "DashboardStats",
    "LoginResponse",
    "ReportFilters",
    "TicketCategoryCreate",
    "TicketCategoryRead",
    "TicketCategoryUpdate",
    "TicketCreate",
    "TicketCreated",
    "TicketHistoryRead",
    "TicketNoteCreate",
    "TicketNoteRead",
    "TicketRead",
    "TicketReport",
    "TicketSubcategoryCreate",
    "TicketSubcategoryRead",
    "TicketSubcategoryUpdate",
    "TicketUpdate",
    "UserCreate",
    "UserLogin",
    "UserRead",
    "UserRegister",
    "UserUpdate",
]
