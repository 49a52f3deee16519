"""Database models and utilities."""

from .models import CategoryTable, ClientTable, TechnicianTable, TicketTable

__all__ = [
    "CategoryTable",
    "ClientTable",
    "TechnicianTable",
    "TicketTable",
]
