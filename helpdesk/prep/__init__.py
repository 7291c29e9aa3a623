from .loader import load_tickets, read_tickets_frame, stable_id

__all__ = ["load_tickets", "read_tickets_frame", "stable_id"]
