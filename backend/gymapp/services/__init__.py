from gymapp.services.booking_service import book_session, cancel_booking, list_bookings
from gymapp.services.chat_service import get_history, send_message

__all__ = ["book_session", "cancel_booking", "list_bookings", "get_history", "send_message"]
