from eventbook.schemas.booking import BookingCreate, BookingRead

__all__ = ["BookingCreate", "BookingRead"]
