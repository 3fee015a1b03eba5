from orderdesk.models.record import Record

__all__ = ["Record"]
