from .event_checker import EventExistenceChecker

__all__ = ['EventExistenceChecker']
