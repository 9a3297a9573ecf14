"""
Mailentine scheduled-notification service.

A Flask API that, when triggered, computes the day number since a
persisted start date and emails the message scheduled for that day.
"""

__version__ = "1.0.0"
