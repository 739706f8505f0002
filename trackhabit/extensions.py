"""
Initialize Flask extensions for the application.

These extensions are instantiated here and initialized in the application factory.
"""

from flask_apscheduler import APScheduler

# Scheduler for periodic backups
scheduler = APScheduler()

def init_extensions(app):
    """Initialize all Flask extensions."""
    scheduler.init_app(app)
