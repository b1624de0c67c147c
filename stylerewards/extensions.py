"""
Flask extensions initialization.
"""
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Database (the Ledger Store)
db = SQLAlchemy()

# Migrations
migrate = Migrate()
