"""
Environment configuration.

Values come from the process environment, optionally seeded from a local .env file.
"""
import os

from dotenv import load_dotenv

load_dotenv()

# Connection string for the document store, e.g. mongodb://localhost:27017/delivery
MONGO_URI = os.getenv("MONGO_URI")

# Used only when MONGO_URI has no database path
DATABASE_NAME = os.getenv("DATABASE_NAME", "delivery")
