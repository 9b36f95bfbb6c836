"""
Database access

One MongoClient per process, wrapped in ResortDatabase. The app builds it once
at startup and hands it to every route through a FastAPI dependency.

Collections:
- hotelData    -> hotel records (read-only here)
- users        -> registered users
- hotelList    -> curated hotel list
- earningList  -> earnings entries
- propertyData -> submitted properties
- userInfo     -> user info (read-only here)
"""

import logging
import os
from typing import Any, Dict, List, Optional
from urllib.parse import quote_plus

from bson import ObjectId
from dotenv import load_dotenv
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_NAME = "marriottResort"
DEFAULT_DB_USER = "marriottResort"
DEFAULT_DB_HOST = "cluster0.sju0f.mongodb.net"

HOTEL_DATA = "hotelData"
USERS = "users"
HOTEL_LIST = "hotelList"
EARNING_LIST = "earningList"
PROPERTY_DATA = "propertyData"
USER_INFO = "userInfo"


class ConfigurationError(RuntimeError):
    pass


def get_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    password = os.getenv("DB_PASS")
    if not password:
        raise ConfigurationError("DATABASE_URL or DB_PASS must be set")
    user = os.getenv("DB_USER", DEFAULT_DB_USER)
    host = os.getenv("DB_HOST", DEFAULT_DB_HOST)
    return (
        f"mongodb+srv://{quote_plus(user)}:{quote_plus(password)}@{host}/"
        "?retryWrites=true&w=majority&appName=Cluster0"
    )


def get_database_name() -> str:
    return os.getenv("DATABASE_NAME", DEFAULT_DATABASE_NAME)


class ResortDatabase:
    """Thin wrapper over a pymongo Database holding the resort collections."""

    def __init__(self, db, client=None):
        self.db = db
        self.client = client

    @property
    def name(self) -> str:
        return self.db.name

    def ping(self):
        return self.db.client.admin.command("ping")

    def ensure_indexes(self):
        # At most one user per email; inserts racing past the lookup hit this index.
        try:
            self.db[USERS].create_index("email", unique=True)
        except PyMongoError as e:
            logger.warning("Could not build unique index on %s.email: %s", USERS, e)

    def list_collection_names(self) -> List[str]:
        return self.db.list_collection_names()

    def get_documents(self, collection_name: str) -> List[Dict[str, Any]]:
        return list(self.db[collection_name].find())

    def create_document(self, collection_name: str, data: Dict[str, Any]) -> str:
        doc = dict(data)
        result = self.db[collection_name].insert_one(doc)
        return str(result.inserted_id)

    def find_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.db[USERS].find_one({"email": email})

    def set_user_admin(self, user_id: ObjectId, is_admin: bool) -> int:
        result = self.db[USERS].update_one({"_id": user_id}, {"$set": {"isAdmin": is_admin}})
        return result.matched_count

    def close(self):
        if self.client is not None:
            self.client.close()


def connect() -> ResortDatabase:
    client = MongoClient(
        get_database_url(),
        server_api=ServerApi("1", strict=True, deprecation_errors=True),
        tz_aware=True,
    )
    return ResortDatabase(client[get_database_name()], client=client)
