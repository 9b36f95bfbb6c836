import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict

from bson.errors import BSONError, InvalidId
from bson.objectid import ObjectId
from fastapi import Body, Depends, FastAPI, HTTPException, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from database import (
    EARNING_LIST,
    HOTEL_DATA,
    HOTEL_LIST,
    PROPERTY_DATA,
    USER_INFO,
    USERS,
    ResortDatabase,
    connect,
)
from schemas import InsertResult, PropertyCreate, RoleUpdate, UserCreate

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = getattr(app.state, "store", None)
    owned = store is None
    if owned:
        try:
            store = connect()
            store.ping()
            store.ensure_indexes()
        except Exception:
            logger.exception("Could not connect to MongoDB, server not started")
            raise
        app.state.store = store
        logger.info("Connected to MongoDB database %s", store.name)
    yield
    if owned:
        store.close()
        app.state.store = None


app = FastAPI(title="Marriott Resort API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error rendering: every failure body is {"error": message}

@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        where = ".".join(loc) or "body"
        problems.append(f"{where}: {err.get('msg')}")
    return JSONResponse(status_code=400, content={"error": "Invalid request data. " + "; ".join(problems)})


@app.exception_handler(PyMongoError)
@app.exception_handler(BSONError)
@app.exception_handler(OverflowError)
async def database_error(request: Request, exc: Exception):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


def get_store(request: Request) -> ResortDatabase:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=500, detail="Database not configured")
    return store


# Utility to convert Mongo _id to string, ObjectIds nested anywhere included

def serialize_doc(doc):
    doc = dict(doc)
    if doc.get("_id"):
        doc["id"] = str(doc.pop("_id"))
    return jsonable_encoder(doc, custom_encoder={ObjectId: str})


@app.get("/", response_class=PlainTextResponse)
def read_root():
    return "Marriott Resort Server is running"


@app.get("/test")
def test_database(request: Request):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") or os.getenv("DB_PASS") else "❌ Not Set",
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }

    store = getattr(request.app.state, "store", None)
    if store is None:
        response["database"] = "⚠️  Available but not initialized"
        return response

    response["database_name"] = store.name
    try:
        response["collections"] = store.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
        response["connection_status"] = "Connected"
    except PyMongoError as e:
        response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"

    return response


# Hotels

@app.get("/hotel-data")
def list_hotel_data(store: ResortDatabase = Depends(get_store)):
    return [serialize_doc(d) for d in store.get_documents(HOTEL_DATA)]


@app.get("/hotels-list")
def list_hotels(store: ResortDatabase = Depends(get_store)):
    return [serialize_doc(d) for d in store.get_documents(HOTEL_LIST)]


@app.post("/hotels-list", status_code=201, response_model=InsertResult)
def add_hotel(item: Dict[str, Any] = Body(...), store: ResortDatabase = Depends(get_store)):
    hotel_id = store.create_document(HOTEL_LIST, item)
    return InsertResult(message="Hotel added successfully", insertedId=hotel_id)


# Earnings

@app.get("/all-earnings")
def list_earnings(store: ResortDatabase = Depends(get_store)):
    return [serialize_doc(d) for d in store.get_documents(EARNING_LIST)]


@app.post("/all-earnings", status_code=201, response_model=InsertResult)
def add_earning(item: Dict[str, Any] = Body(...), store: ResortDatabase = Depends(get_store)):
    earning_id = store.create_document(EARNING_LIST, item)
    return InsertResult(message="Earning added successfully", insertedId=earning_id)


# Properties

@app.get("/add-property")
def list_properties(store: ResortDatabase = Depends(get_store)):
    return [serialize_doc(d) for d in store.get_documents(PROPERTY_DATA)]


@app.post("/add-property", status_code=201, response_model=InsertResult)
def add_property(payload: PropertyCreate, store: ResortDatabase = Depends(get_store)):
    property_id = store.create_document(PROPERTY_DATA, payload.model_dump())
    return InsertResult(message="Property added successfully", insertedId=property_id)


# Users

@app.get("/users")
def list_users(store: ResortDatabase = Depends(get_store)):
    return [serialize_doc(d) for d in store.get_documents(USERS)]


@app.get("/users/{email}")
def get_user(email: str, store: ResortDatabase = Depends(get_store)):
    doc = store.find_user_by_email(email)
    if not doc:
        raise HTTPException(status_code=404, detail="User not found")
    return serialize_doc(doc)


@app.post("/users", status_code=201)
def create_user(payload: UserCreate, response: Response, store: ResortDatabase = Depends(get_store)):
    existing = store.find_user_by_email(payload.email)
    if existing:
        response.status_code = 200
        return serialize_doc(existing)

    user_doc = payload.model_dump(exclude_none=True)
    user_doc["isAdmin"] = False
    user_doc["createdAt"] = datetime.now(timezone.utc)

    try:
        user_id = store.create_document(USERS, user_doc)
    except DuplicateKeyError:
        # Another request inserted this email between our lookup and insert
        existing = store.find_user_by_email(payload.email)
        if not existing:
            raise
        response.status_code = 200
        return serialize_doc(existing)

    logger.info("Created user %s", user_id)
    return InsertResult(message="User created successfully", insertedId=user_id)


@app.patch("/users/{user_id}")
def update_user_role(user_id: str, payload: RoleUpdate, store: ResortDatabase = Depends(get_store)):
    try:
        oid = ObjectId(user_id)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail="Invalid user id")

    if store.set_user_admin(oid, payload.isAdmin) == 0:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info("Set isAdmin=%s for user %s", payload.isAdmin, user_id)
    return {"message": "User updated", "isAdmin": payload.isAdmin}


# User info

@app.get("/userInfo")
def list_user_info(store: ResortDatabase = Depends(get_store)):
    return [serialize_doc(d) for d in store.get_documents(USER_INFO)]


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
