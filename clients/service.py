from typing import List

import structlog
from fastapi import HTTPException

from database import Database
from .models import ClientBase

LOGGER = structlog.get_logger(__name__)

CLIENT_FIELDS = (
    "first_name", "last_name", "email", "phone",
    "address_line1", "address_line2", "city", "state", "zip", "country",
)


def _error_message(exc: Exception) -> str:
    return str(getattr(exc, "orig", None) or exc)


# ============================================================
# GET ALL CLIENTS
# ============================================================

def get_all_clients(db: Database) -> List[dict]:
    try:
        return db.execute("SELECT * FROM clients ORDER BY id").rows
    except Exception as e:
        LOGGER.exception("client_list_failed")
        raise HTTPException(status_code=500, detail=f"Failed to fetch clients: {_error_message(e)}")


# ============================================================
# GET CLIENT BY ID
# ============================================================

def get_client_by_id(db: Database, client_id: int) -> dict:
    try:
        row = db.execute("SELECT * FROM clients WHERE id = :id", {"id": client_id}).first()
    except Exception as e:
        LOGGER.exception("client_fetch_failed", client_id=client_id)
        raise HTTPException(status_code=500, detail=f"Failed to fetch client: {_error_message(e)}")

    if not row:
        raise HTTPException(status_code=404, detail="Client not found")
    return row


# ============================================================
# CREATE CLIENT
# ============================================================

def create_client(db: Database, client: ClientBase) -> dict:
    columns = ", ".join(CLIENT_FIELDS)
    values = ", ".join(f":{field}" for field in CLIENT_FIELDS)

    try:
        row = db.execute(
            f"INSERT INTO clients ({columns}) VALUES ({values}) RETURNING id",
            client.model_dump(include=set(CLIENT_FIELDS)),
        ).first()
    except Exception as e:
        LOGGER.exception("client_create_failed")
        raise HTTPException(status_code=500, detail=f"Failed to create client: {_error_message(e)}")

    LOGGER.info("client_created", client_id=row["id"])
    return {"message": "Client created", "id": row["id"]}


# ============================================================
# UPDATE CLIENT
# ============================================================

def update_client(db: Database, client_id: int, client: ClientBase) -> dict:
    set_clause = ", ".join(f"{field} = :{field}" for field in CLIENT_FIELDS)
    params = client.model_dump(include=set(CLIENT_FIELDS))
    params["id"] = client_id

    try:
        result = db.execute(f"UPDATE clients SET {set_clause} WHERE id = :id", params)
    except Exception as e:
        LOGGER.exception("client_update_failed", client_id=client_id)
        raise HTTPException(status_code=500, detail=f"Failed to update client: {_error_message(e)}")

    if result.rowcount == 0:
        raise HTTPException(status_code=404, detail="Client not found")

    LOGGER.info("client_updated", client_id=client_id)
    return {"message": "Client updated", "affectedRows": result.rowcount}


# ============================================================
# DELETE CLIENT
# ============================================================

def delete_client(db: Database, client_id: int) -> dict:
    try:
        result = db.execute("DELETE FROM clients WHERE id = :id", {"id": client_id})
    except Exception as e:
        LOGGER.exception("client_delete_failed", client_id=client_id)
        raise HTTPException(status_code=500, detail=f"Delete failed: {_error_message(e)}")

    if result.rowcount == 0:
        raise HTTPException(status_code=404, detail="Client not found")

    LOGGER.info("client_deleted", client_id=client_id)
    return {"message": "Client deleted", "affectedRows": result.rowcount}
