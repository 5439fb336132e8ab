from fastapi import APIRouter, Depends
from typing import List
from .models import Client, ClientBase, ClientCreated, ClientMutation
from . import service
from database import Database, get_database

router = APIRouter(prefix='/api/clients', tags=['clients'])

@router.get('', response_model=List[Client])
def get_clients(db: Database = Depends(get_database)):
    """Get all clients"""
    return service.get_all_clients(db)

@router.get('/{client_id}', response_model=Client)
def get_client(client_id: int, db: Database = Depends(get_database)):
    """Get a single client"""
    return service.get_client_by_id(db, client_id)

@router.post('', response_model=ClientCreated)
def create_client(client: ClientBase, db: Database = Depends(get_database)):
    """Create a new client"""
    return service.create_client(db, client)

@router.put('/{client_id}', response_model=ClientMutation)
def update_client(client_id: int, client: ClientBase, db: Database = Depends(get_database)):
    """Update an existing client"""
    return service.update_client(db, client_id, client)

@router.delete('/{client_id}', response_model=ClientMutation)
def delete_client(client_id: int, db: Database = Depends(get_database)):
    """Delete a client"""
    return service.delete_client(db, client_id)
