"""
Repositories package
Database queries kept apart from the models

Each repository encapsulates database operations for a model:
- user_repository.py
- log_repository.py

Usage:
    from repositories.log_repository import LogRepository
    logs = LogRepository.list_for_user(user_id)
"""
