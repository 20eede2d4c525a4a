"""
credential_service tests

Covers the core of the credential service:

- Password hashing and salts (`auth.py`)
- Transactional persistence gateway (`gateway.py`)
- Registration and authentication (`services.py`)
- Schema bootstrap (`db.py`)
- FastAPI routes (`main.py`, `routes/`)
"""
