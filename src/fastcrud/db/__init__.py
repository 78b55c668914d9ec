# src/fastcrud/db/__init__.py
