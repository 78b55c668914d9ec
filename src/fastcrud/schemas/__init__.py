# src/fastcrud/schemas/__init__.py
