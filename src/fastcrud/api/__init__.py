# src/fastcrud/api/__init__.py
