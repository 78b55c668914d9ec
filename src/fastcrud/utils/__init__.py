# src/fastcrud/utils/__init__.py
