# src/fastcrud/api/routers/__init__.py
