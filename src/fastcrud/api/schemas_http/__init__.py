# src/fastcrud/api/schemas_http/__init__.py
