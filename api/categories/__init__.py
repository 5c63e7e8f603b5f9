"""
Categories feature: reconciliation of names onto rows, thin CRUD.
"""
