"""
Project API package.

A FastAPI service exposing CRUD operations over music project records kept
in a key-value store, with related audio and cover-art objects in a blob
store.
"""
