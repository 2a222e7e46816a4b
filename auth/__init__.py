"""auth/ -- Account authentication package for FieldBook.

Layer rule: auth/ imports only stdlib + third-party libraries + core/.
It does NOT import from api/ or farm/.
api/ imports from auth/, not the other way around.
"""
