"""farm/ -- Farm records owned by an account, plus their tasks.

Layer rule: farm/ may import from core/ and auth/ (to confirm an owner
exists). It does NOT import from api/.
"""
