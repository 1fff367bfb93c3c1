"""Resource access control.

Learn: three layers, one policy:
- policy.py    pure predicates (owner / participant / admin rules)
- filters.py   the same predicate as a SQL WHERE clause, for lists
- resolver.py  fetch + predicate, with fixed 403/404 ordering
- guard.py     re-check inside the write transaction (TOCTOU)
"""
