"""Filter, update and sort semantics shared by the bundled document stores.

A small subset of the MongoDB query language: equality (with array
membership), ``$in`` and ``$ne`` in filters; ``$set``, ``$unset``,
``$addToSet`` and ``$pull`` in updates.
"""

from __future__ import annotations

from typing import Any

from ..workflow.interface import Document, Filter, Sort, Update


def _match_value(actual: Any, expected: Any) -> bool:
    if isinstance(expected, dict):
        for op, operand in expected.items():
            if op == "$in":
                if isinstance(actual, list):
                    if not any(a in operand for a in actual):
                        return False
                elif actual not in operand:
                    return False
            elif op == "$ne":
                if _match_value(actual, operand):
                    return False
            else:
                raise ValueError(f"Unsupported filter operator: {op}")
        return True
    if isinstance(actual, list) and not isinstance(expected, list):
        return expected in actual
    return actual == expected


def matches(doc: Document, filter: Filter | None) -> bool:
    if not filter:
        return True
    return all(_match_value(doc.get(key), expected) for key, expected in filter.items())


def apply_update(doc: Document, update: Update) -> None:
    """Apply ``update`` to ``doc`` in place."""
    for op, values in update.items():
        if op == "$set":
            doc.update(values)
        elif op == "$unset":
            for key in values:
                doc.pop(key, None)
        elif op == "$addToSet":
            for key, value in values.items():
                current = doc.setdefault(key, [])
                if value not in current:
                    current.append(value)
        elif op == "$pull":
            for key, value in values.items():
                doc[key] = [v for v in doc.get(key, []) if v != value]
        else:
            raise ValueError(f"Unsupported update operator: {op}")


def sort_documents(docs: list[Document], sort: Sort | None) -> list[Document]:
    if not sort:
        return docs
    # Apply keys last-to-first so the first key dominates (sorts are stable).
    for key, direction in reversed(sort):
        docs.sort(
            key=lambda d: (d.get(key) is not None, d.get(key)),
            reverse=direction < 0,
        )
    return docs
