"""
Gmail filter query construction for a child.

Shape: "<name>" AND ((from:a OR from:b) OR ("k1" OR "k2")).
The name is always required; senders and keywords each contribute one
OR-group when non-empty. Values are embedded verbatim, quotes are not escaped.
"""


def build_filter_query(name: str, expected_senders: list[str], keywords: list[str]) -> str:
    """
    Build the Gmail search query used as a filter's ``criteria.query``.

    Examples:
        build_filter_query("Bob", [], []) -> '"Bob"'
        build_filter_query("Alice", ["a@x.com"], ["homework"])
            -> '"Alice" AND ((from:a@x.com) OR ("homework"))'

    Raises:
        ValueError: If name is empty
    """
    if not name:
        raise ValueError("Child name is required for filter creation")

    conditions = []

    if expected_senders:
        conditions.append("(" + " OR ".join(f"from:{sender}" for sender in expected_senders) + ")")

    if keywords:
        conditions.append("(" + " OR ".join(f'"{keyword}"' for keyword in keywords) + ")")

    name_clause = f'"{name}"'
    if not conditions:
        return name_clause

    return f"{name_clause} AND ({' OR '.join(conditions)})"
