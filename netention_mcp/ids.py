"""Identifier generation for new notes."""

import uuid


class IdService:
    """Issues identifiers for notes created without one.

    Ids are random uuid4 strings; no coordination across processes is attempted.
    """

    def generate(self) -> str:
        return str(uuid.uuid4())
