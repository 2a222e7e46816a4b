"""
core/models.py -- Response envelope shared by every workflow.

Every auth and farm operation answers with the same four-field shape so API
clients can parse results uniformly:

    {"message": str, "status": str, "statusCode": int, "data": <payload|null>}

Workflows build Envelope instances; route handlers serialize them with
to_dict() and reuse status_code as the HTTP status.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class Envelope:
    message: str
    status: str = "success"  # "success" | "Success" (registration keeps the capital S)
    status_code: int = 200
    data: Any = None

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "status": self.status,
            "statusCode": self.status_code,
            "data": self.data,
        }
