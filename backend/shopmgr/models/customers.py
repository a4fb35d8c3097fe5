from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Customer:
    """Customer contact record. Address is free text and may contain commas."""
    id: int
    name: str
    phone: str
    email: str
    address: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
        }
