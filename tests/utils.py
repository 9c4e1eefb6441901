"""Test helpers and shared entity types."""

from dataclasses import dataclass

from pydantic import BaseModel


class Customer(BaseModel):
    id: int
    name: str
    email: str | None = None
    city: str | None = None


@dataclass
class Product:
    sku: str
    title: str
    price: float = 0.0
    stock: int = 0


@dataclass
class Address:
    city: str
    zip_code: str | None = None


@dataclass
class Shop:
    id: int
    address: Address
    tags: list[str] | None = None


def reverse_text(value):
    """Toy reversible transform used as an encryption stand-in."""
    return value[::-1] if isinstance(value, str) else value
