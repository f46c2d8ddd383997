"""Shared constants and value types for the test suite."""

from dataclasses import dataclass

from pydantic import BaseModel

BASE_URL = "http://cache.test"
GET_ALL_URL = f"{BASE_URL}/api/v1/cache/get_all"
PUT_ALL_URL = f"{BASE_URL}/api/v1/cache/put_all"
EVICT_ALL_URL = f"{BASE_URL}/api/v1/cache/evict_all"


@dataclass
class User:
    id: int
    name: str


class Profile(BaseModel):
    user_id: int
    tags: list[str] = []
