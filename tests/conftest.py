"""Shared marketplace data for service-level tests.

Ids are plain strings; the engine does not validate id formats.

Visible by default (active, not hidden): ad-a, ad-p, ad-s, ad-l.
"""

import pytest

from marketplace_search.adapters.memory_store import InMemoryDocumentStore

NYC = (-74.0060, 40.7128)

USERS = [
    {"_id": "u1", "firstName": "Maria", "lastName": "Lopez", "email": "maria@example.com"},
    {"_id": "u2", "firstName": "Jon", "lastName": "Park", "email": "jon@example.com"},
    {"_id": "u3", "firstName": "Sam", "lastName": "Lee", "email": "sam@example.com"},
]

PROFILES = [
    {
        "_id": "p1",
        "user": "u1",
        "languages": [{"language": "English"}, {"language": "Spanish"}],
        "portfolio": [{"title": "Screen repairs"}],
        "rating": {"average": 4.8, "count": 10},
    },
    {
        "_id": "p2",
        "user": "u2",
        "languages": [{"language": "Korean"}],
        "portfolio": [],
        "rating": {"average": 3.9, "count": 4},
    },
]

CATEGORIES = [
    {"_id": "electronics", "name": "Electronics", "description": "Devices", "parentId": None, "level": 0},
    {"_id": "phones", "name": "Phones", "parentId": "electronics", "level": 1},
    {"_id": "smartphones", "name": "Smartphones", "parentId": "phones", "level": 2},
    {"_id": "lessons", "name": "Lessons", "parentId": None, "level": 0},
]

TAGS = [
    {"_id": "t1", "name": "repair"},
    {"_id": "t2", "name": "used"},
    {"_id": "t3", "name": "music"},
]


def _ad(ad_id, created, **fields):
    doc = {
        "_id": ad_id,
        "title": f"Advertisement {ad_id}",
        "description": f"Description of {ad_id}",
        "ownerId": "u1",
        "categoryId": "electronics",
        "tags": [],
        "type": "service",
        "isActive": True,
        "isArchived": False,
        "views": 0,
        "applicationCount": 0,
        "rating": {"average": 0, "count": 0},
        "createdAt": created,
    }
    doc.update(fields)
    return doc


ADVERTISEMENTS = [
    # ~200 m north of the NYC center
    _ad("ad-a", "2024-01-01T00:00:00Z", profileId="p1", tags=["t1"], title="iPhone screen repair",
        location="Lower Manhattan", views=120, rating={"average": 4.9, "count": 14},
        coordinates={"type": "Point", "coordinates": [NYC[0], 40.7146]}),
    # ~10 km north of the NYC center
    _ad("ad-p", "2024-01-02T00:00:00Z", profileId="p1", categoryId="phones", tags=["t1", "t2"],
        type="goods", title="Used Android phone", location="Harlem", views=45,
        coordinates={"type": "Point", "coordinates": [NYC[0], 40.8028]}),
    _ad("ad-s", "2024-01-03T00:00:00Z", ownerId="u2", profileId="p2", categoryId="smartphones",
        tags=["t2"], type="goods", title="Pixel case", views=10, isUrgent=True),
    _ad("ad-l", "2024-01-04T00:00:00Z", ownerId="u3", categoryId="lessons", tags=["t3"], type="skill",
        title="Guitar lessons", exchangePreferences="Swap for cooking classes", views=300),
    _ad("ad-x", "2024-01-05T00:00:00Z", isActive=False, tags=["t1"]),
    _ad("ad-h", "2024-01-06T00:00:00Z", isHidden=True, tags=["t1"]),
    _ad("ad-r", "2024-01-07T00:00:00Z", ownerId="u2", categoryId="lessons", isActive=False, isArchived=True),
]


def build_marketplace() -> InMemoryDocumentStore:
    return InMemoryDocumentStore({
        "users": USERS,
        "profiles": PROFILES,
        "categories": CATEGORIES,
        "tags": TAGS,
        "advertisements": ADVERTISEMENTS,
    })


@pytest.fixture
def marketplace():
    return build_marketplace()
