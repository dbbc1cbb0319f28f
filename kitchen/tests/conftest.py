from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from kitchen.app import app
from kitchen.dependencies import get_classifier, get_generator, get_summarizer
from kitchen.store.memory import MemoryStore, get_store
from kitchen.tests.fakes import BASE_TIME, FakeClassifier, FakeGenerator, FakeSummarizer


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture
def summarizer() -> FakeSummarizer:
    return FakeSummarizer()


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def client(store, classifier, summarizer, generator):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_classifier] = lambda: classifier
    app.dependency_overrides[get_summarizer] = lambda: summarizer
    app.dependency_overrides[get_generator] = lambda: generator
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def menu(store):
    """Two customers and two dishes with a short feedback history."""
    alice = store.add_customer("Alice", "Smith")
    bob = store.add_customer("Bob", "Jones")
    pasta = store.add_food_item("Pasta", 12.5)
    soup = store.add_food_item("Tomato Soup", 6.0, preparation_time=10)

    store.add_feedback(pasta.id, 5, "Great pasta, love it", alice.id, BASE_TIME)
    store.add_feedback(soup.id, 2, "Soup was cold", alice.id, BASE_TIME + timedelta(days=3))
    store.add_feedback(soup.id, 4, "Fine", bob.id, BASE_TIME + timedelta(days=40))
    store.add_feedback(pasta.id, 3, "", None, BASE_TIME + timedelta(days=70))

    return {"alice": alice, "bob": bob, "pasta": pasta, "soup": soup}
