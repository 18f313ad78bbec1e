"""
Tests for first population of the shared caches from concurrent requests.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from sample_models import Book, Genre

from mdd_rest.registry import ModelInfoRegistry
from mdd_rest.schema import SchemaFactory
from mdd_rest.specification import EnumStringPredicateFactory, MemberCache, PredicateFactoryRegistry

THREADS = 8


def run_concurrently(func):
    """Run ``func`` on THREADS threads released at the same moment."""
    barrier = threading.Barrier(THREADS)

    def task():
        barrier.wait()
        return func()

    with ThreadPoolExecutor(max_workers=THREADS) as executor:
        futures = [executor.submit(task) for _ in range(THREADS)]
        return [future.result() for future in futures]


def slow_counting(monkeypatch, target, name):
    """Wrap ``target.name`` so it records its calls and yields to other threads."""
    calls = []
    original = getattr(target, name)

    def wrapper(*args, **kwargs):
        calls.append(args)
        time.sleep(0.01)
        return original(*args, **kwargs)

    monkeypatch.setattr(target, name, wrapper)
    return calls


def test_registry_registers_once(monkeypatch):
    registry = ModelInfoRegistry(base_path="/api/rest")
    calls = slow_counting(monkeypatch, registry, "_introspect")

    infos = run_concurrently(lambda: registry.register(Book))

    assert all(info is infos[0] for info in infos)
    assert [args[0] for args in calls].count(Book) == 1


def test_member_cache_resolves_once(registry, monkeypatch):
    members = MemberCache(registry)
    calls = slow_counting(monkeypatch, members, "_scan")

    paths = run_concurrently(lambda: members.resolve_path(Book, "author.name"))

    assert all(path is paths[0] for path in paths)
    assert [field.name for field in paths[0]] == ["author", "name"]
    assert len(calls) == 1


def test_member_cache_caches_miss_once(registry, monkeypatch):
    members = MemberCache(registry)
    calls = slow_counting(monkeypatch, members, "_scan")

    assert run_concurrently(lambda: members.resolve_path(Book, "nickname")) == [None] * THREADS
    assert len(calls) == 1


def test_enum_factory_created_once(monkeypatch):
    factories = PredicateFactoryRegistry.create()
    calls = slow_counting(monkeypatch, factories, "add_factory_for_class")

    created = run_concurrently(lambda: factories.get_predicate_factory_for_class(Genre))

    assert isinstance(created[0], EnumStringPredicateFactory)
    assert all(factory is created[0] for factory in created)
    assert len(calls) == 1


def test_schema_models_built_once(registry, monkeypatch):
    schemas = SchemaFactory(registry)
    calls = slow_counting(monkeypatch, schemas, "_build_input")
    book_info = registry.get_entry_for(Book)

    models = run_concurrently(lambda: schemas.input_model(book_info))

    assert all(model is models[0] for model in models)
    assert len(calls) == 1
