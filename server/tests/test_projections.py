import pytest

from core.errors import ConfigurationError
from core.models import EntityKind, entity_columns
from core.projections import ProjectionRegistry, registry, select_projection


def test_registered_views_are_non_empty_and_duplicate_free():
    projections = list(registry)
    assert projections
    for projection in projections:
        assert projection.fields
        assert len(projection.fields) == len(set(projection.fields))
        assert set(projection.fields) <= set(entity_columns(projection.entity))


def test_every_entity_has_a_view():
    for entity in EntityKind:
        assert registry.views(entity)


def test_select_returns_exact_field_set():
    projection = select_projection(EntityKind.assignment, "past")
    assert projection.fields == (
        "id", "title", "course_code", "course_name", "due_date", "status", "grade", "feedback",
    )
    assert "description" not in projection


def test_unregistered_pair_fails():
    with pytest.raises(ConfigurationError):
        select_projection(EntityKind.schedule, "listing")
    with pytest.raises(ConfigurationError):
        select_projection(EntityKind.student, "academic")


def test_registration_validates_fields():
    fresh = ProjectionRegistry()
    with pytest.raises(ConfigurationError):
        fresh.register(EntityKind.course, "empty", ())
    with pytest.raises(ConfigurationError):
        fresh.register(EntityKind.course, "twice", ("course_code", "course_code"))
    with pytest.raises(ConfigurationError):
        fresh.register(EntityKind.course, "typo", ("course_code", "cerdits"))
    fresh.register(EntityKind.course, "codes", ("course_code",))
    with pytest.raises(ConfigurationError):
        fresh.register(EntityKind.course, "codes", ("course_name",))
    assert fresh.views(EntityKind.course) == ["codes"]
