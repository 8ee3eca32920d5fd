"""
Test suite for DocumentRegistry: version chains, provenance and rendered content.
"""
import pytest

from planner.memory.documents import DocumentRegistry
from planner.memory.phases import PhaseMachine
from planner.memory.store import SessionStore
from planner.schemas.project import DesignData, RequirementsData, TasksData


@pytest.fixture
def registry(store: SessionStore) -> DocumentRegistry:
    PhaseMachine(store).initialize("s1", "TaskFlow")
    return DocumentRegistry(store)


class TestVersioning:
    def test_first_version_is_one(self, registry: DocumentRegistry) -> None:
        doc = registry.set_requirements("s1", RequirementsData(project_name="TaskFlow"))

        assert doc.version == 1
        assert doc.based_on_version is None
        assert doc.content == ""
        assert registry.latest("s1", "requirements") is doc

    def test_setting_again_appends_new_version(self, registry: DocumentRegistry) -> None:
        registry.set_requirements("s1", RequirementsData(description="first"))
        registry.set_requirements("s1", RequirementsData(description="second"))

        history = registry.history("s1", "requirements")
        assert [d.version for d in history] == [1, 2]
        assert history[0].data.description == "first"
        assert registry.latest("s1", "requirements").data.description == "second"

    def test_stamps_project_updated_at(self, registry: DocumentRegistry, store, clock) -> None:
        clock.advance(3)
        registry.set_requirements("s1", RequirementsData())

        assert store.get("s1").project_session.updated_at == clock.current


class TestProvenance:
    def test_design_and_tasks_point_upstream(self, registry: DocumentRegistry) -> None:
        registry.set_requirements("s1", RequirementsData())
        registry.set_requirements("s1", RequirementsData())
        design = registry.set_design("s1", DesignData())
        tasks = registry.set_tasks("s1", TasksData())

        assert design.based_on_version == 2
        assert tasks.based_on_version == design.version

    def test_missing_upstream_is_recorded_as_none(self, registry: DocumentRegistry) -> None:
        tasks = registry.set_tasks("s1", TasksData())

        assert tasks.based_on_version is None


class TestAttachContent:
    def test_renders_latest_version_in_place(self, registry: DocumentRegistry) -> None:
        registry.set_requirements("s1", RequirementsData())

        rendered = registry.attach_content("s1", "requirements", "# Requirements")

        assert rendered.version == 1
        assert rendered.content == "# Requirements"
        assert registry.latest("s1", "requirements").content == "# Requirements"
        assert len(registry.history("s1", "requirements")) == 1

    def test_nothing_to_render(self, registry: DocumentRegistry) -> None:
        assert registry.attach_content("s1", "design", "# Design") is None

    def test_unknown_kind(self, registry: DocumentRegistry) -> None:
        with pytest.raises(ValueError):
            registry.attach_content("s1", "session_id", "oops")


class TestWithoutProject:
    def test_setters_are_noops(self, store: SessionStore) -> None:
        registry = DocumentRegistry(store)
        store.get_or_create("bare")

        assert registry.set_requirements("bare", RequirementsData()) is None
        assert registry.latest("bare", "requirements") is None
        assert registry.history("bare", "requirements") == []

    def test_generic_setter_rejects_unknown_kind(self, registry: DocumentRegistry) -> None:
        with pytest.raises(ValueError):
            registry.set("s1", "complete", {})
