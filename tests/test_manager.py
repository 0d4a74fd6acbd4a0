"""Tests for manager routing and coordination."""

import pytest

from agent_coordination.agents import (
    CodeGeneratorAgent,
    ContentGeneratorAgent,
    ManagerAgent,
    determine_best_approach,
)
from agent_coordination.agents.manager import FOLLOW_UP_QUESTIONS, GENERIC_FAILURE_MESSAGE
from agent_coordination.artifacts import GeneratedCode, GeneratedDocument, LearningPath
from agent_coordination.exceptions import ProviderUnavailableError
from agent_coordination.types import (
    Approach,
    CoordinationPhase,
    CoordinationRequest,
    LifecycleState,
    Task,
    TaskType,
)

from conftest import LEARNING_PLAN_REPLY, FakeTextGenerator


def make_manager(replies=None, with_content=True, with_code=True):
    generator = FakeTextGenerator(replies, default="# Body\n\nText.")
    manager = ManagerAgent(generator=generator)
    manager.initialize({"api_key": "key"})
    workers = []
    if with_content:
        workers.append(ContentGeneratorAgent(generator=generator))
    if with_code:
        workers.append(CodeGeneratorAgent(generator=generator))
    for worker in workers:
        worker.initialize({"api_key": "key"})
        manager.connect_to_agent(worker)
        worker.connect_to_agent(manager)
    return manager


class TestDetermineBestApproach:
    """Tests for the routing decision."""

    @pytest.mark.parametrize("task_type,expected", [
        (TaskType.DOCUMENT_GENERATION, Approach.DOCUMENT),
        (TaskType.LEARNING_PATH_CREATION, Approach.LEARNING_PATH),
        (TaskType.VISUALIZATION, Approach.CODE),
        (TaskType.MAP_GENERATION, Approach.CODE),
        (TaskType.HTML_PAGE_GENERATION, Approach.CODE),
    ])
    def test_task_type_is_authoritative(self, task_type, expected):
        """Test that the task type wins over the intent wording."""
        assert determine_best_approach("write some code", task_type) == expected

    @pytest.mark.parametrize("intent,expected", [
        ("createVisualization", Approach.CODE),
        ("Schreibe ein Python-Programm", Approach.CODE),
        ("generateLearningPlan", Approach.LEARNING_PATH),
        ("Erstelle einen Lernplan", Approach.LEARNING_PATH),
        ("a training course", Approach.LEARNING_PATH),
        ("createDocument", Approach.DOCUMENT),
        ("unknown", Approach.DOCUMENT),
        ("", Approach.DOCUMENT),
        (None, Approach.DOCUMENT),
        ("Lernplan zur Datenanalyse", Approach.LEARNING_PATH),
        ("Erstelle eine Karte", Approach.DOCUMENT),
    ])
    def test_keyword_fallback(self, intent, expected):
        assert determine_best_approach(intent) == expected

    def test_code_keywords_checked_before_learning(self):
        """Test that a request matching both categories routes to code."""
        assert determine_best_approach("a course dashboard") == Approach.CODE

    def test_is_deterministic(self):
        results = {determine_best_approach("Erstelle ein Dashboard") for _ in range(20)}
        assert results == {Approach.CODE}


class TestCoordinateTask:
    """Tests for coordinate_task."""

    def test_document_request(self):
        manager = make_manager(["# Privacy\n\nA report."])
        result = manager.coordinate_task(CoordinationRequest(
            intent="createDocument",
            parameters={"topic": "Privacy"},
            task_type=TaskType.DOCUMENT_GENERATION,
            language="en",
        ))
        assert result.success
        assert isinstance(result.generated_content, GeneratedDocument)
        assert result.generated_content.metadata.language == "en"
        assert result.follow_up_questions == FOLLOW_UP_QUESTIONS[Approach.DOCUMENT]
        assert result.requires_follow_up is True
        assert result.context["best_approach"] == "document"
        assert result.phase == CoordinationPhase.DONE

    def test_learning_path_response_names_title(self):
        """Test that the user-facing response names the learning path."""
        manager = make_manager([LEARNING_PLAN_REPLY])
        result = manager.coordinate_task(CoordinationRequest(
            intent="generateLearningPlan",
            parameters={"topic": "digitale Rechte"},
            task_type=TaskType.LEARNING_PATH_CREATION,
        ))
        assert isinstance(result.generated_content, LearningPath)
        assert result.generated_content.title == "Learning path: digitale Rechte"
        assert result.generated_content.title in result.response
        assert "2 modules" in result.response

    def test_code_request_maps_task_type(self):
        manager = make_manager(["```python\nimport pandas as pd\ndf = pd.read_csv('x.csv')\n```"])
        result = manager.coordinate_task(CoordinationRequest(
            intent="analyzeData",
            parameters={"purpose": "protest statistics"},
            task_type=TaskType.DATA_ANALYSIS,
        ))
        assert result.success
        assert isinstance(result.generated_content, GeneratedCode)
        assert result.generated_content.title == "Data analysis: protest statistics"
        assert result.generated_content.language == "python"

    def test_unknown_intent_becomes_document(self):
        """Test that an unmatched intent falls back to a document."""
        manager = make_manager(["Body"])
        result = manager.coordinate_task(CoordinationRequest(intent="unknown"))
        assert result.success
        assert isinstance(result.generated_content, GeneratedDocument)
        assert result.follow_up_questions == FOLLOW_UP_QUESTIONS[Approach.DOCUMENT]
        assert result.context["best_approach"] == "document"

    def test_offline_manager_stays_offline(self):
        """Test that coordinating after shutdown fails without reviving the agent."""
        manager = make_manager(["Body"])
        manager.shutdown()
        result = manager.coordinate_task(CoordinationRequest(
            intent="createDocument", task_type=TaskType.DOCUMENT_GENERATION,
        ))
        assert result.success is False
        assert "offline" in result.error
        assert manager.status.state == LifecycleState.OFFLINE
        assert manager.status.error_count == 0
        assert manager.generator.prompts == []

    def test_missing_worker_fails(self):
        """Test the failure envelope when no agent offers the capability."""
        manager = make_manager(with_code=False)
        result = manager.coordinate_task(CoordinationRequest(
            intent="createVisualization", task_type=TaskType.VISUALIZATION,
        ))
        assert result.success is False
        assert result.response == GENERIC_FAILURE_MESSAGE
        assert "code-generation" in result.error
        assert result.phase == CoordinationPhase.FAILED
        assert manager.status.error_count == 1
        assert manager.status.state == LifecycleState.ERROR

    def test_worker_failure_is_contained(self):
        """Test that an upstream failure in the worker becomes a failure result."""
        manager = make_manager([ProviderUnavailableError("down")])
        result = manager.coordinate_task(CoordinationRequest(
            intent="createDocument", parameters={"topic": "Privacy"},
            task_type=TaskType.DOCUMENT_GENERATION,
        ))
        assert result.success is False
        assert result.response == GENERIC_FAILURE_MESSAGE
        assert "down" in result.error
        worker = manager.connected_agents["content-gen-1"]
        assert worker.status.error_count == 1

    def test_intent_used_as_subject(self):
        """Test that the intent stands in for a missing topic."""
        manager = make_manager(["Body"])
        result = manager.coordinate_task(CoordinationRequest(
            intent="Freedom of Assembly", task_type=TaskType.DOCUMENT_GENERATION,
        ))
        assert result.generated_content.title == "Document: Freedom of Assembly"

    def test_execute_task_coordinate(self):
        manager = make_manager(["Body"])
        result = manager.execute_task(Task.create(TaskType.COORDINATE_TASK, {
            "intent": "createDocument",
            "parameters": {"topic": "Privacy"},
            "task_type": "document-generation",
        }))
        assert result.success
        assert isinstance(result.content, GeneratedDocument)

    def test_execute_task_rejects_other_types(self):
        manager = make_manager()
        result = manager.execute_task(Task.create(TaskType.GENERATE_MAP))
        assert result.success is False
        assert result.error == "unknown task type generate-map"
