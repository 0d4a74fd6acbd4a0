"""End-to-end tests for the multi-agent system."""

import pytest

from agent_coordination.artifacts import LearningPath
from agent_coordination.exceptions import (
    ProviderUnavailableError,
    SystemNotInitializedError,
    UpstreamGenerationError,
    ValidationError,
)
from agent_coordination.storage import InMemoryStorage, persist_artifact
from agent_coordination.system import MultiAgentSystem
from agent_coordination.types import LifecycleState, WorkflowStatus

from conftest import LEARNING_PLAN_REPLY, FakeTextGenerator, intent_reply


class RecordingObserver:
    def __init__(self):
        self.interactions = []
        self.activities = []

    def learn_from_user_interaction(self, interaction):
        self.interactions.append(interaction)

    def monitor_user_activity(self, activity):
        self.activities.append(activity)


class BrokenObserver(RecordingObserver):
    def learn_from_user_interaction(self, interaction):
        raise RuntimeError("observer crashed")


class FailingStorage(InMemoryStorage):
    def create_knowledge_context(self, context):
        raise ConnectionError("database down")


class TestInitialization:
    """Tests for initialize and the agent topology."""

    def test_topology(self, make_system):
        """Test the fixed wiring between the four agents."""
        system = make_system()
        manager = system.manager
        assert set(manager.connected_agents) == {"content-gen-1", "code-gen-1", "voice-assistant-1"}
        assert set(system.content_generator.connected_agents) == {"manager-1"}
        assert set(system.code_generator.connected_agents) == {"manager-1"}
        assert set(system.intent_recognizer.connected_agents) == {"manager-1"}
        for agent in system.agents:
            assert agent.status.state == LifecycleState.IDLE

    def test_initialize_without_credential(self, make_system):
        system = make_system(initialize=False)
        assert system.initialize("") is False
        assert system.initialized is False

    def test_initialize_is_idempotent(self, make_system):
        system = make_system()
        assert system.initialize("test-key") is True
        assert len(system.manager.connected_agents) == 3

    def test_invalid_observers_are_dropped(self, make_system):
        system = make_system(observers=[RecordingObserver(), object()])
        assert len(system.observers) == 1

    def test_shutdown(self, make_system):
        system = make_system()
        system.shutdown()
        assert system.initialized is False
        assert all(agent.status.state == LifecycleState.OFFLINE for agent in system.agents)


class TestVoiceCommand:
    """Tests for process_voice_command."""

    def test_learning_plan_end_to_end(self, make_system, storage):
        """Test a German learning plan request from utterance to stored artifact."""
        system = make_system([
            intent_reply(
                "generateLearningPlan",
                {"topic": "digitale Rechte"},
                best_approach="learning-path",
                confidence=0.92,
            ),
            LEARNING_PLAN_REPLY,
        ])
        result = system.process_voice_command(
            "Erstelle einen Lernplan zu digitalen Rechten", user_id="u1", language_code="de-DE",
        )

        assert result.success
        assert result.intent == "generateLearningPlan"
        assert result.confidence == 0.92
        assert isinstance(result.generated_content, LearningPath)
        assert result.generated_content.title in result.response
        assert result.requires_follow_up is True
        assert result.context["best_approach"] == "learning-path"
        assert result.context["last_assistant_message"] == result.response

        record = system.get_workflow(result.workflow_id)
        assert record.status == WorkflowStatus.COMPLETED
        assert record.kind == "voice-command"
        assert record.user_id == "u1"
        assert record.result is result

        assert len(storage.documents) == 1
        assert storage.documents[0]["kind"] == "learning-path"
        assert len(storage.knowledge_contexts) == 1
        assert storage.activities[0]["workflow_id"] == result.workflow_id

    def test_camel_case_parameters_reach_the_generator(self, make_system):
        """Test that an audience named by the model ends up in the document."""
        system = make_system([
            intent_reply("createDocument", {"topic": "Privacy", "targetAudience": "journalists"}),
            "# Privacy\n\nText.",
        ])
        result = system.process_voice_command("Write about privacy for journalists")

        assert result.success
        assert result.generated_content.metadata.target_audience == "journalists"
        assert "Target audience: journalists" in system.content_generator.generator.prompts[1]

    def test_vague_command_asks_follow_up(self, make_system, storage):
        system = make_system(["I am not sure what the user wants."])
        result = system.process_voice_command("Mach mal was")
        assert result.success
        assert result.intent == "unknown"
        assert result.requires_follow_up is True
        assert result.generated_content is None
        assert storage.documents == []
        assert system.manager.status.success_count == 0

    def test_defaults_from_settings(self, make_system):
        system = make_system([intent_reply("unknown")])
        result = system.process_voice_command("hello")
        assert system.get_workflow(result.workflow_id).user_id == "anonymous"
        assert "de-DE" in system.intent_recognizer.generator.prompts[0]

    def test_not_initialized_is_recorded(self, make_system):
        system = make_system(initialize=False)
        with pytest.raises(SystemNotInitializedError):
            system.process_voice_command("Create a report")
        records = system.get_workflow_status()
        assert len(records) == 1
        assert records[0].status == WorkflowStatus.FAILED

    def test_empty_command_is_rejected(self, make_system):
        system = make_system()
        with pytest.raises(ValidationError):
            system.process_voice_command("   ")
        assert system.get_workflow_status()[0].status == WorkflowStatus.FAILED

    def test_recognition_failure_is_recorded(self, make_system):
        system = make_system([ProviderUnavailableError("down")])
        with pytest.raises(UpstreamGenerationError):
            system.process_voice_command("Create a report")
        record = system.get_workflow_status()[0]
        assert record.status == WorkflowStatus.FAILED
        assert "down" in record.error

    def test_generation_failure_returns_failed_result(self, make_system, storage):
        """Test that a worker failure comes back as a failed result, not an exception."""
        system = make_system([
            intent_reply("createDocument", {"topic": "Privacy"}),
            ProviderUnavailableError("down"),
        ])
        result = system.process_voice_command("Write a report on privacy")
        assert result.success is False
        assert result.error
        assert system.get_workflow(result.workflow_id).status == WorkflowStatus.FAILED
        assert storage.documents == []

    def test_ledger_records_every_call(self, make_system):
        """Test one record per call, in order, across mixed outcomes."""
        system = make_system([
            intent_reply("createDocument", {"topic": "A"}),
            "# A",
            ProviderUnavailableError("down"),
            intent_reply("unknown"),
        ])
        system.process_voice_command("report on A")
        with pytest.raises(UpstreamGenerationError):
            system.process_voice_command("report on B")
        with pytest.raises(ValidationError):
            system.process_voice_command("")
        system.process_voice_command("something vague")

        records = system.get_workflow_status()
        assert [record.status for record in records] == [
            WorkflowStatus.COMPLETED,
            WorkflowStatus.FAILED,
            WorkflowStatus.FAILED,
            WorkflowStatus.COMPLETED,
        ]
        assert len({record.id for record in records}) == 4
        assert [record.command for record in records] == [
            "report on A", "report on B", "", "something vague",
        ]


class TestFollowUpDialog:
    """Tests for process_follow_up_dialog."""

    def test_follow_up_completes_request(self, make_system):
        """Test that answering the follow-up question leads to an artifact."""
        system = make_system([
            intent_reply("generateLearningPlan", requires_follow_up=True, questions=["On which topic?"],
                         best_approach="learning-path"),
            intent_reply("generateLearningPlan", {"topic": "digital rights"}, best_approach="learning-path"),
            "Thanks, I will prepare it.",
            LEARNING_PLAN_REPLY,
        ])
        first = system.process_voice_command("Make me a learning plan")
        assert first.response == "On which topic?"
        assert first.generated_content is None

        second = system.process_follow_up_dialog(
            "Make me a learning plan", "digital rights", first.context,
        )
        assert second.success
        assert second.workflow_id != first.workflow_id
        assert isinstance(second.generated_content, LearningPath)
        assert second.context["intent"] == "generateLearningPlan"
        assert len(second.context["previous_interactions"]) == 2

        record = system.get_workflow(second.workflow_id)
        assert record.kind == "follow-up"
        assert record.initial_query == "Make me a learning plan"
        assert record.user_response == "digital rights"

    def test_empty_response_is_rejected(self, make_system):
        system = make_system()
        with pytest.raises(ValidationError):
            system.process_follow_up_dialog("query", "")
        assert system.get_workflow_status()[0].kind == "follow-up"


class TestSideEffects:
    """Tests for persistence and observers."""

    def test_observers_are_notified(self, make_system):
        observer = RecordingObserver()
        system = make_system([intent_reply("unknown")], observers=[observer])
        result = system.process_voice_command("hello", user_id="u7")
        assert observer.interactions[0]["workflow_id"] == result.workflow_id
        assert observer.activities[0] == {"user_id": "u7", "type": "voice-command", "success": True}

    def test_observer_failure_is_contained(self, make_system):
        system = make_system([intent_reply("unknown")], observers=[BrokenObserver()])
        result = system.process_voice_command("hello")
        assert result.success

    def test_storage_failure_does_not_fail_workflow(self, settings):
        """Test that persistence errors are logged and swallowed."""
        storage = FailingStorage()
        system = MultiAgentSystem(
            FakeTextGenerator([intent_reply("createDocument", {"topic": "Privacy"}), "# Privacy"]),
            storage=storage,
            settings=settings,
        )
        system.initialize("key")
        result = system.process_voice_command("Report on privacy")
        assert result.success
        assert len(storage.documents) == 1
        assert storage.activities == []

    def test_persist_without_storage(self):
        assert persist_artifact(None, object(), "u", "w") is False

    def test_code_artifacts_get_no_knowledge_context(self, make_system, storage):
        system = make_system([
            intent_reply("createVisualization", {"purpose": "arrests per year"}, best_approach="code"),
            "```python\nimport matplotlib.pyplot as plt\n```",
        ])
        result = system.process_voice_command("Chart arrests per year")
        assert result.generated_content.kind == "code"
        assert len(storage.documents) == 1
        assert storage.knowledge_contexts == []
        assert len(storage.activities) == 1
