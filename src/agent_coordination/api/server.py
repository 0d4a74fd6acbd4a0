"""FastAPI server exposing the multi-agent system."""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..exceptions import AgentError, SystemNotInitializedError, ValidationError
from ..logging import get_logger
from ..system import MultiAgentSystem
from ..types import WorkflowResult
from .schemas import ErrorResponse, FollowUpRequest, VoiceCommandRequest, WorkflowResponse

logger = get_logger(__name__)

FAILURE_MESSAGE = "The request could not be processed."


def _convert_result(result: WorkflowResult) -> WorkflowResponse:
    """Convert a workflow result to the API response model."""
    data = result.to_dict()
    return WorkflowResponse(
        status="success" if result.success else "error",
        workflow_id=result.workflow_id,
        response=result.response,
        intent=result.intent,
        confidence=result.confidence,
        generated_content=data["generated_content"],
        requires_follow_up=result.requires_follow_up,
        follow_up_questions=data["follow_up_questions"],
        dialog_context=data["context"],
        error=result.error,
    )


def _error(status_code: int, error: Exception) -> JSONResponse:
    body = ErrorResponse(response=FAILURE_MESSAGE, error=str(error))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app(system: MultiAgentSystem) -> FastAPI:
    """Create the FastAPI application around an existing system.

    Endpoints are sync functions; FastAPI runs them in its threadpool.
    """
    app = FastAPI(
        title="Agent Coordination API",
        description="Voice command and follow-up dialog endpoints for the multi-agent system",
        version="0.1.0",
    )
    app.state.system = system

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # restrict in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    def health() -> dict:
        return {"status": "ok", "initialized": system.initialized}

    @app.post("/api/voice-command", response_model=WorkflowResponse)
    def voice_command(request: VoiceCommandRequest):
        """Process a voice or text command."""
        if not request.command or not request.command.strip():
            raise HTTPException(status_code=400, detail="command is required")
        if not system.initialized:
            raise HTTPException(status_code=503, detail="Multi-agent system is not initialized")

        try:
            result = system.process_voice_command(
                request.command,
                user_id=request.user_id,
                language_code=request.language_code,
            )
        except ValidationError as e:
            return _error(400, e)
        except SystemNotInitializedError as e:
            return _error(503, e)
        except AgentError as e:
            logger.error(f"voice command failed: {e}")
            return _error(500, e)
        except Exception as e:
            logger.exception("voice command failed unexpectedly")
            return _error(500, e)
        return _convert_result(result)

    @app.post("/api/follow-up", response_model=WorkflowResponse)
    def follow_up(request: FollowUpRequest):
        """Process the answer to a follow-up question."""
        if not request.user_response or not request.user_response.strip():
            raise HTTPException(status_code=400, detail="user_response is required")
        if not system.initialized:
            raise HTTPException(status_code=503, detail="Multi-agent system is not initialized")

        try:
            result = system.process_follow_up_dialog(
                request.initial_query,
                request.user_response,
                request.dialog_context,
                user_id=request.user_id,
                language_code=request.language_code,
            )
        except ValidationError as e:
            return _error(400, e)
        except SystemNotInitializedError as e:
            return _error(503, e)
        except AgentError as e:
            logger.error(f"follow-up failed: {e}")
            return _error(500, e)
        except Exception as e:
            logger.exception("follow-up failed unexpectedly")
            return _error(500, e)
        return _convert_result(result)

    @app.get("/api/workflows")
    def list_workflows() -> list[dict]:
        """Return the workflow history."""
        return [record.to_dict() for record in system.get_workflow_status()]

    @app.get("/api/workflows/{workflow_id}")
    def get_workflow(workflow_id: str) -> dict:
        record = system.get_workflow(workflow_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Workflow not found")
        return record.to_dict()

    @app.get("/api/agents")
    def list_agents() -> list[dict]:
        """Return every agent with its status."""
        return [agent.to_dict() for agent in system.agents]

    return app
