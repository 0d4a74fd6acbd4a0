"""Main entry point for the agent coordination CLI.

Handles provider selection, one-shot commands, the follow-up dialog loop
and the API server.
"""

import argparse
import sys

from .clients.factory import get_available_providers
from .config import get_settings, load_yaml_config
from .exceptions import AgentError, AuthenticationError, ProviderUnavailableError, RateLimitError
from .logging import setup_logging
from .storage import InMemoryStorage
from .system import MultiAgentSystem
from .types import WorkflowResult


def get_provider_and_model(args: argparse.Namespace, yaml_config: dict) -> tuple[str | None, str | None]:
    """Determine the provider and model to use.

    Priority order:
    1. CLI arguments
    2. Config file (config.yaml)
    3. Environment variables (via pydantic settings)
    4. Auto-detection based on available API keys
    """
    settings = get_settings()
    llm_config = yaml_config.get("llm", {})

    provider = args.provider or llm_config.get("provider") or settings.detect_provider()
    model = args.model or llm_config.get("model") or settings.llm_model

    return provider, model


def build_system(args: argparse.Namespace, yaml_config: dict) -> MultiAgentSystem:
    """Create and initialize the system, exiting on configuration errors."""
    settings = get_settings()
    provider, model = get_provider_and_model(args, yaml_config)

    if not provider:
        print("Error: No LLM provider specified and no API keys found.")
        print("Please set one of the following:")
        print("  - LLM_PROVIDER environment variable")
        print("  - provider in config.yaml")
        print("  - ANTHROPIC_API_KEY, OPENAI_API_KEY, TOGETHER_API_KEY, or GOOGLE_API_KEY")
        sys.exit(1)

    # extra client options, excluding provider/model which are handled separately
    client_config = {
        k: v for k, v in yaml_config.get("llm", {}).items()
        if k not in ["provider", "model"]
    }

    try:
        system = MultiAgentSystem.from_settings(
            settings,
            provider=provider,
            model=model,
            client_config=client_config,
            storage=InMemoryStorage(),
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if not system.initialize(settings.get_api_key_for_provider(provider)):
        print("Error: multi-agent system failed to initialize (is the API key set?)")
        sys.exit(1)
    return system


def print_result(result: WorkflowResult) -> None:
    """Print a workflow result for the terminal."""
    print(f"\n{result.response}")
    if result.generated_content is not None:
        content = result.generated_content
        print(f"\n--- {content.title} ---")
        body = getattr(content, "content", None) or getattr(content, "code", None)
        if isinstance(body, dict):
            for part, source in body.items():
                print(f"\n[{part}]\n{source}")
        elif body:
            print(body)
        modules = getattr(content, "modules", None)
        if modules:
            for module in modules:
                print(f"- {module.title} ({module.duration})")
    if result.requires_follow_up and result.follow_up_questions:
        print("\nFollow-up suggestions:")
        for question in result.follow_up_questions:
            print(f"  * {question}")


def _prompt(message: str) -> str:
    """Read a line from the user; an interrupt counts as an empty answer."""
    try:
        return input(message).strip()
    except (KeyboardInterrupt, EOFError):
        print()
        return ""


def run_dialog(system: MultiAgentSystem, command: str | None, user_id: str, language_code: str) -> None:
    """Run requests and feed answers back while follow-ups are requested.

    With ``command`` set, a single request is processed; otherwise requests
    are read until an empty line.
    """
    one_shot = command is not None

    while True:
        query = command if one_shot else _prompt("\nRequest (empty to quit): ")
        if not query:
            return

        try:
            result = system.process_voice_command(query, user_id, language_code)
            print_result(result)
            while result.requires_follow_up:
                answer = _prompt("\nYour answer (empty to finish): ")
                if not answer:
                    break
                result = system.process_follow_up_dialog(
                    query, answer, result.context, user_id, language_code
                )
                print_result(result)
        except AuthenticationError as e:
            print(f"\nAuthentication error: {e}")
            return
        except (RateLimitError, ProviderUnavailableError) as e:
            print(f"\nProvider error: {e}")
        except AgentError as e:
            print(f"\nError: {e}")

        if one_shot:
            return


def _start_server(system: MultiAgentSystem, host: str, port: int) -> None:
    """Start the API server."""
    try:
        import uvicorn
        from .api import create_app
    except ImportError:
        print("Error: API dependencies not installed.")
        print("Install with: pip install 'agent-coordination[api]'")
        sys.exit(1)

    print(f"Starting API server at http://{host}:{port}")
    print(f"API docs available at http://{host}:{port}/docs")
    uvicorn.run(create_app(system), host=host, port=port)


def main():
    """Main entry point for the agent coordination CLI."""
    parser = argparse.ArgumentParser(description="Multi-agent coordination CLI")
    parser.add_argument(
        "command",
        nargs="?",
        help="Command to process; starts an interactive dialog if omitted"
    )
    parser.add_argument(
        "--provider",
        choices=get_available_providers(),
        help="LLM provider to use (overrides config and auto-detection)"
    )
    parser.add_argument(
        "--model",
        help="LLM model to use (overrides config)"
    )
    parser.add_argument(
        "--user-id",
        help="User id recorded with each workflow (default: anonymous)"
    )
    parser.add_argument(
        "--language-code",
        help="Locale of the input (default: de-DE)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (also settable via AGENT_COORDINATION_LOG_LEVEL env var)"
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Start the API server instead of the CLI"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the API server (default: 8000)"
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host for the API server (default: 127.0.0.1)"
    )
    args = parser.parse_args()

    setup_logging(args.log_level or get_settings().log_level)

    yaml_config = load_yaml_config()
    system = build_system(args, yaml_config)

    if args.serve:
        _start_server(system, args.host, args.port)
        return

    settings = get_settings()
    run_dialog(
        system,
        args.command,
        args.user_id or settings.default_user_id,
        args.language_code or settings.default_language_code,
    )


if __name__ == "__main__":
    main()
