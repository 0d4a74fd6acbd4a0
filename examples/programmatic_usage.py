import os
from dotenv import load_dotenv

# Import the necessary components
from agent_coordination import InMemoryStorage, MultiAgentSystem
from agent_coordination.clients.together import TogetherGenerator

# Load environment variables (API keys)
load_dotenv()


class PrintingObserver:
    """Example observer that just prints what it is told.

    A real deployment would feed these signals into a learning or
    self-repair component.
    """

    def learn_from_user_interaction(self, interaction: dict) -> None:
        print(f"[observer] interaction: {interaction['intent']}")

    def monitor_user_activity(self, activity: dict) -> None:
        print(f"[observer] activity: {activity['type']} success={activity['success']}")


def main():
    # 1. Initialize the text generator
    # You can choose any provider you have keys for

    # Example: building everything from settings / .env
    # system = MultiAgentSystem.from_settings(storage=InMemoryStorage())

    # Example: Using Together AI explicitly
    api_key = os.getenv("TOGETHER_API_KEY")
    if not api_key:
        print("Please set TOGETHER_API_KEY in .env")
        return

    generator = TogetherGenerator(
        api_key=api_key,
        model="meta-llama/Meta-Llama-3.1-70B-Instruct-Turbo",
        client_config={"timeout": 60.0},
    )

    # 2. Build and initialize the system
    storage = InMemoryStorage()
    system = MultiAgentSystem(generator, storage=storage, observers=[PrintingObserver()])
    if not system.initialize(api_key):
        print("Initialization failed")
        return

    # 3. Send a command
    result = system.process_voice_command(
        "Erstelle einen Lernplan zu digitalen Rechten",
        user_id="demo",
        language_code="de-DE",
    )
    print(f"Response: {result.response}")

    # 4. Answer follow-up questions until the assistant has what it needs
    query = "Erstelle einen Lernplan zu digitalen Rechten"
    while result.requires_follow_up and result.generated_content is None:
        answer = input(f"{result.follow_up_questions[0]}\nYour answer: ")
        if not answer.strip():
            break
        result = system.process_follow_up_dialog(query, answer, result.context, user_id="demo")
        print(f"Response: {result.response}")

    if result.generated_content is not None:
        print(f"Generated {result.generated_content.to_dict()['kind']}: {result.generated_content.title}")
    print(f"Stored documents: {len(storage.documents)}")
    print(f"Workflows recorded: {len(system.get_workflow_status())}")


if __name__ == "__main__":
    main()
