"""Prompt Texts — the sampling prompt for create-random-user and the generate-fake-user prompt."""

RANDOM_USER_PROMPT = (
    "Generate fake user data. The user should have a realistic name, email, "
    "address, and phone number. Return this data as a JSON object with no "
    "other text or formatter so it can be used with JSON.parse."
)


def build_fake_user_prompt(name: str) -> str:
    return (
        f"Generate a detailed fake user profile for a person named {name}, "
        "including age, address, email, and phone number."
    )
