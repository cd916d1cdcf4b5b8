"""Sample jokes loaded on startup when SEED_JOKES is enabled."""

SEED_JOKES = [
    {
        "question": "Why didn't the skeleton fight anyone?",
        "answer": "Because it didn't have the stomach for it!",
        "genre": "funny",
    },
    {
        "question": "Why do programmers prefer dark mode?",
        "answer": "Because light attracts bugs.",
        "genre": "programming",
    },
    {
        "question": "What do you call a fake noodle?",
        "answer": "An impasta.",
        "genre": "puns",
    },
]
