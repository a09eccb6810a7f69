from __future__ import annotations

import os

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "English")

# How long the client shows the marked answer before asking for the next question
NEXT_QUESTION_DELAY_MS = int(os.getenv("NEXT_QUESTION_DELAY_MS", "1250"))

# From this score the client switches from multiple choice to typed answers
TYPED_INPUT_SCORE = 900

MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "1000"))

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173"
    ).split(",")
    if o.strip()
]
