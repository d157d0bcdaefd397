"""
AI Module - the language side of Optigence.

    intent/       what does the user want? (remote LLM -> keyword fallback)
    emotion/      how does the text feel, and what tone fits?
    suggestions/  ranked next actions while the user types
    router/       draft with the right backend, fall back to OpenAI
    providers/    OpenAI, Anthropic, Gemini and Cohere behind one interface
    monitoring/   structured logs, token usage and cost estimates
    memory.py     per-user recall of past requests and feedback
"""
